"""Command line entry points for the webhook service and offline invoicing."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from invoicer.core.config import Settings, resolve_env_file
from invoicer.core.errors import InvoicerError
from invoicer.core.logging import configure_logging
from invoicer.core.utils import load_env_file
from invoicer.ingestion.csv_parser import parse_csv
from invoicer.ingestion.transform import transform_records
from invoicer.processing.pipeline import InvoicePipeline
from invoicer.reporting.invoice import build_invoice
from invoicer.storage.dropbox import DropboxFileStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with one sub-command per entry point."""

    parser = argparse.ArgumentParser(description="Turn Dropbox CSV inventory files into Excel invoices")
    parser.add_argument("--env-file", type=Path, help="Optional env file with DROPBOX_* settings")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the webhook server")
    serve.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    serve.add_argument("--port", type=int, help="Port to bind (defaults to PORT or 8080)")
    serve.add_argument(
        "--skip-connection-check",
        action="store_true",
        help="Start without listing the input folder first",
    )

    commands.add_parser("run-once", help="Process the newest CSV once, without a webhook")

    render = commands.add_parser("render", help="Build an invoice from local files")
    render.add_argument("--csv", type=Path, required=True, help="Semicolon separated inventory CSV")
    render.add_argument("--template", type=Path, required=True, help="Excel invoice template")
    render.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Directory to write the generated invoice to",
    )
    return parser


def _dropbox_store(settings: Settings) -> DropboxFileStore:
    return DropboxFileStore(
        settings.dropbox_token,
        timeout=settings.http_timeout,
        list_limit=settings.list_limit,
    )


def _serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    from invoicer.api.server import create_app

    settings.validate()
    store = _dropbox_store(settings)
    if not args.skip_connection_check:
        try:
            store.list_folder(settings.input_folder)
        except InvoicerError as exc:
            raise InvoicerError(f"Dropbox connection failed: {exc}") from exc

    port = args.port or settings.port
    logger.info("Server running on port %d", port)
    logger.info("Configured folders: input=%s archive=%s", settings.input_folder, settings.processed_folder)
    uvicorn.run(create_app(settings, store=store), host=args.host, port=port)


def _run_once(settings: Settings) -> str:
    settings.validate()
    pipeline = InvoicePipeline(_dropbox_store(settings), settings)
    result = asyncio.run(pipeline.process_latest())
    return result.message


def _render(args: argparse.Namespace) -> Path:
    text = args.csv.read_text(encoding="utf-8-sig")
    products = transform_records(parse_csv(text), args.csv.name)
    if not products:
        raise InvoicerError(f"No product rows found in {args.csv}")
    document = build_invoice(args.template.read_bytes(), products)
    args.output_dir.mkdir(parents=True, exist_ok=True)
    output_path = args.output_dir / document.file_name
    output_path.write_bytes(document.content)
    return output_path


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint for the ``invoicer`` console script."""

    args = build_parser().parse_args(argv)
    # LOG_LEVEL may come from the env file
    load_env_file(resolve_env_file(args.env_file))
    configure_logging()

    try:
        if args.command == "render":
            print(f"Wrote {_render(args)}")
            return 0

        settings = Settings.from_env(args.env_file)
        if args.command == "serve":
            _serve(settings, args)
        else:
            print(_run_once(settings))
    except InvoicerError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
