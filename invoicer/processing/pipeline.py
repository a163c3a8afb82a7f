"""Webhook-triggered orchestration: newest CSV in, invoice and archive out."""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Tuple

from invoicer.api.verification import verify_signature
from invoicer.core.config import Settings
from invoicer.core.errors import AuthenticationError, ProcessingError, SourceMissingError
from invoicer.core.models import (
    PipelineResult,
    PipelineStatus,
    ProductRecord,
    RemoteFileEntry,
    WebhookEvent,
)
from invoicer.core.utils import join_path
from invoicer.ingestion.csv_parser import parse_csv
from invoicer.ingestion.transform import transform_records
from invoicer.reporting.invoice import InvoiceAssembler
from invoicer.storage.base import KeyValueStore, RemoteFileStore

logger = logging.getLogger(__name__)

MSG_PROCESSED = "Processing complete"
MSG_NO_FILES = "No files to process"
MSG_ALREADY_ARCHIVED = "File already processed"


def _modified_key(entry: RemoteFileEntry) -> Tuple[int, float]:
    if entry.last_modified is None:
        return (0, 0.0)
    return (1, entry.last_modified.timestamp())


def select_latest_csv(entries: Iterable[RemoteFileEntry]) -> Optional[RemoteFileEntry]:
    """Pick the CSV file with the newest modification time.

    Folders and non-CSV files are ignored. Ties keep the entry listed first and
    entries without a timestamp rank below every dated entry.
    """

    latest: Optional[RemoteFileEntry] = None
    for entry in entries:
        if not entry.is_csv:
            continue
        if latest is None or _modified_key(entry) > _modified_key(latest):
            latest = entry
    return latest


def archive_path_for(processed_folder: str, file_name: str, timestamp_ms: int) -> str:
    return join_path(processed_folder, f"{file_name}_{timestamp_ms}.csv")


class InvoicePipeline:
    """Run one webhook invocation from signature check to uploaded invoice."""

    def __init__(
        self,
        store: RemoteFileStore,
        settings: Settings,
        state_store: KeyValueStore | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.settings = settings
        self.state_store = state_store
        self.sleep = sleep
        self.clock = clock
        self.assembler = InvoiceAssembler(
            store,
            template_path=settings.template_path,
            output_folder=settings.invoice_folder,
            clock=clock,
        )

    async def handle_webhook(self, event: WebhookEvent) -> PipelineResult:
        """Authenticate a delivery, then process the newest CSV file."""

        if not verify_signature(event.body, event.signature, self.settings.app_secret):
            logger.warning("Rejected webhook with invalid signature")
            raise AuthenticationError("Webhook signature mismatch")

        accounts = event.accounts()
        logger.info("Webhook authenticated for %d account(s)", len(accounts))
        result = await self.process_latest()
        self._record_accounts(accounts, result)
        return result

    async def process_latest(self) -> PipelineResult:
        """Settle, discover, download, parse, archive and invoice one file."""

        if self.settings.settle_delay > 0:
            logger.debug("Waiting %.1fs for the storage backend to settle", self.settings.settle_delay)
            await self.sleep(self.settings.settle_delay)

        input_folder = self.settings.input_folder
        entries = await self._run_stage("discover", input_folder, self.store.list_folder, input_folder)
        target = select_latest_csv(entries)
        if target is None:
            logger.info("No CSV files found in %s", input_folder)
            return PipelineResult(status=PipelineStatus.NO_FILES, message=MSG_NO_FILES)
        logger.info("Selected %s (modified %s)", target.path, target.last_modified)

        content = await self._run_stage("download", target.path, self.store.download, target.path)
        text = content.decode("utf-8-sig", errors="replace")
        products = await self._run_stage("parse", target.path, self._to_products, text, target.name)
        logger.info("Parsed %d products from %s", len(products), target.name)
        logger.debug("Products from %s: %s", target.name, [product.to_dict() for product in products])

        archive_path = archive_path_for(
            self.settings.processed_folder, target.name, int(self.clock() * 1000)
        )
        try:
            await self._run_stage("archive", target.path, self.store.move_file, target.path, archive_path)
        except SourceMissingError:
            logger.warning("%s was already moved by another invocation; skipping invoice", target.path)
            return PipelineResult(
                status=PipelineStatus.ALREADY_ARCHIVED,
                message=MSG_ALREADY_ARCHIVED,
                source_path=target.path,
            )
        logger.info("Archived %s to %s", target.path, archive_path)

        invoice_path = None
        if products:
            invoice_path = await self._run_stage("invoice", target.path, self.assembler.generate, products)
        else:
            logger.info("No product rows in %s; no invoice generated", target.name)

        return PipelineResult(
            status=PipelineStatus.PROCESSED,
            message=MSG_PROCESSED,
            source_path=target.path,
            archive_path=archive_path,
            invoice_path=invoice_path,
            product_count=len(products),
        )

    @staticmethod
    def _to_products(text: str, file_name: str) -> List[ProductRecord]:
        return transform_records(parse_csv(text), file_name)

    async def _run_stage(self, stage: str, subject: str, func: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking stage off the event loop and label its failures."""

        try:
            return await asyncio.to_thread(func, *args)
        except SourceMissingError:
            raise
        except ProcessingError:
            logger.exception("Pipeline stage %s failed for %s", stage, subject)
            raise
        except Exception as exc:
            logger.exception("Pipeline stage %s failed unexpectedly for %s", stage, subject)
            raise ProcessingError(f"{stage} failed for {subject}: {exc}") from exc

    def _record_accounts(self, accounts: List[str], result: PipelineResult) -> None:
        if self.state_store is None:
            return
        processed_at = datetime.fromtimestamp(self.clock(), tz=timezone.utc).isoformat()
        for account in accounts:
            self.state_store.put(
                account,
                {
                    "status": result.status.value,
                    "source_path": result.source_path,
                    "archive_path": result.archive_path,
                    "invoice_path": result.invoice_path,
                    "product_count": result.product_count,
                    "processed_at": processed_at,
                },
            )
