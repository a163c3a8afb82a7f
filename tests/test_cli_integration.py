"""Integration-style tests that exercise the CLI entrypoint."""
import os
from io import BytesIO
from pathlib import Path

import pytest
from openpyxl import load_workbook

import invoicer.cli as cli
from invoicer.core.models import PipelineResult, PipelineStatus

from conftest import SAMPLE_CSV


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda: None)


def test_render_writes_invoice_workbook(tmp_path: Path, template_bytes: bytes, capsys):
    csv_path = tmp_path / "Customer_Order.csv"
    csv_path.write_text(SAMPLE_CSV, encoding="utf-8")
    template_path = tmp_path / "template.xlsx"
    template_path.write_bytes(template_bytes)
    output_dir = tmp_path / "out"

    exit_code = cli.main(
        ["render", "--csv", str(csv_path), "--template", str(template_path), "--output-dir", str(output_dir)]
    )

    assert exit_code == 0
    written = list(output_dir.glob("Customer_Order_*.xlsx"))
    assert len(written) == 1
    assert "Wrote" in capsys.readouterr().out
    sheet = load_workbook(BytesIO(written[0].read_bytes())).worksheets[0]
    assert sheet["B5"].value == "Customer_Order"
    assert sheet["C13"].value == "Widget"


def test_render_without_rows_fails(tmp_path: Path, template_bytes: bytes):
    csv_path = tmp_path / "empty.csv"
    csv_path.write_text("Product Id;Style\n", encoding="utf-8")
    template_path = tmp_path / "template.xlsx"
    template_path.write_bytes(template_bytes)

    assert cli.main(["render", "--csv", str(csv_path), "--template", str(template_path)]) == 1


def test_run_once_requires_credentials(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.delenv("DROPBOX_TOKEN", raising=False)
    monkeypatch.delenv("DROPBOX_APP_SECRET", raising=False)

    assert cli.main(["--env-file", str(tmp_path / "none.env"), "run-once"]) == 1


def test_run_once_prints_pipeline_message(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys):
    monkeypatch.setenv("DROPBOX_TOKEN", "tok")
    monkeypatch.setenv("DROPBOX_APP_SECRET", "sec")

    async def fake_process(self):
        return PipelineResult(status=PipelineStatus.NO_FILES, message="No files to process")

    monkeypatch.setattr(cli.InvoicePipeline, "process_latest", fake_process)

    assert cli.main(["--env-file", str(tmp_path / "none.env"), "run-once"]) == 0
    assert "No files to process" in capsys.readouterr().out


def test_serve_refuses_to_start_when_dropbox_is_unreachable(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    from invoicer.core.errors import DiscoveryError

    monkeypatch.setenv("DROPBOX_TOKEN", "tok")
    monkeypatch.setenv("DROPBOX_APP_SECRET", "sec")

    def unreachable(self, path):
        raise DiscoveryError("invalid_access_token")

    monkeypatch.setattr(cli.DropboxFileStore, "list_folder", unreachable)

    assert cli.main(["--env-file", str(tmp_path / "none.env"), "serve"]) == 1


def test_env_file_log_level_is_loaded_before_logging_setup(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, template_bytes: bytes
):
    # setenv first so teardown removes the value load_env_file writes
    monkeypatch.setenv("LOG_LEVEL", "")
    monkeypatch.delenv("LOG_LEVEL")
    env_file = tmp_path / "invoicer.env"
    env_file.write_text("LOG_LEVEL=DEBUG\n", encoding="utf-8")
    seen_levels = []
    monkeypatch.setattr(cli, "configure_logging", lambda: seen_levels.append(os.getenv("LOG_LEVEL")))
    csv_path = tmp_path / "Customer.csv"
    csv_path.write_text(SAMPLE_CSV, encoding="utf-8")
    template_path = tmp_path / "template.xlsx"
    template_path.write_bytes(template_bytes)

    exit_code = cli.main(
        [
            "--env-file",
            str(env_file),
            "render",
            "--csv",
            str(csv_path),
            "--template",
            str(template_path),
            "--output-dir",
            str(tmp_path / "out"),
        ]
    )

    assert exit_code == 0
    assert seen_levels == ["DEBUG"]
