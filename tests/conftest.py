"""Shared fixtures: an in-memory file store, a template workbook and settings."""
import sys
from collections import Counter
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest
from openpyxl import Workbook

# Ensure repository root is on sys.path for module resolution
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from invoicer.core.config import Settings
from invoicer.core.errors import DownloadError, SourceMissingError
from invoicer.core.models import RemoteFileEntry
from invoicer.storage.base import RemoteFileStore

SAMPLE_CSV = (
    "Product Id;Style;Name;Size;Amount;Locations;Purchase Price DKK;RRP;Tariff Code;Country of Origin\n"
    '"P1";"S1";"Widget";"M";"10";"A-B";"100,00";"150,00";"8471";"DK"\n'
)

FIXED_NOW = 1_700_000_000.0


class FakeFileStore(RemoteFileStore):
    """Dictionary-backed store that records every call it receives."""

    def __init__(self) -> None:
        self.files: Dict[str, bytes] = {}
        self.modified: Dict[str, Optional[datetime]] = {}
        self.folders: List[str] = []
        self.calls: Counter = Counter()
        self.uploads: List[Tuple[str, str, bool]] = []
        self.failures: Dict[str, Exception] = {}

    def add_file(self, path: str, content: bytes | str, modified: Optional[datetime] = None) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.files[path] = content
        self.modified[path] = modified

    def add_folder(self, path: str) -> None:
        self.folders.append(path)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def _record(self, name: str) -> None:
        self.calls[name] += 1
        if name in self.failures:
            raise self.failures[name]

    @staticmethod
    def _parent(path: str) -> str:
        return path.rsplit("/", 1)[0] or "/"

    def list_folder(self, path: str) -> List[RemoteFileEntry]:
        self._record("list_folder")
        entries = [
            RemoteFileEntry(name=item.rsplit("/", 1)[1], path=item, kind="folder")
            for item in self.folders
            if self._parent(item) == path
        ]
        entries.extend(
            RemoteFileEntry(
                name=item.rsplit("/", 1)[1],
                path=item,
                kind="file",
                last_modified=self.modified.get(item),
            )
            for item in self.files
            if self._parent(item) == path
        )
        return entries

    def get_download_link(self, path: str) -> str:
        self._record("get_download_link")
        if path not in self.files:
            raise DownloadError(f"{path} not found")
        return f"fake://{path}"

    def fetch_link(self, link: str) -> bytes:
        self._record("fetch_link")
        return self.files[link[len("fake://"):]]

    def upload_buffer(self, path, content, content_type="application/octet-stream", overwrite=True) -> None:
        self._record("upload_buffer")
        self.files[path] = content
        self.uploads.append((path, content_type, overwrite))

    def move_file(self, from_path: str, to_path: str) -> None:
        self._record("move_file")
        if from_path not in self.files:
            raise SourceMissingError(f"{from_path} no longer exists")
        self.files[to_path] = self.files.pop(from_path)
        self.modified[to_path] = self.modified.pop(from_path, None)


def make_template() -> bytes:
    """Build a small invoice template resembling the production layout."""

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Faktura"
    sheet["A1"] = "FAKTURA"
    sheet["A5"] = "Kunde:"
    for column, label in zip("ABCDEF", ["Varenr", "Style", "Navn", "", "Antal", "Vejl. pris"]):
        if label:
            sheet[f"{column}12"] = label
    workbook.create_sheet("Noter")["A1"] = "keep"
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def utc(*parts: int) -> datetime:
    return datetime(*parts, tzinfo=timezone.utc)


@pytest.fixture
def template_bytes() -> bytes:
    return make_template()


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at the fake store folders, without a settle delay."""

    return Settings(
        dropbox_token="token",
        app_secret="secret",
        input_folder="/csv-filer",
        processed_folder="/processed-csv-files",
        template_folder="/template",
        template_name="test.xlsx",
        invoice_folder="/Teamsport-Invoice",
        settle_delay=0,
    )


@pytest.fixture
def store(template_bytes: bytes) -> FakeFileStore:
    """A store that already holds the invoice template."""

    fake = FakeFileStore()
    fake.add_file("/template/test.xlsx", template_bytes)
    return fake
