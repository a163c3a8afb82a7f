"""Abstract capabilities the pipeline needs from its collaborators."""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from invoicer.core.models import RemoteFileEntry

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class RemoteFileStore(ABC):
    """List, download, upload and move files in a cloud storage backend."""

    @abstractmethod
    def list_folder(self, path: str) -> List[RemoteFileEntry]:
        """Return every entry directly inside ``path``."""

    @abstractmethod
    def get_download_link(self, path: str) -> str:
        """Return a short-lived URL for the file at ``path``."""

    @abstractmethod
    def fetch_link(self, link: str) -> bytes:
        """Download the content behind a link returned by ``get_download_link``."""

    @abstractmethod
    def upload_buffer(
        self,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        overwrite: bool = True,
    ) -> None:
        """Store ``content`` at ``path``; with ``overwrite`` a collision replaces the file."""

    @abstractmethod
    def move_file(self, from_path: str, to_path: str) -> None:
        """Move a file; raises ``SourceMissingError`` when ``from_path`` is gone."""

    def download(self, path: str) -> bytes:
        """Fetch a temporary link for ``path`` and return the file content."""

        return self.fetch_link(self.get_download_link(path))


class KeyValueStore(ABC):
    """Small get/put store for per-account processing state."""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored value for ``key`` or ``None``."""

    @abstractmethod
    def put(self, key: str, value: Dict[str, Any]) -> None:
        """Replace the stored value for ``key``."""

    @abstractmethod
    def items(self) -> Dict[str, Dict[str, Any]]:
        """Return a snapshot of every stored entry."""


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store; its content is lost on restart."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            value = self._data.get(key)
            return dict(value) if value is not None else None

    def put(self, key: str, value: Dict[str, Any]) -> None:
        with self._lock:
            self._data[key] = dict(value)

    def items(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {key: dict(value) for key, value in self._data.items()}
