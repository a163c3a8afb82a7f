"""Dropbox HTTP API binding for the remote file store."""
from __future__ import annotations

import json
import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from invoicer.core.errors import (
    DiscoveryError,
    DownloadError,
    MoveError,
    SourceMissingError,
    UploadError,
)
from invoicer.core.models import RemoteFileEntry
from invoicer.storage.base import RemoteFileStore

logger = logging.getLogger(__name__)

API_URL = "https://api.dropboxapi.com/2"
CONTENT_URL = "https://content.dropboxapi.com/2"


def _parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    """Parse Dropbox ``server_modified`` values like ``2024-03-01T10:15:00Z``."""

    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable Dropbox timestamp %r", raw)
        return None


def _entry_from_metadata(metadata: Dict[str, Any]) -> RemoteFileEntry:
    return RemoteFileEntry(
        name=metadata.get("name", ""),
        path=metadata.get("path_display") or metadata.get("path_lower") or "",
        kind=metadata.get(".tag", "file"),
        last_modified=_parse_timestamp(metadata.get("server_modified")),
    )


def _error_summary(response: requests.Response) -> str:
    """Return Dropbox's machine-readable error summary when present."""

    try:
        return str(response.json().get("error_summary", ""))
    except ValueError:
        return response.text[:200]


class DropboxFileStore(RemoteFileStore):
    """Remote file store backed by the Dropbox v2 HTTP endpoints."""

    def __init__(
        self,
        token: str,
        timeout: float = 30.0,
        list_limit: int = 100,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout = timeout
        self.list_limit = list_limit
        self._session = session
        self._local = threading.local()
        self._auth_header = {"Authorization": f"Bearer {token}"}

    @property
    def session(self) -> requests.Session:
        """The injected session, or one ``requests.Session`` per worker thread.

        Pipeline stages run in ``asyncio.to_thread`` workers and a
        ``requests.Session`` is not safe to share across threads.
        """
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def _rpc(self, endpoint: str, payload: Dict[str, Any]) -> requests.Response:
        return self.session.post(
            f"{API_URL}/{endpoint}",
            headers={**self._auth_header, "Content-Type": "application/json"},
            json=payload,
            timeout=self.timeout,
        )

    def list_folder(self, path: str) -> List[RemoteFileEntry]:
        """List ``path``, following ``list_folder/continue`` while results remain."""

        entries: List[RemoteFileEntry] = []
        try:
            response = self._rpc("files/list_folder", {"path": path, "limit": self.list_limit})
            while True:
                if not response.ok:
                    raise DiscoveryError(
                        f"Listing {path} failed ({response.status_code}): {_error_summary(response)}"
                    )
                body = response.json()
                entries.extend(_entry_from_metadata(item) for item in body.get("entries", []))
                if not body.get("has_more"):
                    break
                response = self._rpc("files/list_folder/continue", {"cursor": body["cursor"]})
        except requests.RequestException as exc:
            raise DiscoveryError(f"Listing {path} failed: {exc}") from exc

        logger.debug("Listed %d entries in %s", len(entries), path)
        return entries

    def get_download_link(self, path: str) -> str:
        try:
            response = self._rpc("files/get_temporary_link", {"path": path})
        except requests.RequestException as exc:
            raise DownloadError(f"Temporary link for {path} failed: {exc}") from exc
        if not response.ok:
            raise DownloadError(
                f"Temporary link for {path} failed ({response.status_code}): {_error_summary(response)}"
            )
        return response.json()["link"]

    def fetch_link(self, link: str) -> bytes:
        try:
            response = self.session.get(link, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DownloadError(f"Downloading temporary link failed: {exc}") from exc
        return response.content

    def upload_buffer(
        self,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        overwrite: bool = True,
    ) -> None:
        # The content endpoint only accepts octet-stream bodies; the file type
        # is implied by the path extension.
        logger.debug("Uploading %d bytes (%s) to %s", len(content), content_type, path)
        api_arg = {
            "path": path,
            "mode": "overwrite" if overwrite else "add",
            "autorename": False,
            "mute": False,
        }
        try:
            response = self.session.post(
                f"{CONTENT_URL}/files/upload",
                headers={
                    **self._auth_header,
                    "Content-Type": "application/octet-stream",
                    "Dropbox-API-Arg": json.dumps(api_arg),
                },
                data=content,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise UploadError(f"Upload to {path} failed: {exc}") from exc
        if not response.ok:
            raise UploadError(f"Upload to {path} failed ({response.status_code}): {_error_summary(response)}")

    def move_file(self, from_path: str, to_path: str) -> None:
        try:
            response = self._rpc(
                "files/move_v2",
                {"from_path": from_path, "to_path": to_path, "autorename": False},
            )
        except requests.RequestException as exc:
            raise MoveError(f"Moving {from_path} to {to_path} failed: {exc}") from exc
        if response.ok:
            return

        summary = _error_summary(response)
        if response.status_code == 409 and summary.startswith("from_lookup/not_found"):
            raise SourceMissingError(f"{from_path} no longer exists")
        raise MoveError(f"Moving {from_path} to {to_path} failed ({response.status_code}): {summary}")
