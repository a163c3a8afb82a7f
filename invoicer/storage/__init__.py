"""Remote file store and state store capabilities."""
from invoicer.storage.base import (
    XLSX_CONTENT_TYPE,
    InMemoryKeyValueStore,
    KeyValueStore,
    RemoteFileStore,
)
from invoicer.storage.dropbox import DropboxFileStore

__all__ = [
    "XLSX_CONTENT_TYPE",
    "DropboxFileStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "RemoteFileStore",
]
