"""Data models shared by the webhook pipeline stages."""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

# One parsed CSV row: normalized header key -> trimmed string value.
RawCsvRecord = Dict[str, str]


@dataclass
class WebhookEvent:
    """A single inbound webhook delivery.

    ``body`` holds the exact bytes received on the wire; the signature is
    computed over those bytes, never over a re-serialized payload.
    """

    body: bytes
    signature: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    def accounts(self) -> List[str]:
        """Return the account ids the notification refers to."""

        accounts: List[str] = []
        list_folder = self.payload.get("list_folder")
        if isinstance(list_folder, dict):
            accounts.extend(str(account) for account in list_folder.get("accounts") or [])
        delta = self.payload.get("delta")
        if isinstance(delta, dict):
            accounts.extend(str(user) for user in delta.get("users") or [])
        # Keep first occurrence order while dropping duplicates.
        return list(dict.fromkeys(accounts))


@dataclass
class RemoteFileEntry:
    """A file or folder returned by a remote folder listing."""

    name: str
    path: str
    kind: str = "file"
    last_modified: Optional[datetime] = None

    @property
    def is_csv(self) -> bool:
        return self.kind == "file" and self.name.lower().endswith(".csv")


@dataclass
class ProductRecord:
    """A typed product line derived from one CSV row."""

    file_name: str
    product_id: str = ""
    style: str = ""
    product_name: str = ""
    size: str = ""
    amount: int = 0
    locations: List[str] = field(default_factory=list)
    purchase_price_dkk: float = 0.0
    rrp: float = 0.0
    tariff_code: str = ""
    country_of_origin: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain dictionary representation for logging and JSON."""

        return asdict(self)


@dataclass
class InvoiceDocument:
    """An invoice workbook serialized to xlsx bytes, ready for upload."""

    file_name: str
    customer_name: str
    content: bytes
    row_count: int


class PipelineStatus(str, Enum):
    PROCESSED = "processed"
    NO_FILES = "no_files"
    ALREADY_ARCHIVED = "already_archived"


@dataclass
class PipelineResult:
    """Outcome of one pipeline run, mapped to a short status string for callers."""

    status: PipelineStatus
    message: str
    source_path: Optional[str] = None
    archive_path: Optional[str] = None
    invoice_path: Optional[str] = None
    product_count: int = 0
