"""Core building blocks for the invoicer package."""
from invoicer.core.config import Settings
from invoicer.core.errors import (
    AuthenticationError,
    ConfigError,
    DiscoveryError,
    DownloadError,
    InvoicerError,
    MoveError,
    ParseError,
    ProcessingError,
    RemoteStoreError,
    SourceMissingError,
    TemplateError,
    UploadError,
)
from invoicer.core.logging import configure_logging
from invoicer.core.models import (
    InvoiceDocument,
    PipelineResult,
    PipelineStatus,
    ProductRecord,
    RawCsvRecord,
    RemoteFileEntry,
    WebhookEvent,
)

__all__ = [
    "Settings",
    "configure_logging",
    "AuthenticationError",
    "ConfigError",
    "DiscoveryError",
    "DownloadError",
    "InvoicerError",
    "MoveError",
    "ParseError",
    "ProcessingError",
    "RemoteStoreError",
    "SourceMissingError",
    "TemplateError",
    "UploadError",
    "InvoiceDocument",
    "PipelineResult",
    "PipelineStatus",
    "ProductRecord",
    "RawCsvRecord",
    "RemoteFileEntry",
    "WebhookEvent",
]
