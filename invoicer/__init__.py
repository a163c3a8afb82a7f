"""Webhook-driven pipeline turning Dropbox CSV inventory files into Excel invoices."""
from invoicer.api import compute_signature, verify_signature
from invoicer.core import (
    PipelineResult,
    PipelineStatus,
    ProductRecord,
    RemoteFileEntry,
    Settings,
    WebhookEvent,
    configure_logging,
)
from invoicer.ingestion import parse_csv, transform_records
from invoicer.processing import InvoicePipeline, select_latest_csv
from invoicer.reporting import InvoiceAssembler, build_invoice
from invoicer.storage import DropboxFileStore, InMemoryKeyValueStore, RemoteFileStore

__all__ = [
    "DropboxFileStore",
    "InMemoryKeyValueStore",
    "InvoiceAssembler",
    "InvoicePipeline",
    "PipelineResult",
    "PipelineStatus",
    "ProductRecord",
    "RemoteFileEntry",
    "RemoteFileStore",
    "Settings",
    "WebhookEvent",
    "build_invoice",
    "compute_signature",
    "configure_logging",
    "parse_csv",
    "select_latest_csv",
    "transform_records",
    "verify_signature",
]
