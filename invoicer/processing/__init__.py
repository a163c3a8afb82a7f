"""Pipeline orchestration for webhook-triggered invoice runs."""
from invoicer.processing.pipeline import InvoicePipeline, archive_path_for, select_latest_csv

__all__ = ["InvoicePipeline", "archive_path_for", "select_latest_csv"]
