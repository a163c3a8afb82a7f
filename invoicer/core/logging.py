"""Logging setup shared by the webhook server, the CLI and the pipeline."""
from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# HTTP client libraries log every request at INFO/DEBUG.
_CHATTY_LOGGERS = ("urllib3", "httpx", "httpcore")


def configure_logging(level: str | None = None) -> None:
    """Initialize root logging once for the process.

    ``level`` falls back to ``LOG_LEVEL`` and then ``INFO``. Below DEBUG the
    HTTP client loggers are capped at WARNING so Dropbox calls do not drown
    out the per-webhook stage messages.
    """

    resolved_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=resolved_level, format=LOG_FORMAT)
    if resolved_level != "DEBUG":
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
