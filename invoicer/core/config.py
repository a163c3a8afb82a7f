"""Environment-driven settings for the webhook service."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from invoicer.core.errors import ConfigError
from invoicer.core.utils import get_config_value, join_path, load_env_file

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = Path(".env")


def resolve_env_file(env_file: Path | None = None) -> Path:
    """Return the explicit env file, else ``INVOICER_ENV_FILE``, else ``.env``."""

    return env_file or Path(os.getenv("INVOICER_ENV_FILE", DEFAULT_ENV_FILE))


def _float_value(key: str, default: float) -> float:
    raw = get_config_value(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from exc


def _int_value(key: str, default: int) -> int:
    raw = get_config_value(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from exc


@dataclass
class Settings:
    """Folders, credentials and timings used by the pipeline and server."""

    dropbox_token: str = ""
    app_secret: str = ""
    input_folder: str = "/csv-filer"
    processed_folder: str = "/processed-csv-files"
    template_folder: str = "/template"
    template_name: str = "test.xlsx"
    invoice_folder: str = "/Teamsport-Invoice"
    port: int = 8080
    settle_delay: float = 2.0
    list_limit: int = 100
    http_timeout: float = 30.0
    status_token: str = ""

    @property
    def template_path(self) -> str:
        return join_path(self.template_folder, self.template_name)

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "Settings":
        """Build settings from environment variables and an optional env file.

        The env file defaults to ``INVOICER_ENV_FILE`` or ``.env`` in the
        working directory. Values already exported in the environment win.
        """

        load_env_file(resolve_env_file(env_file))

        return cls(
            dropbox_token=get_config_value("DROPBOX_TOKEN"),
            app_secret=get_config_value("DROPBOX_APP_SECRET"),
            input_folder=get_config_value("DROPBOX_INPUT_FOLDER", cls.input_folder),
            processed_folder=get_config_value("DROPBOX_PROCESSED_FOLDER", cls.processed_folder),
            template_folder=get_config_value("DROPBOX_TEMPLATE_FOLDER", cls.template_folder),
            template_name=get_config_value("DROPBOX_TEMPLATE_NAME", cls.template_name),
            invoice_folder=get_config_value("DROPBOX_INVOICE_FOLDER", cls.invoice_folder),
            port=_int_value("PORT", cls.port),
            settle_delay=_float_value("WEBHOOK_SETTLE_DELAY", cls.settle_delay),
            list_limit=_int_value("DROPBOX_LIST_LIMIT", cls.list_limit),
            http_timeout=_float_value("HTTP_TIMEOUT", cls.http_timeout),
            status_token=get_config_value("STATUS_TOKEN"),
        )

    def validate(self) -> None:
        """Raise ``ConfigError`` when required credentials are missing."""

        missing = [
            name
            for name, value in (
                ("DROPBOX_TOKEN", self.dropbox_token),
                ("DROPBOX_APP_SECRET", self.app_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")
        if self.settle_delay < 0:
            raise ConfigError("WEBHOOK_SETTLE_DELAY cannot be negative")
        logger.debug(
            "Settings validated (input=%s, processed=%s, invoices=%s)",
            self.input_folder,
            self.processed_folder,
            self.invoice_folder,
        )
