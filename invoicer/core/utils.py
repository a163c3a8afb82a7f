"""Small helpers for configuration and remote paths."""
import logging
import os
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


def get_config_value(key: str, default: str = "") -> str:
    """Return an environment value stripped of whitespace, or ``default`` when blank."""

    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def _parse_env_line(raw_line: str) -> Optional[Tuple[str, str]]:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if key.startswith("export "):
        key = key[len("export "):].strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_file(path: Path) -> None:
    """Export ``KEY=value`` lines from ``path`` without overriding the environment."""

    if not path.exists():
        return

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        logger.debug("Could not load env file %s: %s", path, exc)
        return

    for raw_line in lines:
        parsed = _parse_env_line(raw_line)
        if parsed and parsed[0] not in os.environ:
            os.environ[parsed[0]] = parsed[1]


def join_path(folder: str, name: str) -> str:
    """Join a remote folder and a file name with exactly one slash."""

    return f"{folder.rstrip('/')}/{name.lstrip('/')}"
