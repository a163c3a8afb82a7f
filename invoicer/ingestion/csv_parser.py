"""Parser for the semicolon separated inventory exports."""
from __future__ import annotations

import csv
import logging
import re
from typing import List

from invoicer.core.errors import ParseError
from invoicer.core.models import RawCsvRecord

logger = logging.getLogger(__name__)

DELIMITER = ";"

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^a-zA-Z0-9_]")


def _strip_outer_quotes(value: str) -> str:
    """Remove at most one leading and one trailing double quote."""

    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def normalize_header(raw: str) -> str:
    """Turn a header cell like ``"Purchase Price DKK"`` into ``purchase_price_dkk``."""

    header = raw.strip()
    header = header.replace('"', "").replace("\\", "")
    header = _WHITESPACE.sub("_", header)
    header = _NON_WORD.sub("", header)
    return header.lower()


def normalize_value(raw: str) -> str:
    """Strip one layer of surrounding double quotes and trim whitespace."""

    return _strip_outer_quotes(raw).strip()


def clean_csv_text(text: str) -> str:
    """Trim every line and drop the quotes some exporters wrap whole lines in.

    Only ``\\n`` ends a line; ``\\r`` is removed by the trim and other control
    characters stay inside their cell.
    """

    text = text.lstrip("\ufeff")
    lines = []
    for raw_line in text.split("\n"):
        line = _strip_outer_quotes(raw_line.strip())
        if line.strip():
            lines.append(line)
    return "\n".join(lines)


def _split_line(line: str) -> List[str]:
    """Split one line on ``;`` honouring quoted cells.

    Each line gets its own reader, so an unbalanced quote ends with its line
    instead of swallowing the rows after it.
    """

    return next(csv.reader([line], delimiter=DELIMITER), [])


def parse_csv(text: str) -> List[RawCsvRecord]:
    """Parse raw CSV text into one normalized mapping per data row.

    The first non-blank line provides the keys. Quoted cells may contain the
    separator; leftover quotes from exporter line-quoting are removed by
    :func:`normalize_value`. Rows shorter than the header simply lack the
    missing keys.
    """

    cleaned = clean_csv_text(text or "")
    if not cleaned:
        return []

    try:
        rows = [_split_line(line) for line in cleaned.split("\n")]
    except csv.Error as exc:
        raise ParseError(f"Could not split CSV rows: {exc}") from exc

    headers = [normalize_header(cell) for cell in rows[0]]
    records: List[RawCsvRecord] = []
    for line_number, row in enumerate(rows[1:], start=2):
        if len(row) > len(headers):
            logger.debug(
                "Line %d has %d cells for %d headers; extra cells ignored",
                line_number,
                len(row),
                len(headers),
            )
        record: RawCsvRecord = {}
        for key, value in zip(headers, row):
            record[key] = normalize_value(value)
        records.append(record)

    logger.debug("Parsed %d CSV rows with headers %s", len(records), headers)
    return records
