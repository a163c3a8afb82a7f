"""Convert parsed CSV rows into typed product records."""
from __future__ import annotations

import logging
from typing import Iterable, List

from invoicer.core.models import ProductRecord, RawCsvRecord
from invoicer.ingestion.common import clean_text, parse_amount, parse_decimal, split_locations

logger = logging.getLogger(__name__)


def to_product_record(raw: RawCsvRecord, file_name: str) -> ProductRecord:
    """Map a single normalized CSV row onto a ``ProductRecord``."""

    if "locations" not in raw:
        logger.warning("Row for product %r in %s has no locations column", raw.get("product_id"), file_name)

    return ProductRecord(
        file_name=file_name,
        product_id=clean_text(raw.get("product_id")),
        style=clean_text(raw.get("style")),
        product_name=clean_text(raw.get("name")),
        size=clean_text(raw.get("size")),
        amount=parse_amount(raw.get("amount")),
        locations=split_locations(raw.get("locations")),
        purchase_price_dkk=parse_decimal(raw.get("purchase_price_dkk")),
        rrp=parse_decimal(raw.get("rrp")),
        tariff_code=clean_text(raw.get("tariff_code")),
        country_of_origin=clean_text(raw.get("country_of_origin")),
    )


def transform_records(rows: Iterable[RawCsvRecord], file_name: str) -> List[ProductRecord]:
    """Convert rows in order; the order decides invoice row placement."""

    return [to_product_record(row, file_name) for row in rows]
