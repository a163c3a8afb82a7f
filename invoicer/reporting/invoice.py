"""Fill the Excel invoice template with product lines."""
from __future__ import annotations

import logging
import time
import zipfile
from io import BytesIO
from typing import Callable, List, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from invoicer.core.errors import TemplateError
from invoicer.core.models import InvoiceDocument, ProductRecord
from invoicer.core.utils import join_path
from invoicer.storage.base import XLSX_CONTENT_TYPE, RemoteFileStore

logger = logging.getLogger(__name__)

CUSTOMER_CELL = "B5"
FIRST_PRODUCT_ROW = 13

# Column D is left untouched; the template uses it for its own layout.
PRODUCT_COLUMNS = {
    "A": lambda product: product.product_id,
    "B": lambda product: product.style,
    "C": lambda product: product.product_name,
    "E": lambda product: product.amount,
    "F": lambda product: product.rrp,
}


def customer_name_from_file(file_name: str) -> str:
    """Drop a trailing ``.csv`` (exact, case-sensitive) from the source file name."""

    if file_name.endswith(".csv"):
        return file_name[: -len(".csv")]
    return file_name


def invoice_file_name(customer_name: str, timestamp_ms: int) -> str:
    return f"{customer_name}_{timestamp_ms}.xlsx"


def build_invoice(
    template: bytes,
    products: Sequence[ProductRecord],
    timestamp_ms: int | None = None,
) -> InvoiceDocument:
    """Write products into an in-memory copy of ``template`` and serialize it.

    The customer name goes into B5 and one row per product is written from
    row 13 downwards in input order.
    """

    if not products:
        raise ValueError("An invoice needs at least one product")

    try:
        workbook = load_workbook(BytesIO(template))
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise TemplateError(f"Invoice template is not a readable workbook: {exc}") from exc

    sheet = workbook.worksheets[0]
    customer_name = customer_name_from_file(products[0].file_name)
    sheet[CUSTOMER_CELL] = customer_name

    for offset, product in enumerate(products):
        row = FIRST_PRODUCT_ROW + offset
        for column, getter in PRODUCT_COLUMNS.items():
            sheet[f"{column}{row}"] = getter(product)

    buffer = BytesIO()
    workbook.save(buffer)

    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return InvoiceDocument(
        file_name=invoice_file_name(customer_name, timestamp_ms),
        customer_name=customer_name,
        content=buffer.getvalue(),
        row_count=len(products),
    )


class InvoiceAssembler:
    """Download the template, fill it and upload the finished invoice."""

    def __init__(
        self,
        store: RemoteFileStore,
        template_path: str,
        output_folder: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.template_path = template_path
        self.output_folder = output_folder
        self.clock = clock

    def generate(self, products: List[ProductRecord]) -> str:
        """Upload an invoice for ``products`` and return its remote path."""

        template = self.store.download(self.template_path)
        document = build_invoice(template, products, timestamp_ms=int(self.clock() * 1000))
        destination = join_path(self.output_folder, document.file_name)
        self.store.upload_buffer(destination, document.content, XLSX_CONTENT_TYPE, overwrite=True)
        logger.info("Invoice with %d rows uploaded to %s", document.row_count, destination)
        return destination
