"""Invoice generation from the Excel template."""
from invoicer.reporting.invoice import (
    InvoiceAssembler,
    build_invoice,
    customer_name_from_file,
    invoice_file_name,
)

__all__ = ["InvoiceAssembler", "build_invoice", "customer_name_from_file", "invoice_file_name"]
