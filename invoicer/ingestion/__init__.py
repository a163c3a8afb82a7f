"""CSV ingestion: parsing the inventory export and typing its rows."""
from invoicer.ingestion.common import parse_amount, parse_decimal, split_locations
from invoicer.ingestion.csv_parser import clean_csv_text, normalize_header, normalize_value, parse_csv
from invoicer.ingestion.transform import to_product_record, transform_records

__all__ = [
    "clean_csv_text",
    "normalize_header",
    "normalize_value",
    "parse_amount",
    "parse_csv",
    "parse_decimal",
    "split_locations",
    "to_product_record",
    "transform_records",
]
