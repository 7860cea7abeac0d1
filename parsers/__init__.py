"""
File parsers module.
"""

from parsers.product_import_parser import (
    parse_product_import,
    ProductImportResult,
    ProductCandidate,
    FieldError,
    ImportErrorField,
)

__all__ = [
    "parse_product_import",
    "ProductImportResult",
    "ProductCandidate",
    "FieldError",
    "ImportErrorField",
]
