"""Status code classification and catalog."""

from envelope_guard.catalog.status_catalog import (
    DEFAULT_CATALOG,
    Category,
    StatusCatalog,
    StatusInfo,
    classify,
    describe,
    error_code_for,
    load_status_catalog,
)

__all__ = [
    "Category",
    "DEFAULT_CATALOG",
    "StatusCatalog",
    "StatusInfo",
    "classify",
    "describe",
    "error_code_for",
    "load_status_catalog",
]
