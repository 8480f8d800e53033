"""
Catalog views and client-visible catalog state.
"""

from .view import build_catalog_view, matches_query, bucket_names
from .state import (
    CatalogState,
    ClickCounter,
    tool_clicked,
    counts_reconciled,
    favorite_toggled,
)

__all__ = [
    "build_catalog_view",
    "matches_query",
    "bucket_names",
    "CatalogState",
    "ClickCounter",
    "tool_clicked",
    "counts_reconciled",
    "favorite_toggled",
]
