"""Extractors package: pure functions from a fetched document to record fields."""
from lp_analyzer.extractors.document import Document
from lp_analyzer.extractors.prices import (
    PRICE_RULES,
    extract_price_candidates,
    extract_prices,
    render_price_display,
    select_best,
)

__all__ = [
    "Document",
    "PRICE_RULES",
    "extract_price_candidates",
    "extract_prices",
    "render_price_display",
    "select_best",
]
