"""Models package initialization."""
from lp_analyzer.models.record import (
    PriceType,
    CAMPAIGN_TYPES,
    PriceCandidate,
    PriceSummary,
    ExtractionResult,
)
from lp_analyzer.models.analysis import (
    AnalysisSource,
    MarketType,
    MediaRecommendation,
    Demographics,
    MarketClassification,
    EnrichedRecord,
)

__all__ = [
    "PriceType",
    "CAMPAIGN_TYPES",
    "PriceCandidate",
    "PriceSummary",
    "ExtractionResult",
    "AnalysisSource",
    "MarketType",
    "MediaRecommendation",
    "Demographics",
    "MarketClassification",
    "EnrichedRecord",
]
