"""
Analysis models: the enriched record handed to the presentation layer.
"""
from typing import Any, Dict, List, Optional
from enum import Enum
from pydantic import Field

from lp_analyzer.models.record import CamelModel, ExtractionResult


class AnalysisSource(str, Enum):
    """Where the analysis payload came from."""
    LLM = "llm"
    HEURISTIC = "heuristic"
    PLACEHOLDER = "placeholder"


class MarketType(str, Enum):
    """Market segmentation."""
    NICHE = "ニッチ"
    MASS = "マス向け"


class MediaRecommendation(CamelModel):
    """One recommended advertising medium."""
    media_id: str
    media_name: str
    target: str
    method: str
    reason: str = ""


class Demographics(CamelModel):
    """Predicted target audience."""
    age_range: str = ""
    gender: str = ""
    other_characteristics: str = ""


class MarketClassification(CamelModel):
    """Market type and the action reason that drives media choice."""
    market_type: str
    action_reason: str
    reasoning: str = ""


class EnrichedRecord(CamelModel):
    """
    Extraction record plus marketing analysis.

    `analysis` carries the raw LLM payload when the LLM produced one;
    the typed fields are always filled (from the LLM payload or heuristics).
    """
    record: ExtractionResult
    source: AnalysisSource
    classification: Optional[MarketClassification] = None
    demographics: Optional[Demographics] = None
    media: List[MediaRecommendation] = Field(default_factory=list)
    analysis: Dict[str, Any] = Field(default_factory=dict)
    notice: Optional[str] = None
