"""
Canonical extraction record for the LP Analyzer.
This model is the single representation of what was extracted from one
landing page, regardless of which fetch strategy or attempt produced it.
"""
from typing import Any, List, Optional
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PriceType(str, Enum):
    """Commercial type of a detected price."""
    INTRODUCTORY = "introductory"
    TRIAL = "trial"
    CAMPAIGN = "campaign"
    SUBSCRIPTION = "subscription"
    REGULAR = "regular"
    GENERIC = "generic"


# Types that can be selected as the promotional ("campaign") figure
CAMPAIGN_TYPES = (
    PriceType.INTRODUCTORY,
    PriceType.TRIAL,
    PriceType.CAMPAIGN,
    PriceType.SUBSCRIPTION,
)


# Points per present field when ranking fetch attempts
ATTEMPT_SCORE_WEIGHTS = {
    "campaign": 40,
    "regular": 20,
    "price_pair": 10,
    "title": 5,
    "description": 5,
    "features": 10,
    "images": 5,
    "category": 5,
}


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Return the JSON-ready dict used by the presentation layer."""
        return self.model_dump(mode="json", by_alias=True)


class PriceCandidate(CamelModel):
    """One detected price-like substring."""
    type: PriceType
    amount: int = Field(ge=0)
    text: str
    context: str = ""
    position: int = Field(ge=0)
    priority: int
    score: int = 0
    source: str = "html"  # html or text


class PriceSummary(CamelModel):
    """Best campaign/regular pair plus every candidate, sorted by score."""
    campaign: Optional[PriceCandidate] = None
    regular: Optional[PriceCandidate] = None
    all: List[PriceCandidate] = Field(default_factory=list)
    discount_rate: Optional[int] = None

    def has_any(self) -> bool:
        return self.campaign is not None or self.regular is not None


class ExtractionResult(CamelModel):
    """
    Canonical record - the structured output of one pipeline run.

    This is the contract between the extraction pipeline and the
    analysis layer / presentation layer.
    """
    url: str
    title: str = ""
    product_name: str = ""
    description: str = ""
    category: str = ""
    features: List[str] = Field(default_factory=list)
    effects: List[str] = Field(default_factory=list)
    ingredients: List[str] = Field(default_factory=list)
    company: str = ""
    campaign: str = ""
    guarantee: str = ""
    authority: List[str] = Field(default_factory=list)
    testimonial_count: int = Field(ge=0, default=0)
    images: List[str] = Field(default_factory=list)
    structured_data: List[Any] = Field(default_factory=list)
    og_title: str = ""
    og_description: str = ""
    og_image: str = ""
    prices: PriceSummary = Field(default_factory=PriceSummary)
    price: str = ""

    # Which fetch strategy produced the document
    fetch_strategy: Optional[str] = None

    def get_present_fields(self) -> List[str]:
        """Return list of non-empty fields."""
        present = ["url"]
        for name in (
            "title", "product_name", "description", "category", "features",
            "effects", "ingredients", "company", "campaign", "guarantee",
            "authority", "images", "structured_data", "og_title",
            "og_description", "og_image", "price",
        ):
            if getattr(self, name):
                present.append(name)
        if self.testimonial_count:
            present.append("testimonial_count")
        if self.prices.campaign:
            present.append("prices.campaign")
        if self.prices.regular:
            present.append("prices.regular")
        return present

    def get_missing_fields(self) -> List[str]:
        """Return list of empty optional fields."""
        all_optional = [
            "title", "product_name", "description", "category", "features",
            "images", "prices.campaign", "prices.regular", "price",
        ]
        present = self.get_present_fields()
        return [f for f in all_optional if f not in present]

    def completeness_score(self) -> int:
        """
        How complete this record is, used to rank fetch attempts.

        Prices dominate because they are the hardest field to recover
        from a degraded document.
        """
        score = 0
        if self.prices.campaign:
            score += ATTEMPT_SCORE_WEIGHTS["campaign"]
        if self.prices.regular:
            score += ATTEMPT_SCORE_WEIGHTS["regular"]
        if self.prices.campaign and self.prices.regular:
            score += ATTEMPT_SCORE_WEIGHTS["price_pair"]
        for name in ("title", "description", "features", "images", "category"):
            if getattr(self, name):
                score += ATTEMPT_SCORE_WEIGHTS[name]
        return score
