"""
Analysis Layer for the LP Analyzer.
Adds market classification, target demographics and media recommendations
to an extraction record.

The LLM is optional. Without it (or when its reply is unusable) a keyword
and price heuristic produces the same typed fields.
"""
import re
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from lp_analyzer.adapters.claude_client import ClaudeClient
from lp_analyzer.models.media_catalog import (
    ACTION_REASONS,
    DEFAULT_MEDIA_IDS,
    MEDIA_DATABASE,
)
from lp_analyzer.models.analysis import (
    AnalysisSource,
    Demographics,
    EnrichedRecord,
    MarketClassification,
    MarketType,
    MediaRecommendation,
)
from lp_analyzer.models.record import ExtractionResult
from lp_analyzer.utils.logger import LayerLogger

MAX_RECOMMENDED_MEDIA = 3

MASS_PRICE_CEILING = 3000
NICHE_PRICE_FLOOR = 5000

MASS_CATEGORIES = ("食品", "健康", "美容", "サプリ", "コスメ", "日用品")
DAILY_USE_CATEGORIES = ("日用", "消耗")
DAILY_USE_WORDS = ("毎日", "日常")
SPECIALIST_MARKERS = ("専門", "プロ", "専用", "特化", "B2B", "法人")

REASON_SELF_RELEVANCE = "自分ごと化させて行動してもらう"
REASON_OFFER = "オファーが魅力的、とにかく安い"
REASON_AUTHORITY = "訴求が強い、権威性がある、悩みが解決できる"

PLACEHOLDER_NOTICE = "data unavailable"


def price_basis(record: ExtractionResult) -> int:
    """Campaign amount, else regular amount, else first number in the display string."""
    if record.prices.campaign:
        return record.prices.campaign.amount
    if record.prices.regular:
        return record.prices.regular.amount
    match = re.search(r"[\d,]+", record.price or "")
    if match:
        digits = match.group(0).replace(",", "")
        if digits.isdigit():
            return int(digits)
    return 0


def classify_market(record: ExtractionResult) -> MarketClassification:
    """Rule-based market type and action reason. Later rules override earlier ones."""
    price = price_basis(record)
    market, reason = MarketType.NICHE.value, REASON_SELF_RELEVANCE

    if 0 < price <= MASS_PRICE_CEILING:
        if any(c in record.category or c in record.title for c in MASS_CATEGORIES):
            market, reason = MarketType.MASS.value, REASON_OFFER

    if any(m in record.category for m in DAILY_USE_CATEGORIES) or any(
        m in record.description for m in DAILY_USE_WORDS
    ):
        market, reason = MarketType.MASS.value, REASON_OFFER

    if price > NICHE_PRICE_FLOOR:
        market, reason = MarketType.NICHE.value, REASON_AUTHORITY

    if any(m in f for f in record.features for m in SPECIALIST_MARKERS):
        market, reason = MarketType.NICHE.value, REASON_AUTHORITY

    name = record.product_name or record.title
    return MarketClassification(
        market_type=market,
        action_reason=reason,
        reasoning=f"{name}の特徴と価格帯から{market}と判定。{reason}の訴求が効果的と分析。",
    )


def _profile_text(record: ExtractionResult) -> str:
    return (record.description + " ".join(record.features)).lower()


def predict_demographics(record: ExtractionResult) -> Demographics:
    text = _profile_text(record)

    if "学生" in text or "young" in text:
        age = "10-20代"
    elif "子育て" in text or "family" in text:
        age = "30-40代"
    elif "シニア" in text or "senior" in text:
        age = "50代以上"
    else:
        age = "30-40代"

    if "美容" in text or "beauty" in text or "コスメ" in text:
        gender = "女性中心"
    elif "メンズ" in text or "男性" in text:
        gender = "男性中心"
    else:
        gender = "男女両方"

    if "共働き" in text or "時短" in text:
        other = "共働き世帯、時短ニーズ"
    elif "健康" in text or "health" in text:
        other = "健康志向"
    elif "高級" in text or "premium" in text:
        other = "高所得層"
    else:
        other = "一般的な消費者層"

    return Demographics(age_range=age, gender=gender, other_characteristics=other)


def _persona(record: ExtractionResult, market_type: str, demographics: Demographics) -> Dict[str, str]:
    niche = market_type == MarketType.NICHE.value
    if "美容" in record.category:
        interests = "美容、健康、SNS"
    elif "食品" in record.category:
        interests = "料理、家族時間、健康管理"
    elif "健康" in record.category:
        interests = "健康、運動、栄養管理"
    else:
        interests = "家族、趣味、自己啓発"
    return {
        "age": "42歳" if niche else "35歳",
        "gender": "女性" if demographics.gender == "女性中心" else "男性",
        "occupation": "専門職" if niche else "事務職",
        "income": "800万円" if niche else "550万円",
        "familyStructure": "配偶者、子供2人の4人家族",
        "interests": interests,
    }


def recommend_media(classification: MarketClassification) -> List[MediaRecommendation]:
    """First media ids of the matching action-reason class, resolved against the catalog."""
    media_ids = DEFAULT_MEDIA_IDS
    for action in ACTION_REASONS:
        if (
            action.market_type == classification.market_type
            and action.label == classification.action_reason
        ):
            media_ids = action.media_ids
            break

    reason = f"{classification.market_type}の「{classification.action_reason}」訴求に適している"
    recommendations = []
    for media_id in media_ids[:MAX_RECOMMENDED_MEDIA]:
        medium = MEDIA_DATABASE[media_id]
        recommendations.append(MediaRecommendation(
            media_id=media_id,
            media_name=medium.name,
            target=medium.target,
            method=medium.method,
            reason=reason,
        ))
    return recommendations


def placeholder_record(url: str, reason: str) -> EnrichedRecord:
    """Clearly labelled stand-in when no document could be acquired."""
    return EnrichedRecord(
        record=ExtractionResult(url=url),
        source=AnalysisSource.PLACEHOLDER,
        notice=f"{PLACEHOLDER_NOTICE}: {reason}",
    )


class AnalysisLayer:
    """
    Analysis Layer - marketing enrichment of an extraction record.

    Principles:
    - The extraction record is passed through untouched
    - LLM output is used only when it parses into the expected shape
    - The heuristic path always fills the typed fields
    """

    def __init__(self, claude: Optional[ClaudeClient] = None):
        self.logger = LayerLogger("analysis_layer")
        self.claude = claude or ClaudeClient()
        self.logger.log_action("init", "completed", claude_available=self.claude.is_available())

    async def enrich(self, record: ExtractionResult) -> Tuple[EnrichedRecord, Dict[str, Any]]:
        """
        Enrich one record.

        Returns:
            (EnrichedRecord, debug_info)
        """
        debug_info: Dict[str, Any] = {}

        if self.claude.is_available():
            payload, debug_info = await self.claude.analyze_product(record)
            if payload is not None:
                enriched = self._from_payload(record, payload)
                if enriched is not None:
                    self.logger.log_decision(decision="use_llm_analysis", reason="valid payload", url=record.url)
                    return enriched, debug_info
            self.logger.log_fallback(
                from_source="llm",
                to_source="heuristic",
                reason=debug_info.get("error", "unusable payload"),
                url=record.url,
            )
        else:
            self.logger.log_decision(
                decision="use_heuristic_analysis",
                reason="LLM not configured",
                url=record.url,
            )

        debug_info["source"] = AnalysisSource.HEURISTIC.value
        return self.analyze_heuristically(record), debug_info

    def analyze_heuristically(self, record: ExtractionResult) -> EnrichedRecord:
        classification = classify_market(record)
        demographics = predict_demographics(record)
        media = recommend_media(classification)
        self.logger.log_action(
            "heuristic_analysis",
            "completed",
            url=record.url,
            market_type=classification.market_type,
            action_reason=classification.action_reason,
            media=[m.media_id for m in media],
        )
        return EnrichedRecord(
            record=record,
            source=AnalysisSource.HEURISTIC,
            classification=classification,
            demographics=demographics,
            media=media,
            analysis={"persona": _persona(record, classification.market_type, demographics)},
        )

    def _from_payload(self, record: ExtractionResult, payload: Dict[str, Any]) -> Optional[EnrichedRecord]:
        try:
            classification = MarketClassification.model_validate(payload.get("classification") or {})
            demographics = Demographics.model_validate(payload.get("demographics") or {})
        except ValidationError as e:
            self.logger.log_error(str(e), error_type="invalid_payload", url=record.url)
            return None

        media = []
        recommendations = payload.get("recommendations") or {}
        for item in recommendations.get("media") or []:
            if not isinstance(item, dict):
                continue
            media_id = str(item.get("mediaId", "")).strip()
            catalog_entry = MEDIA_DATABASE.get(media_id)
            if catalog_entry is None:
                continue
            media.append(MediaRecommendation(
                media_id=media_id,
                media_name=catalog_entry.name,
                target=catalog_entry.target,
                method=catalog_entry.method,
                reason=str(item.get("reason", "")),
            ))
        if not media:
            media = recommend_media(classification)

        return EnrichedRecord(
            record=record,
            source=AnalysisSource.LLM,
            classification=classification,
            demographics=demographics,
            media=media[:MAX_RECOMMENDED_MEDIA],
            analysis=payload,
        )
