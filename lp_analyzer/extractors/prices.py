"""
Price extraction and scoring.

Japanese landing pages mention many numbers: first-time offers, crossed-out
list prices, shipping fees, point rewards. This module finds every
price-bearing substring, types it by commercial meaning, scores it, and
picks the campaign/regular pair shown to the user.

All rules live in one table (PRICE_RULES). Exact priorities and bonuses
are tuning constants; only the relative order of the types matters:

    introductory > trial > campaign > subscription > regular > generic
"""
from html import unescape
import math
import re
import unicodedata
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Tuple

from lp_analyzer.extractors.document import collapse_whitespace, strip_tags
from lp_analyzer.models.record import (
    CAMPAIGN_TYPES,
    PriceCandidate,
    PriceSummary,
    PriceType,
)

# Characters of surrounding text kept as candidate context
CONTEXT_RADIUS = 50

# (max offset, bonus) - earlier on the page scores higher
POSITION_BONUSES: Tuple[Tuple[int, int], ...] = (
    (1000, 50),
    (5000, 30),
    (10000, 10),
)

# (pattern over the context, bonus)
CONTEXT_BONUSES: Tuple[Tuple[Pattern, int], ...] = (
    (re.compile(r"限定"), 20),
    (re.compile(r"今だけ"), 15),
    (re.compile(r"\d+\s*%\s*OFF", re.I), 25),
    (re.compile(r"\d+\s*名様"), 10),
)

# Amount: "¥1,980" / "1,980円" / "1,980 円"
_AMOUNT = r"(?:[¥]\s*(?P<yen>[\d,]+)|(?P<num>[\d,]+)\s*円)"

# Optional "(税込)" style note between label and amount
_NOTE = r"(?:[(][^()<]{0,10}[)])?"


@dataclass(frozen=True)
class PriceRule:
    """One row of the price table."""
    pattern: Pattern
    type: PriceType
    priority: int


# "初回" directly after a subscription word is a subscription first payment
_NOT_SUBSCRIPTION = "(?<!定期)(?<!定期便)(?<!定期コース)(?<!定期購入)"


def _labelled(label: str, price_type: PriceType, priority: int) -> PriceRule:
    """Rule for '<label>[価格][:][(note)] <amount>'."""
    pattern = re.compile(
        rf"{label}(?:価格)?[\s:]*{_NOTE}[\s:]*{_AMOUNT}"
    )
    return PriceRule(pattern, price_type, priority)


PRICE_RULES: Tuple[PriceRule, ...] = (
    # First purchase
    _labelled(f"{_NOT_SUBSCRIPTION}初回限定", PriceType.INTRODUCTORY, 100),
    _labelled(f"{_NOT_SUBSCRIPTION}初回特別", PriceType.INTRODUCTORY, 99),
    _labelled(f"{_NOT_SUBSCRIPTION}初回のみ", PriceType.INTRODUCTORY, 98),
    _labelled("はじめての方限定", PriceType.INTRODUCTORY, 97),
    _labelled(f"{_NOT_SUBSCRIPTION}初回", PriceType.INTRODUCTORY, 96),
    # Trial / sample
    _labelled("お試し", PriceType.TRIAL, 90),
    _labelled("トライアル", PriceType.TRIAL, 89),
    _labelled("モニター", PriceType.TRIAL, 88),
    _labelled("体験", PriceType.TRIAL, 87),
    # Time-limited campaign
    _labelled("今だけ", PriceType.CAMPAIGN, 80),
    _labelled("期間限定", PriceType.CAMPAIGN, 79),
    _labelled("特別", PriceType.CAMPAIGN, 78),
    _labelled("キャンペーン", PriceType.CAMPAIGN, 77),
    _labelled("限定", PriceType.CAMPAIGN, 76),
    # Subscription first payment
    _labelled("定期初回", PriceType.SUBSCRIPTION, 70),
    _labelled("定期便(?:初回)?", PriceType.SUBSCRIPTION, 69),
    _labelled("定期コース(?:初回)?", PriceType.SUBSCRIPTION, 68),
    _labelled("定期購入(?:初回)?", PriceType.SUBSCRIPTION, 67),
    # Regular / list price
    _labelled("通常", PriceType.REGULAR, 50),
    _labelled("定価", PriceType.REGULAR, 49),
    _labelled("標準", PriceType.REGULAR, 48),
    _labelled("本体", PriceType.REGULAR, 47),
    _labelled("メーカー希望小売", PriceType.REGULAR, 46),
    # Catch-all currency amounts
    PriceRule(re.compile(r"[¥](?P<yen>[\d,]+)"), PriceType.GENERIC, 10),
    PriceRule(re.compile(r"(?P<num>[\d,]+)円"), PriceType.GENERIC, 9),
)


def parse_amount(raw: Optional[str]) -> Optional[int]:
    """'1,980' / '¥1,980' / '1,980円' -> 1980; None when not a number."""
    if not raw:
        return None
    digits = re.sub(r"[¥￥,円\s]", "", raw)
    if not digits.isdigit():
        return None
    return int(digits)


def _position_bonus(position: int) -> int:
    for limit, bonus in POSITION_BONUSES:
        if position < limit:
            return bonus
    return 0


def _context_bonus(context: str) -> int:
    return sum(bonus for pattern, bonus in CONTEXT_BONUSES if pattern.search(context))


def score_candidate(priority: int, position: int, context: str) -> int:
    """Static priority + position band bonus + context keyword bonus."""
    return priority + _position_bonus(position) + _context_bonus(context)


def _scan(corpus: str, source: str) -> List[PriceCandidate]:
    # &yen; / &#165; become ¥ before NFKC folds full-width forms
    corpus = unicodedata.normalize("NFKC", unescape(corpus))
    found = []
    for rule in PRICE_RULES:
        for match in rule.pattern.finditer(corpus):
            groups = match.groupdict()
            amount = parse_amount(groups.get("yen") or groups.get("num"))
            if amount is None:
                continue
            start, end = match.span()
            context = strip_tags(
                corpus[max(0, start - CONTEXT_RADIUS):end + CONTEXT_RADIUS]
            )
            found.append(PriceCandidate(
                type=rule.type,
                amount=amount,
                text=collapse_whitespace(match.group(0)),
                context=context,
                position=start,
                priority=rule.priority,
                source=source,
            ))
    return found


def _deduplicate(candidates: Iterable[PriceCandidate]) -> List[PriceCandidate]:
    """Keep the first candidate for each (amount, type) pair."""
    seen = set()
    unique = []
    for candidate in candidates:
        key = (candidate.amount, candidate.type)
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def extract_price_candidates(html: str, text: Optional[str] = None) -> List[PriceCandidate]:
    """
    Every distinct price candidate in a document, best first.

    Args:
        html: raw document markup
        text: tag-stripped rendering, searched only when the markup
              yields nothing

    Returns:
        Candidates deduplicated by (amount, type), sorted by score
    """
    candidates = _scan(html or "", "html")
    if not candidates and text:
        candidates = _scan(text, "text")

    candidates = _deduplicate(candidates)
    for candidate in candidates:
        candidate.score = score_candidate(
            candidate.priority, candidate.position, candidate.context
        )
    # sorted() is stable: equal scores keep scan order
    return sorted(candidates, key=lambda c: c.score, reverse=True)


def discount_rate(campaign_amount: int, regular_amount: int) -> int:
    """round((1 - campaign/regular) * 100), half rounded up, clamped to 0..100."""
    if regular_amount <= 0:
        return 0
    rate = math.floor((1 - campaign_amount / regular_amount) * 100 + 0.5)
    return max(0, min(100, rate))


def select_best(candidates: List[PriceCandidate]) -> PriceSummary:
    """Pick the best campaign and regular candidates from a sorted list."""
    campaign = next((c for c in candidates if c.type in CAMPAIGN_TYPES), None)
    regular = next((c for c in candidates if c.type == PriceType.REGULAR), None)

    rate = None
    if campaign and regular:
        # The promotional figure is the lower one by convention
        if campaign.amount > regular.amount:
            campaign, regular = regular, campaign
        rate = discount_rate(campaign.amount, regular.amount)

    return PriceSummary(
        campaign=campaign,
        regular=regular,
        all=list(candidates),
        discount_rate=rate,
    )


def render_price_display(summary: PriceSummary) -> str:
    """Human readable price line: 'regular → campaign（N%OFF）'."""
    campaign, regular = summary.campaign, summary.regular
    if campaign and regular:
        rate = summary.discount_rate
        if rate is None:
            rate = discount_rate(campaign.amount, regular.amount)
        return f"{regular.text} → {campaign.text}（{rate}%OFF）"
    if campaign:
        return campaign.text
    if regular:
        return regular.text
    return ""


def extract_prices(html: str, text: Optional[str] = None) -> Tuple[PriceSummary, str]:
    """Run the whole price subsystem: candidates, selection and display."""
    summary = select_best(extract_price_candidates(html, text))
    return summary, render_price_display(summary)
