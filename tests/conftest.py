import httpx
import pytest

from lp_analyzer.models.record import (
    ExtractionResult,
    PriceCandidate,
    PriceSummary,
    PriceType,
)

LP_URL = "https://example.com/lp/index.html"

LP_HTML = """<html>
<head><title>Test Product</title></head>
<body>
  <p>初回限定500円</p>
  <p>通常価格1,980円</p>
  <ul>
    <li>天然由来成分を100%使用しています</li>
    <li>毎日続けやすいスティックタイプです</li>
    <li>国産の大麦若葉をたっぷり配合</li>
  </ul>
</body>
</html>"""


@pytest.fixture
def lp_html():
    return LP_HTML


def make_candidate(price_type, amount, text=None, score=0):
    return PriceCandidate(
        type=price_type,
        amount=amount,
        text=text or f"{amount}円",
        position=0,
        priority=0,
        score=score,
    )


def make_result(url=LP_URL, priced=False, **fields):
    """ExtractionResult with optional campaign/regular prices."""
    if priced:
        campaign = make_candidate(PriceType.INTRODUCTORY, 500, "初回限定500円")
        regular = make_candidate(PriceType.REGULAR, 1980, "通常価格1,980円")
        fields.setdefault("prices", PriceSummary(
            campaign=campaign,
            regular=regular,
            all=[campaign, regular],
            discount_rate=75,
        ))
        fields.setdefault("price", "通常価格1,980円 → 初回限定500円（75%OFF）")
    return ExtractionResult(url=url, **fields)


def mock_transport(handler):
    return httpx.MockTransport(handler)
