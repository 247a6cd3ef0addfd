"""
End-to-end tests: HTML document to canonical ExtractionResult.
"""
import httpx

from lp_analyzer.adapters.fetch_strategies import FetchStrategyChain
from lp_analyzer.layers.assembler import ResultAssembler
from lp_analyzer.layers.extraction import ExtractionService
from lp_analyzer.layers.orchestrator import MultiAttemptOrchestrator

from conftest import LP_URL, mock_transport


class TestAssembler:
    def test_landing_page(self, lp_html):
        result = ResultAssembler().assemble(LP_URL, lp_html, fetch_strategy="standard-headers")
        assert result.title == "Test Product"
        assert result.prices.campaign.amount == 500
        assert result.prices.regular.amount == 1980
        assert result.price == "通常価格1,980円 → 初回限定500円（75%OFF）"
        assert len(result.features) == 3
        assert result.fetch_strategy == "standard-headers"

    def test_completeness_score(self, lp_html):
        result = ResultAssembler().assemble(LP_URL, lp_html)
        # campaign 40 + regular 20 + pair 10 + title 5 + features 10
        assert result.completeness_score() == 85

    def test_page_without_prices(self):
        html = "<html><head><title>会社案内</title></head><body><p>お問い合わせください</p></body></html>"
        result = ResultAssembler().assemble(LP_URL, html)
        assert result.prices.campaign is None
        assert result.prices.regular is None
        assert result.price == ""
        assert result.title == "会社案内"

    def test_category_inferred_from_keywords(self):
        html = "<html><head><title>すっきりサプリ｜公式</title></head><body></body></html>"
        result = ResultAssembler().assemble(LP_URL, html)
        assert result.category == "健康食品・サプリメント"

    def test_category_inferred_from_features(self):
        html = (
            "<html><head><title>Foo</title></head><body>"
            "<ul><li>毎日飲めるサプリで健康をサポートします</li></ul>"
            "</body></html>"
        )
        result = ResultAssembler().assemble(LP_URL, html)
        assert result.category == "健康食品・サプリメント"

    def test_nested_structured_data_does_not_raise(self, lp_html):
        html = lp_html.replace(
            "</head>",
            f'<script type="application/ld+json">{"[" * 100000}</script></head>',
        )
        result = ResultAssembler().assemble(LP_URL, html)
        assert result.structured_data == []
        assert result.prices.campaign.amount == 500

    def test_idempotent(self, lp_html):
        assembler = ResultAssembler()
        assert assembler.assemble(LP_URL, lp_html) == assembler.assemble(LP_URL, lp_html)

    def test_garbage_markup_does_not_raise(self):
        result = ResultAssembler().assemble(LP_URL, "<<<>>><div><p>初回限定<b>500</b>円")
        assert result.url == LP_URL
        assert result.prices.campaign.amount == 500
        assert result.prices.campaign.source == "text"

    def test_camel_case_serialization(self, lp_html):
        data = ResultAssembler().assemble(LP_URL, lp_html).to_json_dict()
        assert data["productName"] == "Test Product"
        assert data["prices"]["discountRate"] == 75
        assert data["prices"]["campaign"]["type"] == "introductory"
        assert "testimonialCount" in data


class TestPipeline:
    async def test_url_to_record(self, lp_html):
        def handler(request):
            return httpx.Response(200, text=lp_html, headers={"content-type": "text/html; charset=utf-8"})

        chain = FetchStrategyChain(transport=mock_transport(handler))
        service = ExtractionService(backends=[MultiAttemptOrchestrator(chain, delays=[0, 2, 5])])
        result = await service.extract(LP_URL)
        assert result.price == "通常価格1,980円 → 初回限定500円（75%OFF）"
        assert result.fetch_strategy == "standard-headers"
