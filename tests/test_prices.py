"""
Tests for the price extraction and scoring subsystem.
"""
from lp_analyzer.extractors.prices import (
    discount_rate,
    extract_price_candidates,
    extract_prices,
    parse_amount,
    render_price_display,
    score_candidate,
    select_best,
)
from lp_analyzer.models.record import PriceSummary, PriceType


class TestCandidates:
    def test_types_and_amounts(self):
        candidates = extract_price_candidates("<p>初回限定500円</p><p>通常価格1,980円</p>")
        by_type = {(c.type, c.amount) for c in candidates}
        assert (PriceType.INTRODUCTORY, 500) in by_type
        assert (PriceType.REGULAR, 1980) in by_type
        assert (PriceType.GENERIC, 500) in by_type

    def test_sorted_by_score(self):
        candidates = extract_price_candidates(
            "<p>通常価格1,980円</p><p>お試し価格980円</p><p>定期便1,480円</p>"
        )
        scores = [c.score for c in candidates]
        assert scores == sorted(scores, reverse=True)
        # Type priority dominates at equal position band
        assert candidates[0].type == PriceType.TRIAL

    def test_deduplicated_by_amount_and_type(self):
        candidates = extract_price_candidates("<p>通常価格1,980円</p><p>通常価格1,980円</p>")
        regular = [c for c in candidates if c.type == PriceType.REGULAR]
        assert len(regular) == 1
        assert regular[0].position == len("<p>")

    def test_text_fallback_only_when_markup_has_nothing(self):
        html = "<p>初回限定<strong>500</strong>円</p>"
        candidates = extract_price_candidates(html, text="初回限定 500 円")
        assert candidates[0].amount == 500
        assert candidates[0].type == PriceType.INTRODUCTORY
        assert candidates[0].source == "text"

        candidates = extract_price_candidates("<p>通常価格1,000円</p>", text="初回限定 500 円")
        assert all(c.amount != 500 for c in candidates)
        assert all(c.source == "html" for c in candidates)

    def test_full_width_digits(self):
        candidates = extract_price_candidates("<p>通常価格１，９８０円</p>")
        regular = [c for c in candidates if c.type == PriceType.REGULAR]
        assert regular[0].amount == 1980

    def test_yen_sign_and_tax_note(self):
        candidates = extract_price_candidates("<span>通常価格 ¥1,980</span>")
        assert [c.amount for c in candidates if c.type == PriceType.REGULAR] == [1980]

        candidates = extract_price_candidates("<span>通常価格（税込）2,480円</span>")
        assert [c.amount for c in candidates if c.type == PriceType.REGULAR] == [2480]

    def test_no_currency_text(self):
        assert extract_price_candidates("<p>こんにちは</p>", text="こんにちは") == []

    def test_bare_yen_amount(self):
        candidates = extract_price_candidates("<p>500円</p>")
        assert [(c.type, c.amount) for c in candidates] == [(PriceType.GENERIC, 500)]
        summary, price = extract_prices("<p>送料550円</p>")
        assert summary.campaign is None
        assert price == ""

    def test_subscription_first_payment_is_not_introductory(self):
        candidates = extract_price_candidates(
            "<p>定期初回1,980円</p><p>定期便初回1,480円</p><p>通常価格3,980円</p>"
        )
        assert all(c.type != PriceType.INTRODUCTORY for c in candidates)
        summary, _ = extract_prices("<p>定期初回1,980円</p><p>通常価格3,980円</p>")
        assert summary.campaign.type == PriceType.SUBSCRIPTION
        assert summary.campaign.amount == 1980
        assert summary.regular.amount == 3980

    def test_yen_entities(self):
        summary, _ = extract_prices("<p>初回限定500円</p><p>通常価格&yen;1,980</p>")
        assert summary.regular.amount == 1980
        summary, _ = extract_prices("<p>初回限定500円</p><p>通常価格&#165;2,480</p>")
        assert summary.regular.amount == 2480

    def test_context_is_tag_free(self):
        candidates = extract_price_candidates("<div><b>期間限定</b>特別価格1,200円</div>")
        assert all("<" not in c.context for c in candidates)


class TestScoring:
    def test_position_bands(self):
        assert score_candidate(50, 0, "") == 100
        assert score_candidate(50, 1500, "") == 80
        assert score_candidate(50, 6000, "") == 60
        assert score_candidate(50, 20000, "") == 50

    def test_context_bonuses(self):
        assert score_candidate(50, 20000, "期間限定") == 70
        assert score_candidate(50, 20000, "今だけ") == 65
        assert score_candidate(50, 20000, "今なら50%OFF") == 75
        assert score_candidate(50, 20000, "先着100名様") == 60

    def test_parse_amount(self):
        assert parse_amount("1,980") == 1980
        assert parse_amount("¥1,980") == 1980
        assert parse_amount("1,980円") == 1980
        assert parse_amount(",") is None
        assert parse_amount("") is None


class TestSelection:
    def test_end_to_end_display(self):
        summary, price = extract_prices("<p>初回限定500円</p><p>通常価格1,980円</p>")
        assert summary.campaign.amount == 500
        assert summary.regular.amount == 1980
        assert summary.discount_rate == 75
        assert price == "通常価格1,980円 → 初回限定500円（75%OFF）"

    def test_regular_listed_after_campaign(self):
        summary, price = extract_prices("<p>初回限定500円</p><p>通常価格980円</p>")
        assert price == "通常価格980円 → 初回限定500円（49%OFF）"

    def test_inverted_pair_is_swapped(self):
        summary, price = extract_prices("<p>初回限定980円</p><p>通常価格500円</p>")
        assert summary.campaign.amount == 500
        assert summary.regular.amount == 980
        assert price.startswith("初回限定980円 → ")
        assert 0 <= summary.discount_rate <= 100

    def test_campaign_only(self):
        summary, price = extract_prices("<p>お試し価格1,000円</p>")
        assert summary.regular is None
        assert summary.campaign.type == PriceType.TRIAL
        assert price == "お試し価格1,000円"

    def test_nothing_found(self):
        summary, price = extract_prices("<p>お問い合わせください</p>")
        assert summary.campaign is None
        assert summary.regular is None
        assert summary.discount_rate is None
        assert price == ""

    def test_select_best_on_empty_list(self):
        summary = select_best([])
        assert not summary.has_any()
        assert render_price_display(summary) == ""

    def test_render_regular_only(self):
        summary, _ = extract_prices("<p>定価3,300円</p>")
        assert render_price_display(summary) == "定価3,300円"
        assert render_price_display(PriceSummary()) == ""

    def test_idempotent(self):
        html = "<p>初回限定500円</p><p>通常価格1,980円</p>"
        assert extract_prices(html) == extract_prices(html)


class TestDiscountRate:
    def test_rounding(self):
        assert discount_rate(500, 1980) == 75
        assert discount_rate(250, 1000) == 75
        assert discount_rate(1000, 1000) == 0
        assert discount_rate(0, 1000) == 100

    def test_zero_regular(self):
        assert discount_rate(500, 0) == 0
