"""
Tests for the field extractors.
"""
from lp_analyzer.extractors import fields
from lp_analyzer.extractors.document import Document

from conftest import LP_URL


def doc(body, head=""):
    return Document.parse(LP_URL, f"<html><head>{head}</head><body>{body}</body></html>")


class TestIdentity:
    def test_title_from_title_tag(self):
        assert fields.extract_title(doc("<h1>見出し</h1>", "<title> Test Product </title>")) == "Test Product"

    def test_title_falls_back_to_h1_then_og(self):
        assert fields.extract_title(doc("<h1>見出し</h1>")) == "見出し"
        og = '<meta property="og:title" content="OGタイトル">'
        assert fields.extract_title(doc("<p>本文</p>", og)) == "OGタイトル"

    def test_clean_title(self):
        assert fields.clean_title("【公式】すっきり青汁｜Brand") == "すっきり青汁"
        assert fields.clean_title("すっきり青汁 公式通販サイト") == "すっきり青汁"
        assert fields.clean_title("[PR]すっきり青汁 - Brand") == "すっきり青汁"

    def test_product_name_prefers_markup(self):
        page = doc('<h1 class="product-title">すっきり青汁</h1>', "<title>トップ｜Brand</title>")
        assert fields.extract_product_name(page) == "すっきり青汁"

    def test_product_name_from_title(self):
        page = doc("<p>本文</p>", "<title>【公式】すっきり青汁｜Brand</title>")
        assert fields.extract_product_name(page) == "すっきり青汁"

    def test_description(self):
        head = '<meta name="description" content="毎朝の一杯に">'
        assert fields.extract_description(doc("", head)) == "毎朝の一杯に"
        head = '<meta property="og:description" content="OG説明">'
        assert fields.extract_description(doc("", head)) == "OG説明"

    def test_open_graph_image_is_absolute(self):
        head = (
            '<meta property="og:title" content="OG">'
            '<meta property="og:image" content="/og.png">'
        )
        og_title, og_description, og_image = fields.extract_open_graph(doc("", head))
        assert og_title == "OG"
        assert og_description == ""
        assert og_image == "https://example.com/og.png"


class TestCategory:
    def test_breadcrumb_second_to_last(self):
        page = doc('<ul class="breadcrumb"><li>ホーム</li><li>サプリメント</li><li>青汁</li></ul>')
        assert fields.extract_category(page) == "サプリメント"

    def test_short_breadcrumb_ignored(self):
        page = doc(
            '<ul class="breadcrumb"><li>ホーム</li><li>青汁</li></ul>'
            '<script type="application/ld+json">{"@type": "Product", "category": "健康食品"}</script>'
        )
        assert fields.extract_category(page) == "健康食品"

    def test_category_class(self):
        page = doc('<span class="item-category">ドリンク</span>')
        assert fields.extract_category(page) == "ドリンク"

    def test_structured_data_in_graph(self):
        page = doc(
            '<script type="application/ld+json">'
            '{"@graph": [{"@type": "WebPage"}, {"@type": "Product", "category": {"name": "美容"}}]}'
            "</script>"
        )
        assert fields.extract_category(page) == "美容"

    def test_infer_category(self):
        assert fields.infer_category("すっきりサプリ", "", "") == "健康食品・サプリメント"
        assert fields.infer_category("", "人気のコスメ", "") == "化粧品・美容"
        assert fields.infer_category("", "", "冷凍の宅配弁当") == "宅配食"
        assert fields.infer_category("Test Product") == ""


class TestFeatures:
    def test_leaf_list_items(self):
        page = doc(
            "<ul>"
            "<li>天然由来成分を100%使用しています</li>"
            "<li>短い</li>"
            "<li>親項目のテキストです長め<ul><li>子項目のテキストで十分な長さ</li></ul></li>"
            "</ul>"
        )
        assert fields.extract_features(page) == [
            "天然由来成分を100%使用しています",
            "子項目のテキストで十分な長さ",
        ]

    def test_bullets_stripped_and_markup_rejected(self):
        page = doc(
            "<ul>"
            "<li>● 毎日続けやすいスティックタイプ</li>"
            "<li>価格は&lt;特別&gt;キャンペーン中です</li>"
            "</ul>"
        )
        assert fields.extract_features(page) == ["毎日続けやすいスティックタイプ"]

    def test_feature_class_and_checkmarks(self):
        page = doc(
            '<div class="point-box"><span class="point">飲みやすい抹茶風味に仕上げました</span></div>'
            "<p>✓ 国産の原料だけを使用しています ✓ 保存料は一切使っていません</p>"
        )
        assert fields.extract_features(page) == [
            "飲みやすい抹茶風味に仕上げました",
            "国産の原料だけを使用しています",
            "保存料は一切使っていません",
        ]

    def test_length_bounds_and_cap(self):
        items = "".join(f"<li>特徴その{i:02d}の説明テキスト</li>" for i in range(15))
        items += f"<li>{'長' * 201}</li>"
        features = fields.extract_features(doc(f"<ul>{items}</ul>"))
        assert len(features) == fields.MAX_FEATURES
        assert all(10 <= len(f) <= 200 for f in features)
        assert all("<" not in f and ">" not in f for f in features)

    def test_deduplicated(self):
        page = doc("<ul><li>同じ特徴が二回出てきます</li><li>同じ特徴が二回出てきます</li></ul>")
        assert fields.extract_features(page) == ["同じ特徴が二回出てきます"]


class TestSellingPoints:
    def test_effects(self):
        page = doc(
            "<p>肌の調子をサポートします</p>"
            "<p>関係のない文章です</p>"
            f"<p>{'効果' * 80}</p>"
        )
        assert fields.extract_effects(page) == ["肌の調子をサポートします"]

    def test_ingredients(self):
        page = doc("<p>原材料：大麦若葉、ケール、抹茶</p>")
        assert fields.extract_ingredients(page) == ["大麦若葉", "ケール", "抹茶"]

    def test_ingredients_need_colon(self):
        assert fields.extract_ingredients(doc("<p>厳選した成分を配合</p>")) == []

    def test_company_inline_and_table(self):
        assert fields.extract_company(doc("<p>販売元：株式会社テスト</p>")) == "株式会社テスト"
        table = "<table><tr><th>販売元</th><td>株式会社サンプル</td></tr></table>"
        assert fields.extract_company(doc(table)) == "株式会社サンプル"

    def test_company_class(self):
        assert fields.extract_company(doc('<div class="company-name">サンプル商事</div>')) == "サンプル商事"

    def test_campaign(self):
        page = doc("<p>今だけ送料無料キャンペーン実施中！</p>")
        assert fields.extract_campaign(page) == "今だけ送料無料キャンペーン実施中"

    def test_campaign_ignores_bare_nav_link(self):
        assert fields.extract_campaign(doc('<a href="/cp">キャンペーン</a>')) == ""

    def test_guarantee(self):
        assert fields.extract_guarantee(doc("<p>30日間全額返金保証付き</p>")) == "30日間全額返金保証"
        assert fields.extract_guarantee(doc("<p>保証なし</p>")) == ""

    def test_authority(self):
        page = doc("<p>医師監修のサプリ。特許取得済み。</p><p>医師監修</p>")
        assert fields.extract_authority(page) == ["医師監修", "特許取得済み"]

    def test_testimonial_count(self):
        page = doc("<h2>お客様の声</h2><p>口コミ多数</p><p>レビューを見る</p>")
        assert fields.count_testimonials(page) == 3


class TestImagesAndStructuredData:
    def test_images(self):
        page = doc(
            '<img src="banner.png">'
            '<img src="/img/product.jpg">'
            '<img src="http://[invalid/x.png">'
            '<img src="data:image/png;base64,AAAA">'
            '<img src="icon.svg">'
            '<img src="photo.webp?v=2">'
            '<img src="banner.png">'
        )
        assert fields.extract_images(page) == [
            "https://example.com/img/product.jpg",
            "https://example.com/lp/banner.png",
            "https://example.com/lp/photo.webp?v=2",
        ]

    def test_images_capped(self):
        imgs = "".join(f'<img src="/img/{i}.jpg">' for i in range(20))
        assert len(fields.extract_images(doc(imgs))) == fields.MAX_IMAGES

    def test_absolutize(self):
        assert fields.absolutize(LP_URL, "a.png") == "https://example.com/lp/a.png"
        assert fields.absolutize(LP_URL, "http://[invalid/x.png") is None
        assert fields.absolutize(LP_URL, "javascript:void(0)") is None
        assert fields.absolutize(LP_URL, "") is None

    def test_structured_data_skips_invalid_blocks(self):
        page = doc(
            '<script type="application/ld+json">{"@type": "Product", "name": "A"}</script>'
            '<script type="application/ld+json">{bad json</script>'
        )
        assert fields.extract_structured_data(page) == [{"@type": "Product", "name": "A"}]

    def test_structured_data_skips_deeply_nested_block(self):
        page = doc(
            f'<script type="application/ld+json">{"[" * 100000}</script>'
            '<script type="application/ld+json">{"@type": "Product"}</script>'
        )
        assert fields.extract_structured_data(page) == [{"@type": "Product"}]

    def test_flatten_jsonld(self):
        data = [{"@graph": [{"@type": "A"}, {"@type": "B"}]}, {"@type": "C"}, "noise"]
        assert [n["@type"] for n in fields.flatten_jsonld(data)] == ["A", "B", "C"]
