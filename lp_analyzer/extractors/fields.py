"""
Field extractors for landing pages.

Each extractor is a pure function of a parsed Document. They never raise
on odd markup: a field that cannot be found is returned empty.
"""
import json
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import Tag

from lp_analyzer.extractors.document import Document, collapse_whitespace
from lp_analyzer.utils.logger import LayerLogger

logger = LayerLogger("field_extractors")

MAX_FEATURES = 10
MAX_EFFECTS = 5
MAX_INGREDIENTS = 10
MAX_IMAGES = 10
MAX_CAMPAIGN_LENGTH = 100
MIN_CAMPAIGN_LENGTH = 8
FEATURE_LENGTH = (10, 200)
EFFECT_MAX_LENGTH = 150

# Tags whose presence makes an element a container rather than a leaf
BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "div", "dl", "dd", "dt",
    "fieldset", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5",
    "h6", "header", "li", "main", "nav", "ol", "p", "section", "table",
    "tbody", "td", "th", "thead", "tr", "ul",
]

_TITLE_SEPARATORS = re.compile(r"[|｜\-－]")
_BRACKETED = re.compile(r"【[^】]*】|\[[^\]]*\]")
_TITLE_SUFFIX = re.compile(r"\s*(?:公式|通販).*$")

_PRODUCT_NAME_SELECTORS = (
    'h1[class*="product"]',
    '[class*="product-name"]',
    '[class*="product_name"]',
    '[class*="item-name"]',
    '[class*="item_name"]',
    '[itemprop="name"]',
)

_BREADCRUMB = re.compile(r"breadcrumb|topicpath|pankuzu", re.I)
_BREADCRUMB_SEPARATOR = re.compile(r"^[>›»/＞\s]*$")
_CATEGORY_CLASS = re.compile(r"category", re.I)
_COMPANY_CLASS = re.compile(r"company|corp|maker", re.I)
_FEATURE_CLASS = re.compile(r"feature|point|benefit|merit", re.I)

_BULLET_PREFIX = re.compile(r"^[✓✔☑●・◎○■□◆◇★☆※\-*\s]+")
_CHECKMARK_ITEM = re.compile(r"[✓✔☑]\s*([^✓✔☑]+)")

_EFFECT_KEYWORDS = ("効果", "効能", "改善", "解消", "ケア", "サポート", "向上")

_INGREDIENTS = re.compile(r"(?:配合成分|主成分|成分|原材料名?)\s*[：:]\s*(.+)")
_INGREDIENT_SPLIT = re.compile(r"[、,，・]")

_COMPANY = re.compile(r"(?:販売元|製造元|販売者|製造者|会社名|運営会社)\s*[：:]?\s*(.*)")

_CAMPAIGN = re.compile(
    r"(?:キャンペーン|期間限定|今だけ|先着\s*[\d,]+\s*名)[^。！!\n]{0,%d}" % MAX_CAMPAIGN_LENGTH
)

_GUARANTEE = re.compile(r"(?:\d+日間)?(?:全額)?(?:返金|返品|満足)保証")

_AUTHORITY_PATTERNS = (
    re.compile(r"(?:医師|薬剤師|管理栄養士|栄養士|専門家|皮膚科医)監修"),
    re.compile(r"特許(?:取得済み?|取得|出願中)"),
    re.compile(r"モンドセレクション[^\s。、]{0,12}"),
    re.compile(r"[^\s。、]{0,20}受賞"),
    re.compile(r"(?:ランキング|売上)[^\s。、]{0,20}?[1１]位"),
    re.compile(r"[\d,]+万?(?:個|本|袋|箱)突破"),
)

_TESTIMONIAL_MARKERS = ("お客様の声", "口コミ", "レビュー", "体験談")

_IMAGE_EXTENSION = re.compile(r"\.(?:jpg|jpeg|png|webp|gif)(?:\?.*)?$", re.I)
_MAIN_IMAGE_HINT = re.compile(r"product|item|main|hero|商品", re.I)

# Category keywords checked against name/title/description, in order
CATEGORY_KEYWORDS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("サプリ",), "健康食品・サプリメント"),
    (("化粧品", "コスメ"), "化粧品・美容"),
    (("ダイエット",), "ダイエット・健康"),
    (("食品", "フード"), "食品・飲料"),
    (("宅配",), "宅配食"),
)


# =============================================================================
# Helpers
# =============================================================================

def _dedupe(items: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(items))


def _element_text(element: Tag) -> str:
    return collapse_whitespace(element.get_text())


def _leaf_text(element: Tag) -> str:
    """Text of an element that has no block-level descendants, else ''."""
    if element.find(BLOCK_TAGS):
        return ""
    return _element_text(element)


def _meta_content(doc: Document, key: str) -> str:
    """content of <meta property=key> or <meta name=key>."""
    for attr in ("property", "name"):
        tag = doc.soup.find("meta", attrs={attr: key})
        if tag and tag.get("content"):
            return collapse_whitespace(tag["content"])
    return ""


def absolutize(base_url: str, src: Optional[str]) -> Optional[str]:
    """Resolve src against base_url; None when it is not an http(s) URL."""
    if not src or not src.strip() or src.strip().startswith("data:"):
        return None
    try:
        resolved = urljoin(base_url, src.strip())
        parsed = urlparse(resolved)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return resolved


def flatten_jsonld(data: Any) -> List[Dict[str, Any]]:
    """Flatten a JSON-LD payload (objects, arrays, @graph) into typed nodes."""
    nodes = []
    if isinstance(data, dict):
        if "@graph" in data:
            nodes.extend(flatten_jsonld(data["@graph"]))
        if "@type" in data:
            nodes.append(data)
    elif isinstance(data, list):
        for item in data:
            nodes.extend(flatten_jsonld(item))
    return nodes


# =============================================================================
# Identity
# =============================================================================

def extract_title(doc: Document) -> str:
    """<title>, then the first <h1>, then og:title."""
    title_tag = doc.soup.find("title")
    if title_tag:
        title = _element_text(title_tag)
        if title:
            return title

    h1 = doc.soup.find("h1")
    if h1:
        heading = _element_text(h1)
        if heading:
            return heading

    return _meta_content(doc, "og:title")


def clean_title(title: str) -> str:
    """
    Reduce a page title to a product name.

    '【公式】Foo美容液｜Brand' -> 'Foo美容液'
    'Foo美容液 公式通販サイト' -> 'Foo美容液'
    """
    name = _TITLE_SEPARATORS.split(title)[0]
    name = _BRACKETED.sub("", name)
    name = _TITLE_SUFFIX.sub("", name)
    return collapse_whitespace(name)


def extract_product_name(doc: Document, title: Optional[str] = None) -> str:
    """Product-name markup if present, otherwise the cleaned page title."""
    for selector in _PRODUCT_NAME_SELECTORS:
        element = doc.soup.select_one(selector)
        if element is None:
            continue
        if element.name == "meta":
            name = collapse_whitespace(element.get("content", ""))
        else:
            name = _element_text(element)
        if name and len(name) <= 100:
            return name

    if title is None:
        title = extract_title(doc)
    return clean_title(title)


def extract_description(doc: Document) -> str:
    """meta description, then og:description."""
    tag = doc.soup.find("meta", attrs={"name": "description"})
    if tag and tag.get("content"):
        description = collapse_whitespace(tag["content"])
        if description:
            return description
    return _meta_content(doc, "og:description")


def extract_open_graph(doc: Document) -> Tuple[str, str, str]:
    """(og:title, og:description, absolute og:image)."""
    image = absolutize(doc.url, _meta_content(doc, "og:image")) or ""
    return _meta_content(doc, "og:title"), _meta_content(doc, "og:description"), image


# =============================================================================
# Classification
# =============================================================================

def _breadcrumb_items(container: Tag) -> List[str]:
    items = [_element_text(li) for li in container.find_all("li")]
    if not items:
        items = [collapse_whitespace(s) for s in container.stripped_strings]
    return [item for item in items if item and not _BREADCRUMB_SEPARATOR.match(item)]


def _structured_category(structured_data: List[Any]) -> str:
    for node in flatten_jsonld(structured_data):
        category = node.get("category")
        if isinstance(category, dict):
            category = category.get("name")
        if isinstance(category, str) and category.strip():
            return collapse_whitespace(category)
    return ""


def extract_category(doc: Document, structured_data: Optional[List[Any]] = None) -> str:
    """
    Product category from page markup.

    Priority:
    1. Breadcrumb trail with 3+ crumbs (second-to-last crumb)
    2. Leaf element with a category class
    3. JSON-LD category
    """
    containers = doc.soup.find_all(attrs={"class": _BREADCRUMB})
    containers += doc.soup.find_all(attrs={"aria-label": _BREADCRUMB})
    containers += doc.soup.find_all(attrs={"id": _BREADCRUMB})
    for container in containers:
        crumbs = _breadcrumb_items(container)
        if len(crumbs) >= 3:
            return crumbs[-2]

    for element in doc.soup.find_all(class_=_CATEGORY_CLASS):
        text = _leaf_text(element)
        if text and len(text) <= 50:
            return text

    if structured_data is None:
        structured_data = extract_structured_data(doc)
    return _structured_category(structured_data)


def infer_category(*texts: str) -> str:
    """Keyword-based category guess over name, title, description and features."""
    haystack = " ".join(t for t in texts if t)
    for keywords, category in CATEGORY_KEYWORDS:
        if any(keyword in haystack for keyword in keywords):
            return category
    return ""


# =============================================================================
# Selling points
# =============================================================================

def _normalize_feature(text: str) -> str:
    return _BULLET_PREFIX.sub("", text).strip()


def _feature_ok(text: str) -> bool:
    low, high = FEATURE_LENGTH
    return low <= len(text) <= high and "<" not in text and ">" not in text


def extract_features(doc: Document) -> List[str]:
    """
    Short selling points.

    Sources, in order: leaf <li> items, leaf elements with a
    feature/point/benefit/merit class, checkmark-prefixed text.
    """
    raw = [_leaf_text(li) for li in doc.soup.find_all("li")]
    raw += [_leaf_text(el) for el in doc.soup.find_all(class_=_FEATURE_CLASS)]
    for segment in doc.segments:
        raw += [m.group(1) for m in _CHECKMARK_ITEM.finditer(segment)]

    features = []
    for text in raw:
        text = _normalize_feature(text)
        if _feature_ok(text):
            features.append(text)
    return _dedupe(features)[:MAX_FEATURES]


def extract_effects(doc: Document) -> List[str]:
    """Paragraphs that talk about effects."""
    effects = []
    for paragraph in doc.soup.find_all("p"):
        text = _element_text(paragraph)
        if not text or len(text) >= EFFECT_MAX_LENGTH:
            continue
        if any(keyword in text for keyword in _EFFECT_KEYWORDS):
            effects.append(text)
    return _dedupe(effects)[:MAX_EFFECTS]


def extract_ingredients(doc: Document) -> List[str]:
    for segment in doc.segments:
        match = _INGREDIENTS.search(segment)
        if not match:
            continue
        parts = [p.strip() for p in _INGREDIENT_SPLIT.split(match.group(1))]
        ingredients = _dedupe(p for p in parts if p)
        if ingredients:
            return ingredients[:MAX_INGREDIENTS]
    return []


def extract_company(doc: Document) -> str:
    """Seller or manufacturer name."""
    segments = doc.segments
    for index, segment in enumerate(segments):
        match = _COMPANY.search(segment)
        if not match:
            continue
        company = match.group(1).strip()
        # Table layout: label and value in separate cells
        if not company and index + 1 < len(segments):
            company = segments[index + 1]
        if company:
            return company[:100]

    for element in doc.soup.find_all(class_=_COMPANY_CLASS):
        text = _leaf_text(element)
        if text:
            return text[:100]
    return ""


def extract_campaign(doc: Document) -> str:
    """First campaign sentence, at most MAX_CAMPAIGN_LENGTH characters."""
    for segment in doc.segments:
        match = _CAMPAIGN.search(segment)
        if not match:
            continue
        text = match.group(0).strip()
        if len(text) >= MIN_CAMPAIGN_LENGTH:
            return text[:MAX_CAMPAIGN_LENGTH]
    return ""


def extract_guarantee(doc: Document) -> str:
    match = _GUARANTEE.search(doc.text)
    return match.group(0) if match else ""


def extract_authority(doc: Document) -> List[str]:
    """Endorsements: supervision, patents, awards, rankings."""
    found = []
    for pattern in _AUTHORITY_PATTERNS:
        found.extend(m.group(0).strip() for m in pattern.finditer(doc.text))
    return _dedupe(f for f in found if f)


def count_testimonials(doc: Document) -> int:
    """Occurrences of testimonial markers in the visible text."""
    return sum(doc.text.count(marker) for marker in _TESTIMONIAL_MARKERS)


# =============================================================================
# Media and structured data
# =============================================================================

def _is_main_image(img: Tag, src: str) -> bool:
    classes = " ".join(img.get("class") or [])
    hints = " ".join([classes, img.get("id") or "", img.get("alt") or "", src])
    return bool(_MAIN_IMAGE_HINT.search(hints))


def extract_images(doc: Document) -> List[str]:
    """
    Absolute image URLs, likely product shots first.

    Unresolvable sources and non-image extensions are dropped.
    """
    primary, secondary = [], []
    for img in doc.soup.find_all("img"):
        src = img.get("src") or img.get("data-src")
        resolved = absolutize(doc.url, src)
        if resolved is None:
            continue
        if not _IMAGE_EXTENSION.search(urlparse(resolved).path + _query(resolved)):
            continue
        if _is_main_image(img, resolved):
            primary.append(resolved)
        else:
            secondary.append(resolved)
    return _dedupe(primary + secondary)[:MAX_IMAGES]


def _query(url: str) -> str:
    query = urlparse(url).query
    return f"?{query}" if query else ""


def extract_structured_data(doc: Document) -> List[Any]:
    """Every parseable application/ld+json payload, in document order."""
    payloads = []
    for script in doc.soup.find_all("script", type="application/ld+json"):
        raw = script.string or script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            payloads.append(json.loads(raw))
        except (ValueError, TypeError, RecursionError) as e:
            logger.log_action("parse_jsonld", "skipped", url=doc.url, error=str(e))
    return payloads
