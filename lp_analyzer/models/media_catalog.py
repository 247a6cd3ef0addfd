"""
Advertising media catalog and the action-reason classes that select from it.
"""
from typing import Dict, List, NamedTuple


class Medium(NamedTuple):
    name: str
    target: str
    method: str


MEDIA_DATABASE: Dict[str, Medium] = {
    "1": Medium("リスティング", "指名検索", "指名入札"),
    "2": Medium("リスティング", "一般検索", "一般入札"),
    "3": Medium("GDN（静止画）", "ブロード", "バナー"),
    "4": Medium("GDN（静止画）", "リターゲティング", "リスト×バナー"),
    "5": Medium("デマンド静止画", "discover,Youtube限定", "ニュース風正方形バナー"),
    "6": Medium("デマンド静止画", "gmail限定", "メール風テキスト×画像"),
    "7": Medium("デマンドロング", "YT面限定", "語り"),
    "8": Medium("デマンドロング", "YT面限定", "文字"),
    "9": Medium("デマンドロング", "YT面限定", "漫画"),
    "10": Medium("デマンドロング", "YT面限定", "ドラマ"),
    "11": Medium("デマンドロング", "YT面限定", "イラスト、AI"),
    "12": Medium("デマンドロング", "YT面限定", "通常"),
    "13": Medium("デマンドshorts", "YT面限定", "語り"),
    "14": Medium("デマンドshorts", "YT面限定", "文字"),
    "15": Medium("デマンドshorts", "YT面限定", "漫画"),
    "16": Medium("デマンドshorts", "YT面限定", "ドラマ"),
    "17": Medium("デマンドshorts", "YT面限定", "イラスト、AI"),
    "18": Medium("デマンドshorts", "YT面限定", "通常"),
    "19": Medium("ByteDance", "tiktok限定", "語り"),
    "20": Medium("ByteDance", "tiktok限定", "漫画"),
    "21": Medium("ByteDance", "tiktok限定", "ドラマ"),
    "22": Medium("ByteDance", "tiktok限定", "イラスト、AI"),
    "23": Medium("ByteDance", "tiktok限定", "通常"),
    "24": Medium("ByteDance", "tiktok限定", "バナー"),
    "25": Medium("meta", "ストーリー、リールメイン", "語り"),
    "26": Medium("meta", "ストーリー、リールメイン", "漫画"),
    "27": Medium("meta", "ストーリー、リールメイン", "ドラマ"),
    "28": Medium("meta", "ストーリー、リールメイン", "イラスト、AI"),
    "29": Medium("meta", "ストーリー、リールメイン", "通常"),
    "30": Medium("meta", "縦型", "バナー"),
    "31": Medium("meta", "正方形", "バナー"),
    "32": Medium("LINE", "apng", "文字のみ/AI人物/通知風/ピクトグラム/イラスト/有名人・芸能人/商品画像"),
    "33": Medium("LINE", "ニュース", "ニュース風正方形バナー"),
    "34": Medium("LINE", "voom", "通常語り"),
    "35": Medium("LINE", "adnetwork", "通常語り"),
}


class ActionReason(NamedTuple):
    market_type: str
    label: str
    media_ids: List[str]


# The five action-reason classes, in the order the analysis prompt lists them
ACTION_REASONS: List[ActionReason] = [
    ActionReason(
        "ニッチ", "自分ごと化させて行動してもらう",
        ["1", "2", "7", "19", "22", "23", "24", "25", "28", "29", "30", "31", "33"],
    ),
    ActionReason(
        "ニッチ", "to B向けに適した配信",
        ["1", "2", "3", "4", "5", "6", "7", "25", "28", "29", "30", "31"],
    ),
    ActionReason(
        "マス向け", "オファーが魅力的、とにかく安い",
        ["7", "10", "11", "13", "16", "17", "19", "21", "22", "24", "25", "27", "28", "30", "31"],
    ),
    ActionReason(
        "マス向け", "訴求が強い、権威性がある、悩みが解決できる",
        ["7", "8", "11", "12", "13", "14", "17", "18", "19", "22", "23", "24", "25", "28", "29", "31"],
    ),
    ActionReason(
        "マス向け", "新事実系、テクスチャーが特徴的",
        ["7", "25", "32", "33"],
    ),
]

# Used when a classification names no known class
DEFAULT_MEDIA_IDS = ["7", "25", "31"]


def media_catalog_for_prompt() -> Dict[str, Dict[str, str]]:
    """JSON-ready view of the catalog, keyed by media id."""
    return {
        media_id: {"mediaName": m.name, "target": m.target, "method": m.method}
        for media_id, m in MEDIA_DATABASE.items()
    }
