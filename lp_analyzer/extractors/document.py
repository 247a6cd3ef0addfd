"""
Parsed document shared by all field extractors.
"""
import re
from dataclasses import dataclass, field
from typing import List

from bs4 import BeautifulSoup
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

# Text inside these tags is never visible page copy
_INVISIBLE_PARENTS = {"script", "style", "noscript", "template", "head", "title"}

_WHITESPACE = re.compile(r"\s+")
_TAG = re.compile(r"<[^>]+>")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def strip_tags(html: str) -> str:
    """Cheap tag stripper for short snippets (price contexts)."""
    return collapse_whitespace(_TAG.sub(" ", html))


@dataclass
class Document:
    """
    Immutable snapshot of one fetched page.

    Extractors only read from it; nothing mutates the soup after parsing.
    """
    url: str
    html: str
    soup: BeautifulSoup
    segments: List[str] = field(default_factory=list)
    text: str = ""

    @classmethod
    def parse(cls, url: str, html: str) -> "Document":
        soup = BeautifulSoup(html or "", "lxml")
        segments = _visible_segments(soup)
        return cls(
            url=url,
            html=html or "",
            soup=soup,
            segments=segments,
            text=" ".join(segments),
        )


def _visible_segments(soup: BeautifulSoup) -> List[str]:
    """Visible text nodes, whitespace-collapsed, in document order."""
    segments = []
    for node in soup.find_all(string=True):
        if isinstance(node, (Comment, Declaration, Doctype, ProcessingInstruction)):
            continue
        if node.parent is not None and node.parent.name in _INVISIBLE_PARENTS:
            continue
        text = collapse_whitespace(str(node))
        if text:
            segments.append(text)
    return segments
