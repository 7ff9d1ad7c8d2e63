import logging
from typing import List, Optional, Set

from .rules import SEPARATORS, TokenTag

logger = logging.getLogger(__name__)


class Token:
    """One fragment of the input plus the tags the extraction passes gave it."""

    __slots__ = ("text", "tags")

    def __init__(self, text: str, tags: Optional[Set[TokenTag]] = None):
        self.text = text
        self.tags = set(tags or ())

    @property
    def untyped(self) -> bool:
        return not self.tags

    def tag(self, tag: TokenTag) -> None:
        self.tags.add(tag)

    def __repr__(self) -> str:
        tags = ",".join(sorted(t.value for t in self.tags))
        return f"Token({self.text!r}, tags={{{tags}}})"


def split_tokens(raw: Optional[str]) -> List[str]:
    """
    按分隔符依次切分，后一个分隔符作用在前一轮切分的结果上：
    "张三,13800138000 广东省广州市" -> ["张三", "13800138000", "广东省广州市"]
    """
    if not raw:
        return []
    parts = [raw]
    for sep in SEPARATORS:
        parts = [piece for part in parts for piece in part.split(sep)]
    return [p for p in parts if p != ""]


def tokenize(raw: Optional[str]) -> List[Token]:
    tokens = [Token(text) for text in split_tokens(raw)]
    logger.debug("tokenized into %d tokens: %s", len(tokens), tokens)
    return tokens
