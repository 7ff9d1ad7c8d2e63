import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .region_index import RegionIndex, RegionRecord
from .rules import PHONE_REGEX, TokenTag
from .tokenizer import Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhoneHit:
    token_index: int
    number: str


@dataclass(frozen=True)
class MatchCandidate:
    code: str
    name: str
    similarity: float
    token_index: int
    captured: str


@dataclass
class RegionCandidates:
    provinces: List[MatchCandidate] = field(default_factory=list)
    cities: List[MatchCandidate] = field(default_factory=list)
    counties: List[MatchCandidate] = field(default_factory=list)


def detect_phone(tokens: Sequence[Token]) -> Optional[PhoneHit]:
    """有多个手机号时只保留最后一个。"""
    hit = None
    for i, token in enumerate(tokens):
        m = PHONE_REGEX.search(token.text)
        if m:
            hit = PhoneHit(token_index=i, number=m.group(1))
    if hit is not None:
        tokens[hit.token_index].tag(TokenTag.PHONE)
        logger.debug("phone %s found in token %d", hit.number, hit.token_index)
    return hit


def _match_tier(text: str,
                token_index: int,
                records: Sequence[RegionRecord]) -> List[MatchCandidate]:
    out = []
    for rec in records:
        if rec.name in text:
            out.append(MatchCandidate(rec.code, rec.name, 1.0, token_index, rec.name))
        elif rec.short_name in text:
            out.append(MatchCandidate(
                rec.code, rec.name, rec.similarity, token_index, rec.short_name
            ))
    return out


def match_regions(tokens: Sequence[Token], index: RegionIndex) -> RegionCandidates:
    """
    对每个片段、每一级行政区做子串包含判断，只收集候选，不打标记。
    全称命中相似度为 1，简称命中用记录里预先算好的相似度。
    这里故意不做边界判断，"天河" 出现在任何更长的词里也算命中，交给后面的消歧处理。
    """
    found = RegionCandidates()
    for i, token in enumerate(tokens):
        found.provinces.extend(_match_tier(token.text, i, index.provinces))
        found.cities.extend(_match_tier(token.text, i, index.cities))
        found.counties.extend(_match_tier(token.text, i, index.counties))
    logger.debug(
        "region candidates: %d provinces, %d cities, %d counties",
        len(found.provinces), len(found.cities), len(found.counties),
    )
    return found
