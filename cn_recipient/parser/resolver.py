import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from .matcher import MatchCandidate, RegionCandidates
from .region_index import RegionIndex
from .rules import CITY_WEIGHT, PROVINCE_WEIGHT, TokenTag, city_code, province_code
from .tokenizer import Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchedTier:
    """The tier was written in the text; its token is tagged and its text stripped."""
    candidate: MatchCandidate

    @property
    def name(self) -> str:
        return self.candidate.name


@dataclass(frozen=True)
class LookedUpTier:
    """The tier was not written; its name comes from the county's code prefix."""
    code: str
    name: str


TierSelection = Union[MatchedTier, LookedUpTier]


@dataclass(frozen=True)
class CountyResolution:
    county: MatchCandidate
    city: TierSelection
    province: TierSelection

    @property
    def area_code(self) -> str:
        return self.county.code


def _best_similarity(candidates: Sequence[MatchCandidate],
                     prefix: Callable[[str], str],
                     code: str) -> float:
    return max(
        (c.similarity for c in candidates if prefix(c.code) == prefix(code)),
        default=0.0,
    )


def score_counties(found: RegionCandidates) -> List[float]:
    """
    区县得分 = 自身相似度 + 10 × 所属城市的最大相似度 + 100 × 所属省份的最大相似度。
    同名区县很多（比如 "朝阳区"、"鼓楼区"），上级行政区同时出现时几乎可以确定是哪一个。
    """
    return [
        c.similarity
        + CITY_WEIGHT * _best_similarity(found.cities, city_code, c.code)
        + PROVINCE_WEIGHT * _best_similarity(found.provinces, province_code, c.code)
        for c in found.counties
    ]


def _pick_parent(candidates: Sequence[MatchCandidate],
                 prefix: Callable[[str], str],
                 code: str) -> Optional[MatchCandidate]:
    best = None
    for c in candidates:
        if prefix(c.code) != prefix(code):
            continue
        if best is None or c.similarity > best.similarity:
            best = c
    return best


def resolve_county(found: RegionCandidates,
                   tokens: Sequence[Token],
                   index: RegionIndex) -> Optional[CountyResolution]:
    if not found.counties:
        return None

    scores = score_counties(found)
    # sorted() is stable: equal scores keep the order they were matched in
    ranked = sorted(range(len(found.counties)), key=lambda i: scores[i], reverse=True)
    county = found.counties[ranked[0]]
    tokens[county.token_index].tag(TokenTag.COUNTY)

    city_hit = _pick_parent(found.cities, city_code, county.code)
    if city_hit is not None:
        tokens[city_hit.token_index].tag(TokenTag.CITY)
        city: TierSelection = MatchedTier(city_hit)
    else:
        city = LookedUpTier(city_code(county.code) + "00", index.city_name(county.code))

    province_hit = _pick_parent(found.provinces, province_code, county.code)
    if province_hit is not None:
        tokens[province_hit.token_index].tag(TokenTag.PROVINCE)
        province: TierSelection = MatchedTier(province_hit)
    else:
        province = LookedUpTier(
            province_code(county.code) + "0000", index.province_name(county.code)
        )

    logger.debug(
        "county %s(%s) won with score %.3f over %d candidates",
        county.name, county.code, scores[ranked[0]], len(found.counties),
    )
    return CountyResolution(county=county, city=city, province=province)
