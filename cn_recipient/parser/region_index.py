# cn_recipient/parser/region_index.py

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

from .rules import (
    CITY_SUFFIXES,
    COUNTY_SUFFIXES,
    PROVINCE_SUFFIXES,
    city_code,
    province_code,
)

logger = logging.getLogger(__name__)

TIER_KEYS = ("province_list", "city_list", "county_list")


class RegionTableError(ValueError):
    """The region reference table is malformed or could not be loaded."""


@dataclass(frozen=True)
class RegionRecord:
    code: str
    name: str
    short_name: str
    similarity: float = 1.0


def _strip_suffix(name: str, suffixes: Sequence[str]) -> str:
    for suf in suffixes:
        # 剥离后至少保留两个字，"市"、"区" 这种单字简称没有意义
        if name.endswith(suf) and len(name) >= len(suf) + 2:
            return name[: -len(suf)]
    return name


def build_records(tier: Mapping[str, str],
                  suffixes: Sequence[str]) -> List[RegionRecord]:
    """
    把一层行政区 (code -> name) 转成可匹配的记录：
    - "天河区" -> short_name "天河", similarity 2/3
    - "广东省" -> short_name "广东", similarity 2/3
    - "吉林省" 这种剥离后不足两字的名称保留原样，similarity 为 1
    """
    records = []
    for code, name in tier.items():
        code = str(code)
        name = str(name)
        short_name = _strip_suffix(name, suffixes)
        similarity = 1.0
        if short_name != name:
            similarity = len(short_name) / len(name)
        records.append(RegionRecord(code, name, short_name, similarity))
    return records


# 省级编码以 0000 结尾，市级以 00 结尾
_TIER_CODE_TAILS = {"province_list": "0000", "city_list": "00", "county_list": ""}


def _validate_tier(key: str, tier: Any) -> None:
    tail = _TIER_CODE_TAILS[key]
    if not isinstance(tier, Mapping):
        raise RegionTableError(f"{key} must be a mapping of code -> name")
    for code, name in tier.items():
        code = str(code)
        if len(code) != 6 or not code.isdigit():
            raise RegionTableError(
                f"{key}: code {code!r} is not a 6-digit administrative code"
            )
        if tail and not code.endswith(tail):
            raise RegionTableError(
                f"{key}: code {code} must end with {tail!r}"
            )
        if not name:
            raise RegionTableError(f"{key}: code {code} has an empty name")


def validate_table(table: Any) -> None:
    if not isinstance(table, Mapping):
        raise RegionTableError("region table must be a mapping")
    for key in TIER_KEYS:
        if key not in table:
            raise RegionTableError(f"region table is missing {key!r}")
        _validate_tier(key, table[key])


class RegionIndex:
    """
    三级行政区的只读匹配索引，构建一次后可以被任意多次、并发的识别调用共享。

    区县是地址是否识别成功的唯一依据；省、市没有被文本命中时，
    直接按区县编码的前两位 / 前四位在原表里查名称。
    """

    def __init__(self,
                 provinces: List[RegionRecord],
                 cities: List[RegionRecord],
                 counties: List[RegionRecord],
                 province_names: Dict[str, str],
                 city_names: Dict[str, str]):
        self.provinces = tuple(provinces)
        self.cities = tuple(cities)
        self.counties = tuple(counties)
        self._province_names = dict(province_names)
        self._city_names = dict(city_names)

    @classmethod
    def from_table(cls, table: Mapping[str, Mapping[str, str]]) -> "RegionIndex":
        validate_table(table)

        province_names = {str(k): str(v) for k, v in table["province_list"].items()}
        city_names = {str(k): str(v) for k, v in table["city_list"].items()}

        orphans = [
            str(code) for code in table["county_list"]
            if province_code(str(code)) + "0000" not in province_names
            or city_code(str(code)) + "00" not in city_names
        ]
        if orphans:
            logger.warning(
                "%d counties have no parent province/city in the region table, e.g. %s",
                len(orphans), orphans[:5],
            )

        return cls(
            provinces=build_records(table["province_list"], PROVINCE_SUFFIXES),
            cities=build_records(table["city_list"], CITY_SUFFIXES),
            counties=build_records(table["county_list"], COUNTY_SUFFIXES),
            province_names=province_names,
            city_names=city_names,
        )

    def province_name(self, code: str) -> str:
        return self._province_names.get(province_code(code) + "0000", "")

    def city_name(self, code: str) -> str:
        return self._city_names.get(city_code(code) + "00", "")

    def __len__(self) -> int:
        return len(self.provinces) + len(self.cities) + len(self.counties)

    def __repr__(self) -> str:
        return (
            f"RegionIndex(provinces={len(self.provinces)}, "
            f"cities={len(self.cities)}, counties={len(self.counties)})"
        )

