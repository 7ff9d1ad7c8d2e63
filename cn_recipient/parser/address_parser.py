import logging
from typing import Mapping, Optional, Sequence, Union

from pypinyin import lazy_pinyin

from .matcher import detect_phone, match_regions
from .region_index import RegionIndex
from .region_loader import get_region_index
from .resolver import CountyResolution, MatchedTier, resolve_county
from .rules import TokenTag
from .tokenizer import Token, tokenize
from cn_recipient.models import AddressRecord

logger = logging.getLogger(__name__)

RegionTable = Mapping[str, Mapping[str, str]]


def _name_positions(phone_index: int, count: int) -> Sequence[int]:
    # 姓名只会出现在两端；手机号占了一端时，往里让一格
    if phone_index == 0:
        return (1, count - 1)
    if phone_index == count - 1:
        return (0, count - 2)
    return (0, count - 1)


def extract_name(tokens: Sequence[Token], phone_index: int = -1) -> str:
    """
    从还没有被识别为手机号、省市区的片段里挑姓名：
    1. 姓名在两端（不算手机号所在的位置）
    2. 姓名比剩下的详细地址短
    按长度从短到长尝试，第一个满足条件的就是姓名。
    """
    untyped = [(i, t) for i, t in enumerate(tokens) if t.untyped]
    untyped.sort(key=lambda item: len(item[1].text))
    positions = _name_positions(phone_index, len(tokens))
    total = sum(len(t.text) for _, t in untyped)

    for i, token in untyped:
        if i not in positions:
            continue
        if len(untyped) > 1 and len(token.text) >= total - len(token.text):
            continue
        token.tag(TokenTag.NAME)
        return token.text
    return ""


def assemble_detail(tokens: Sequence[Token], resolution: CountyResolution) -> str:
    order = []
    for tier in (resolution.province, resolution.city):
        if isinstance(tier, MatchedTier) and tier.candidate.token_index not in order:
            order.append(tier.candidate.token_index)
    if resolution.county.token_index not in order:
        order.append(resolution.county.token_index)
    order.extend(i for i, t in enumerate(tokens) if t.untyped)

    detail = "".join(tokens[i].text for i in order)
    for tier in (resolution.province, resolution.city):
        if isinstance(tier, MatchedTier):
            detail = detail.replace(tier.candidate.captured, "", 1)
    return detail.replace(resolution.county.captured, "", 1)


def _as_index(region_table: Union[RegionIndex, RegionTable, None]) -> RegionIndex:
    if region_table is None:
        return get_region_index()
    if isinstance(region_table, RegionIndex):
        return region_table
    return RegionIndex.from_table(region_table)


def extract_address(raw_text: Optional[str],
                    region_table: Union[RegionIndex, RegionTable, None] = None
                    ) -> AddressRecord:
    index = _as_index(region_table)
    tokens = tokenize(raw_text)

    # 1. 手机号
    phone = detect_phone(tokens)

    # 2. 省市区候选 + 区县消歧
    found = match_regions(tokens, index)
    resolution = resolve_county(found, tokens, index)

    # 3. 姓名
    name = extract_name(tokens, phone.token_index if phone else -1)

    record = AddressRecord(name=name, tel=phone.number if phone else "")

    # 4. 详细地址（只有识别到区县才算识别到地址）
    if resolution is not None:
        record.province = resolution.province.name
        record.city = resolution.city.name
        record.county = resolution.county.name
        record.area_code = resolution.area_code
        record.address_detail = assemble_detail(tokens, resolution)
    else:
        logger.debug("no county recognized in %r", raw_text)

    return record


def _to_pinyin(text: str) -> str:
    if not text:
        return ""
    return " ".join(lazy_pinyin(text))


def build_normalized_cn(record: AddressRecord) -> str:
    if not record.county:
        return ""
    parts = [record.province]
    if record.city and record.city != record.province:
        parts.append(record.city)
    parts.append(record.county)
    parts.append(record.address_detail)
    return "".join(p for p in parts if p)


def build_normalized_en(record: AddressRecord) -> str:
    if not record.county:
        return ""
    parts = [_to_pinyin(record.address_detail), _to_pinyin(record.county)]
    if record.city and record.city != record.province:
        parts.append(_to_pinyin(record.city))
    parts.append(_to_pinyin(record.province))
    parts.append("China")
    return " , ".join(p for p in parts if p)
