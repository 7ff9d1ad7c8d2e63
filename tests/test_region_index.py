import json

import pytest

from cn_recipient.parser.region_index import (
    RegionIndex,
    RegionTableError,
    build_records,
)
from cn_recipient.parser.region_loader import load_region_table
from cn_recipient.parser.rules import (
    CITY_SUFFIXES,
    COUNTY_SUFFIXES,
    PROVINCE_SUFFIXES,
)


def _by_code(records):
    return {r.code: r for r in records}


def test_suffix_stripping_priority():
    counties = _by_code(build_records(
        {
            "429021": "神农架林区",
            "622924": "东乡族自治县",
            "440106": "天河区",
            "140302": "城区",
        },
        COUNTY_SUFFIXES,
    ))

    assert counties["429021"].short_name == "神农架"
    assert counties["429021"].similarity == pytest.approx(3 / 5)
    assert counties["622924"].short_name == "东乡族"
    assert counties["622924"].similarity == pytest.approx(0.5)
    assert counties["440106"].short_name == "天河"
    # would leave a single character, so nothing is stripped
    assert counties["140302"].short_name == "城区"
    assert counties["140302"].similarity == 1.0


def test_province_and_city_suffixes():
    provinces = _by_code(build_records(
        {"150000": "内蒙古自治区", "440000": "广东省"}, PROVINCE_SUFFIXES
    ))
    cities = _by_code(build_records({"653200": "和田地区"}, CITY_SUFFIXES))

    assert provinces["150000"].short_name == "内蒙古"
    assert provinces["440000"].short_name == "广东"
    assert cities["653200"].short_name == "和田"
    assert cities["653200"].similarity == pytest.approx(0.5)


def test_index_parent_lookup(region_index):
    assert region_index.province_name("440106") == "广东省"
    assert region_index.city_name("440106") == "广州市"
    assert region_index.province_name("990101") == ""


@pytest.mark.parametrize(
    "table",
    [
        [],
        {"province_list": {}, "city_list": {}},
        {"province_list": [], "city_list": {}, "county_list": {}},
        {"province_list": {"44": "广东省"}, "city_list": {}, "county_list": {}},
        {"province_list": {"44000a": "广东省"}, "city_list": {}, "county_list": {}},
        {"province_list": {"440000": ""}, "city_list": {}, "county_list": {}},
        {"province_list": {"440100": "广州市"}, "city_list": {}, "county_list": {}},
        {"province_list": {}, "city_list": {"440106": "天河区"}, "county_list": {}},
    ],
)
def test_malformed_table_fails_fast(table):
    with pytest.raises(RegionTableError):
        RegionIndex.from_table(table)


def test_orphan_county_logs_warning(caplog):
    table = {
        "province_list": {"440000": "广东省"},
        "city_list": {},
        "county_list": {"440106": "天河区"},
    }
    index = RegionIndex.from_table(table)

    assert index.city_name("440106") == ""
    assert "no parent province/city" in caplog.text


def test_load_region_table_from_env(tmp_path, monkeypatch):
    path = tmp_path / "area.json"
    path.write_text(
        json.dumps({"province_list": {}, "city_list": {}, "county_list": {}}),
        encoding="utf-8",
    )
    monkeypatch.setenv("CN_RECIPIENT_REGION_TABLE", str(path))

    assert load_region_table()["county_list"] == {}


def test_load_region_table_missing_file(tmp_path):
    with pytest.raises(RegionTableError):
        load_region_table(str(tmp_path / "missing.json"))


def test_bundled_table_has_consistent_tiers(region_table):
    index = RegionIndex.from_table(region_table)

    assert all(r.code.endswith("0000") for r in index.provinces)
    assert all(r.code.endswith("00") for r in index.cities)
