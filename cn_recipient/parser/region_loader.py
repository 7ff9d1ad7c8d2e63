import json
import logging
import os
from functools import lru_cache
from typing import Any, Dict, Optional

from .region_index import RegionIndex, RegionTableError

logger = logging.getLogger(__name__)

REGION_TABLE_ENV = "CN_RECIPIENT_REGION_TABLE"

BUNDLED_TABLE_PATH = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "data", "area.json")
)


def region_table_path() -> str:
    return os.getenv(REGION_TABLE_ENV) or BUNDLED_TABLE_PATH


def load_region_table(path: Optional[str] = None) -> Dict[str, Any]:
    """
    area.json 结构示例:
    {
      "province_list": {"440000": "广东省", ...},
      "city_list": {"440100": "广州市", ...},
      "county_list": {"440106": "天河区", ...}
    }
    """
    path = path or region_table_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        raise RegionTableError(f"cannot load region table {path}: {exc}") from exc


@lru_cache()
def get_region_index() -> RegionIndex:
    path = region_table_path()
    index = RegionIndex.from_table(load_region_table(path))
    logger.info("Loaded region table from %s: %r", path, index)
    return index
