import pytest

from cn_recipient.parser.region_index import RegionIndex
from cn_recipient.parser.region_loader import BUNDLED_TABLE_PATH, load_region_table


@pytest.fixture(scope="session")
def region_table():
    # always the bundled sample, whatever CN_RECIPIENT_REGION_TABLE points to
    return load_region_table(BUNDLED_TABLE_PATH)


@pytest.fixture(scope="session")
def region_index(region_table):
    return RegionIndex.from_table(region_table)
