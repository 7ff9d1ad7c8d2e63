import enum
import re


# 11 consecutive ASCII digits anywhere inside a token
PHONE_REGEX = re.compile(r"([0-9]{11})")

# applied one after another, each on the output of the previous pass
SEPARATORS = [",", "，", " ", "\r\n", "\n"]

# 用户写地址时可以省略的行政区后缀，按优先级排列（先匹配先剥离）。
# 同尾字的长后缀必须排在短后缀前面，比如 "林区" 要在 "区" 前面。
PROVINCE_SUFFIXES = ["省", "市", "自治区"]
CITY_SUFFIXES = ["市", "地区", "区", "盟", "自治州"]
COUNTY_SUFFIXES = ["林区", "族区", "区", "自治县", "县", "市", "自治旗", "旗"]

# 城市候选对区县得分的加权，省份候选的加权
CITY_WEIGHT = 10
PROVINCE_WEIGHT = 100


class TokenTag(enum.Enum):
    PHONE = "phone"
    NAME = "name"
    PROVINCE = "province"
    CITY = "city"
    COUNTY = "county"


def province_code(code: str) -> str:
    return code[:2]


def city_code(code: str) -> str:
    return code[:4]
