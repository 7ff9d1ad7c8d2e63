from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class ExtractRequest(BaseModel):
    raw_text: str = Field(
        ...,
        description=(
            "Raw recipient text pasted into one input field, may mix name, "
            "phone, province/city/county and street detail / "
            "用户粘贴的整段收件信息，可能混合姓名、手机号、省市区和详细地址"
        ),
    )


class AddressRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(
        "",
        description="Recipient name / 收件人姓名",
    )
    tel: str = Field(
        "",
        description=(
            "11-digit phone number, the last one wins when several are present / "
            "11 位手机号，有多个时取最后一个"
        ),
    )
    province: str = Field(
        "",
        description="Province-level division (e.g. 广东省, 北京市) / 省级行政区",
    )
    city: str = Field(
        "",
        description="Prefecture-level city (e.g. 广州市) / 地级市",
    )
    county: str = Field(
        "",
        description="District/county (e.g. 天河区, 高唐县) / 区县",
    )
    area_code: str = Field(
        "",
        alias="areaCode",
        description="6-digit administrative code of the county / 区县行政区划代码",
    )
    address_detail: str = Field(
        "",
        alias="addressDetail",
        description=(
            "Street-level detail with the matched province/city/county stripped / "
            "去掉识别出的省市区后剩下的街道、门牌等详细地址"
        ),
    )


class ExtractResponse(AddressRecord):
    normalized_cn: str = Field(
        "",
        description=(
            "Normalized Chinese full address suitable for shipping labels / "
            "标准化中文整串地址，适合打印面单"
        ),
    )
    normalized_en: str = Field(
        "",
        description=(
            "Pinyin/English-style address for customs forms / "
            "拼音或英文化地址，适合跨境清关、海外仓"
        ),
    )


class ErrorResponse(BaseModel):
    error: str = Field(
        ...,
        description=(
            "Machine readable error code (unauthorized, validation_error, "
            "region_table_unavailable, ...) / 机器可读错误码"
        ),
    )
    message: str = Field(
        ...,
        description=(
            "Human readable explanation of why extraction was refused or failed / "
            "提取失败原因说明"
        ),
    )
    details: Optional[dict] = Field(
        None,
        description=(
            "Field errors or the region table failure reason / "
            "字段校验错误或区划表加载失败原因"
        ),
    )
