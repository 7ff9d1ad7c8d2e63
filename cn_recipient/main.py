import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Depends, Header, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cn_recipient.logging_utils import configure_logging
from cn_recipient.models import ErrorResponse, ExtractRequest, ExtractResponse
from cn_recipient.parser.address_parser import (
    build_normalized_cn,
    build_normalized_en,
    extract_address,
)
from cn_recipient.parser.region_index import RegionTableError
from cn_recipient.parser.region_loader import get_region_index

# 多个 key 用逗号分隔:
# export API_KEYS="test123,anotherKey987"
ALLOWED_API_KEYS = {
    key.strip()
    for key in os.getenv("API_KEYS", "").split(",")
    if key.strip()
}
_TRUTHY = {"1", "true", "yes", "on"}
ALLOW_KEYLESS_ACCESS = (
    os.getenv("ALLOW_KEYLESS_ACCESS", "true").lower() in _TRUTHY
)

logger = logging.getLogger(__name__)


class APIError(Exception):
    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        *,
        details: Optional[dict] = None,
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details


def verify_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
):
    """
    - Clients send `X-API-Key`, which must appear in the API_KEYS env var.
    - With no keys configured, ALLOW_KEYLESS_ACCESS=true lets every call through.

    客户端发送 `X-API-Key`，需要出现在 API_KEYS 环境变量里；
    没有配置任何 key 时，ALLOW_KEYLESS_ACCESS=true 允许免鉴权调用。
    """
    if not ALLOWED_API_KEYS:
        if ALLOW_KEYLESS_ACCESS:
            return
        raise APIError(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="auth_not_configured",
            message=(
                "Authentication is not configured. Set the API_KEYS environment "
                "variable, or explicitly opt-in to keyless access with "
                "ALLOW_KEYLESS_ACCESS=true."
            ),
        )

    if x_api_key is not None and x_api_key in ALLOWED_API_KEYS:
        return x_api_key

    raise APIError(
        status_code=status.HTTP_401_UNAUTHORIZED,
        error="unauthorized",
        message="Invalid or missing API credentials. Send header 'X-API-Key'.",
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    # 区划表有问题时启动即失败，而不是等到第一次请求
    get_region_index()
    yield


app = FastAPI(
    title="CN Recipient Extraction API",
    description=(
        "Split one pasted block of Chinese recipient text into name, phone, "
        "province/city/county, administrative area code and street detail.\n"
        "- Matches full names and suffix-less short names (天河 -> 天河区).\n"
        "- Disambiguates same-named counties with co-occurring city/province.\n"
        "- Returns label-ready Chinese and pinyin address strings.\n\n"
        "把用户粘贴的一整段收件信息拆成姓名、手机号、省市区、区划代码和详细地址。\n"
        "- 支持全称和省略后缀的简称匹配。\n"
        "- 用同时出现的市、省给同名区县消歧。\n"
        "- 返回 normalized_cn / normalized_en 方便打印面单。"
    ),
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(APIError)
async def handle_api_error(_, exc: APIError):
    payload = ErrorResponse(
        error=exc.error,
        message=exc.message,
        details=exc.details,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(payload),
    )


@app.exception_handler(RegionTableError)
async def handle_region_table_error(_, exc: RegionTableError):
    logger.error("Region table unavailable: %s", exc)
    payload = ErrorResponse(
        error="region_table_unavailable",
        message="The administrative region table could not be loaded",
        details={"reason": str(exc)},
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=jsonable_encoder(payload),
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(_, exc: RequestValidationError):
    payload = ErrorResponse(
        error="validation_error",
        message=(
            "Request body failed validation, expected {\"raw_text\": \"...\"} "
            "with the pasted recipient text"
        ),
        details={"errors": exc.errors()},
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(payload),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(_, exc: Exception):
    logger.exception("Recipient extraction failed: %s", exc)
    payload = ErrorResponse(
        error="internal_error",
        message="Recipient extraction failed unexpectedly",
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=jsonable_encoder(payload),
    )


@app.get("/health")
def healthcheck():
    return {"ok": True}


@app.post(
    "/extract",
    response_model=ExtractResponse,
    responses={
        status.HTTP_401_UNAUTHORIZED: {
            "model": ErrorResponse,
            "description": "Unauthorized: missing or invalid X-API-Key",
        },
        status.HTTP_422_UNPROCESSABLE_ENTITY: {
            "model": ErrorResponse,
            "description": (
                "Validation error: request body failed schema checks / "
                "请求体验证失败"
            ),
        },
        status.HTTP_500_INTERNAL_SERVER_ERROR: {
            "model": ErrorResponse,
            "description": "Extraction failed unexpectedly / 收件信息提取异常",
        },
        status.HTTP_503_SERVICE_UNAVAILABLE: {
            "model": ErrorResponse,
            "description": "Region table could not be loaded / 区划表加载失败",
        },
    },
    dependencies=[Depends(verify_api_key)],
)
def extract_endpoint(req: ExtractRequest) -> ExtractResponse:
    record = extract_address(req.raw_text, get_region_index())
    return ExtractResponse(
        **record.model_dump(),
        normalized_cn=build_normalized_cn(record),
        normalized_en=build_normalized_en(record),
    )
