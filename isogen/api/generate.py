"""
图像生成 API

POST /api/generate          生成等距风格图标（带服务端限流与 Provider 降级）
GET  /api/generate/limits   查询限流配置与全站用量
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from isogen.config import config
from isogen.core.logger import logger
from isogen.core.styles import parse_style
from isogen.models.api import ErrorBody, GenerateResponse, RateLimitInfo
from isogen.services.orchestration import DualFailure, GenerationResult, ProviderManager
from isogen.services.provider import ErrorCode, GenerationOptions
from isogen.services.rate_limit import RequestRateLimiter
from isogen.utils.input_utils import process_prompt_input
from isogen.utils.request_utils import get_client_ip

router = APIRouter(prefix="/api", tags=["Generate"])

UNEXPECTED_ERROR_MESSAGE = "A server error occurred. Please try again."

ERROR_STATUS: dict[str, int] = {
    ErrorCode.RATE_LIMIT.value: 429,
    ErrorCode.TIMEOUT.value: 408,
    ErrorCode.UNAUTHORIZED.value: 401,
    ErrorCode.VALIDATION_ERROR.value: 400,
    ErrorCode.PAYMENT_REQUIRED.value: 402,
    ErrorCode.SERVICE_UNAVAILABLE.value: 503,
    ErrorCode.SERVER_ERROR.value: 500,
    ErrorCode.UNKNOWN.value: 500,
    "DUAL_PROVIDER_FAILURE": 503,
}


def get_provider_manager(request: Request) -> ProviderManager:
    return request.app.state.provider_manager


def get_rate_limiter(request: Request) -> RequestRateLimiter:
    return request.app.state.rate_limiter


def _error_response(
    status_code: int,
    code: str,
    message: str,
    retry_after: int | None = None,
    primary_error: str | None = None,
    fallback_error: str | None = None,
) -> JSONResponse:
    payload = GenerateResponse(
        success=False,
        error=ErrorBody(
            code=code,
            message=message,
            retry_after=retry_after,
            primary_error=primary_error,
            fallback_error=fallback_error,
        ),
    )
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(by_alias=True, exclude_none=True),
    )


def _validation_error(message: str) -> JSONResponse:
    return _error_response(400, ErrorCode.VALIDATION_ERROR.value, message)


def _failure_response(result: GenerationResult) -> JSONResponse:
    error = result.error
    if isinstance(error, DualFailure):
        return _error_response(
            ERROR_STATUS[error.code],
            error.code,
            error.message,
            retry_after=error.retry_after_seconds,
            primary_error=error.primary_message,
            fallback_error=error.secondary_message,
        )

    code = error.code.value
    return _error_response(
        ERROR_STATUS.get(code, 500),
        code,
        error.message,
        retry_after=error.retry_after_seconds,
    )


@router.post("/generate")
async def generate_image(
    request: Request,
    manager: ProviderManager = Depends(get_provider_manager),
    limiter: RequestRateLimiter = Depends(get_rate_limiter),
) -> Any:
    """
    生成图像

    **请求体**
    - prompt: 图标主题描述（会被清洗并截断到 MAX_PROMPT_LENGTH）
    - style: 风格预设 default / warm / monochrome / pastel

    **返回字段**
    - success / image (data URL) / provider / fallbackAttempted
    - 失败时 error: code / message / retryAfter（双 Provider 失败时附带 primaryError、fallbackError）
    """
    client_ip = get_client_ip(request)

    decision = await limiter.check(client_ip)
    if not decision.allowed:
        return _error_response(
            429,
            ErrorCode.RATE_LIMIT.value,
            decision.reason or "Rate limit exceeded.",
            retry_after=decision.reset_in_seconds,
        )

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _validation_error("Invalid JSON in request body.")

    if not isinstance(body, dict):
        return _validation_error("Invalid request body.")

    prompt = body.get("prompt")
    if not isinstance(prompt, str):
        return _validation_error("Prompt must be a string.")

    processed = process_prompt_input(prompt, config.max_prompt_length)
    if not processed.is_valid:
        return _validation_error("Invalid input. Please check your prompt.")

    style = parse_style(body.get("style"))
    if style is None:
        return _validation_error("Invalid style preset.")

    try:
        result = await manager.generate(processed.sanitized, GenerationOptions(style=style))
    except Exception as exc:
        logger.exception("生成流程异常: ip={}, error={}", client_ip, exc)
        return _error_response(500, ErrorCode.SERVER_ERROR.value, UNEXPECTED_ERROR_MESSAGE)

    if not result.success:
        return _failure_response(result)

    await limiter.record(client_ip)
    logger.info(
        "生成成功: ip={}, provider={}, fallback={}",
        client_ip,
        result.provider.value if result.provider else None,
        result.fallback_attempted,
    )
    payload = GenerateResponse(
        success=True,
        image=result.image_data_url,
        provider=result.provider.value if result.provider else None,
        fallback_attempted=result.fallback_attempted,
    )
    return payload.model_dump(by_alias=True, exclude_none=True)


@router.get("/generate/limits")
async def get_limits(limiter: RequestRateLimiter = Depends(get_rate_limiter)) -> Any:
    """查询限流配置：单 IP 上限、全站上限、当前窗口全站用量、窗口小时数"""
    info = await limiter.info()
    return RateLimitInfo(**info).model_dump(by_alias=True)
