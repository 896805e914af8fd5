"""
错误分类器 - 将 HTTP 状态码 / 超时映射为 NormalizedError（纯逻辑，无副作用）

同一个状态码的 recoverable 取决于由哪个角色的 Provider 产生：
- Primary: 按状态码判断是否可降级
- Secondary（降级 Provider）: 之后不存在第三个 Provider，recoverable 恒为 False
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Mapping

from isogen.services.provider.types import ErrorCode, NormalizedError

DEFAULT_RATE_LIMIT_RETRY_AFTER = 60

_STATUS_TO_CODE: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    402: ErrorCode.PAYMENT_REQUIRED,
    403: ErrorCode.PAYMENT_REQUIRED,  # 额度/配额耗尽
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}

# 可降级错误码；UNKNOWN 不在其中，未识别的状态码永远不触发降级
RECOVERABLE_CODES = frozenset(
    {
        ErrorCode.RATE_LIMIT,
        ErrorCode.TIMEOUT,
        ErrorCode.SERVICE_UNAVAILABLE,
        ErrorCode.SERVER_ERROR,
        ErrorCode.PAYMENT_REQUIRED,
    }
)

PRIMARY_DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.RATE_LIMIT: "Too many requests. Please try again later.",
    ErrorCode.TIMEOUT: "Request timed out. Please try again.",
    ErrorCode.SERVICE_UNAVAILABLE: "Service is currently unavailable. Please try again later.",
    ErrorCode.SERVER_ERROR: "A server error occurred. Please try again.",
    ErrorCode.UNAUTHORIZED: "Authentication error occurred. Please refresh the page.",
    ErrorCode.VALIDATION_ERROR: "Invalid request. Please check your input.",
    ErrorCode.PAYMENT_REQUIRED: "Service quota exhausted. Switching to backup provider.",
    ErrorCode.UNKNOWN: "An unexpected error occurred.",
}

FALLBACK_DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    **PRIMARY_DEFAULT_MESSAGES,
    ErrorCode.UNAUTHORIZED: "Authentication error occurred.",
    ErrorCode.PAYMENT_REQUIRED: "Service quota exhausted.",
}


def status_to_error_code(status: int) -> ErrorCode:
    """HTTP 状态码 -> ErrorCode"""
    code = _STATUS_TO_CODE.get(status)
    if code is not None:
        return code
    if 500 <= status < 600:
        return ErrorCode.SERVER_ERROR
    return ErrorCode.UNKNOWN


def is_recoverable_status(status: int) -> bool:
    """Primary 视角下该状态码是否应触发降级"""
    return status_to_error_code(status) in RECOVERABLE_CODES


def classify(
    status: int,
    message: str | None = None,
    retry_after: int | None = None,
) -> NormalizedError:
    """
    Primary Provider 的 HTTP 失败分类

    Args:
        status: HTTP 状态码
        message: 上游返回的错误消息，缺省时使用默认文案
        retry_after: Retry-After 秒数，仅 RATE_LIMIT 保留，缺省为 60

    Returns:
        NormalizedError
    """
    code = status_to_error_code(status)
    if code is ErrorCode.RATE_LIMIT:
        hint: int | None = retry_after if retry_after is not None else DEFAULT_RATE_LIMIT_RETRY_AFTER
    else:
        hint = None
    return NormalizedError(
        code=code,
        message=message or PRIMARY_DEFAULT_MESSAGES[code],
        recoverable=code in RECOVERABLE_CODES,
        retry_after_seconds=hint,
    )


def classify_timeout() -> NormalizedError:
    return NormalizedError(
        code=ErrorCode.TIMEOUT,
        message=PRIMARY_DEFAULT_MESSAGES[ErrorCode.TIMEOUT],
        recoverable=True,
    )


def classify_for_fallback(
    status: int,
    message: str | None = None,
    retry_after: int | None = None,
) -> NormalizedError:
    """
    降级 Provider 的 HTTP 失败分类

    状态码映射与 classify 相同，但 recoverable 恒为 False；
    RATE_LIMIT 只透传上游给出的 Retry-After，不填默认值。
    """
    code = status_to_error_code(status)
    return NormalizedError(
        code=code,
        message=message or FALLBACK_DEFAULT_MESSAGES[code],
        recoverable=False,
        retry_after_seconds=retry_after if code is ErrorCode.RATE_LIMIT else None,
    )


def classify_timeout_for_fallback() -> NormalizedError:
    return NormalizedError(
        code=ErrorCode.TIMEOUT,
        message=FALLBACK_DEFAULT_MESSAGES[ErrorCode.TIMEOUT],
        recoverable=False,
    )


def parse_retry_after(headers: Mapping[str, str]) -> int | None:
    """
    解析 Retry-After 头

    支持秒数与 HTTP 日期两种格式；日期格式换算为距现在的秒数（不小于 0）。
    无法解析时返回 None。
    """
    value = None
    for key, header_value in headers.items():
        if key.lower() == "retry-after":
            value = header_value
            break
    if not value:
        return None

    value = value.strip()
    try:
        return int(value)
    except ValueError:
        pass

    try:
        retry_date = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if retry_date.tzinfo is None:
        retry_date = retry_date.replace(tzinfo=timezone.utc)
    delta = retry_date - datetime.now(timezone.utc)
    return max(int(delta.total_seconds()), 0)


__all__ = [
    "DEFAULT_RATE_LIMIT_RETRY_AFTER",
    "FALLBACK_DEFAULT_MESSAGES",
    "PRIMARY_DEFAULT_MESSAGES",
    "RECOVERABLE_CODES",
    "classify",
    "classify_for_fallback",
    "classify_timeout",
    "classify_timeout_for_fallback",
    "is_recoverable_status",
    "parse_retry_after",
    "status_to_error_code",
]
