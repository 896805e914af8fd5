"""
Provider 请求地址构建与日志脱敏
"""

from __future__ import annotations

import re

CLOUDFLARE_API_BASE = "https://api.cloudflare.com/client/v4"

# URL 中需要脱敏的查询参数
_SENSITIVE_QUERY_PARAMS_PATTERN = re.compile(
    r"([?&])(key|api_key|apikey|token|secret|password)=([^&]*)",
    re.IGNORECASE,
)
# Cloudflare 账号 ID 位于路径中
_ACCOUNT_SEGMENT_PATTERN = re.compile(r"(/accounts/)([^/]+)")


def redact_url_for_log(url: str) -> str:
    """
    对 URL 中的敏感信息脱敏，用于日志记录

    - ?key=xxx -> ?key=***
    - /accounts/abc123/ -> /accounts/***/
    """
    url = _SENSITIVE_QUERY_PARAMS_PATTERN.sub(r"\1\2=***", url)
    return _ACCOUNT_SEGMENT_PATTERN.sub(r"\1***", url)


def build_cloudflare_url(account_id: str, model: str) -> str:
    return f"{CLOUDFLARE_API_BASE}/accounts/{account_id}/ai/run/{model}"


def to_png_data_url(base64_payload: str) -> str:
    return f"data:image/png;base64,{base64_payload}"
