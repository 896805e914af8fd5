"""
Cloudflare Workers AI Provider（Secondary / 降级 Provider）

请求: {"prompt": <prompt>}
成功: {"success": true, "result": {"image": <base64>}}
失败: {"success": false, "errors": [{"code", "message"}]} + HTTP 状态码

作为降级链的最后一环，这里产生的所有错误 recoverable 均为 False。
"""

from __future__ import annotations

from typing import Any, Callable

import httpx

from isogen.config import config
from isogen.core.credentials import SecondaryCredentials, get_secondary_credentials
from isogen.core.logger import logger
from isogen.services.provider.base import HTTPImageProvider, PreparedRequest
from isogen.services.provider.transport import build_cloudflare_url, to_png_data_url
from isogen.services.provider.types import (
    ErrorCode,
    GenerationOptions,
    NormalizedError,
    ProviderFailure,
    ProviderName,
    ProviderOutcome,
    ProviderSuccess,
)


def _first_error_message(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    errors = data.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        message = errors[0].get("message")
        if isinstance(message, str) and message:
            return message
    return None


def transform_cloudflare_response(data: Any) -> ProviderOutcome:
    """
    将 Cloudflare 2xx 响应体转换为 ProviderOutcome

    result.image 原样拼接为 data URL；缺少图像时返回 errors[0].message
    （没有则为默认文案），不可降级。
    """
    if isinstance(data, dict) and data.get("success"):
        result = data.get("result")
        image = result.get("image") if isinstance(result, dict) else None
        if isinstance(image, str) and image:
            return ProviderSuccess(image_data_url=to_png_data_url(image))

    return ProviderFailure(
        NormalizedError(
            code=ErrorCode.SERVER_ERROR,
            message=_first_error_message(data) or "Failed to generate image.",
            recoverable=False,
        )
    )


class CloudflareProvider(HTTPImageProvider[SecondaryCredentials]):
    name = ProviderName.CLOUDFLARE
    IS_FALLBACK = True
    DEFAULT_TIMEOUT_MS = 60_000

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        credentials_resolver: Callable[[], SecondaryCredentials] | None = None,
        default_timeout_ms: int | None = None,
        model: str | None = None,
    ) -> None:
        super().__init__(client, credentials_resolver, default_timeout_ms)
        self.model = model or config.cloudflare_model

    def _default_credentials_resolver(self) -> Callable[[], SecondaryCredentials]:
        return get_secondary_credentials

    def _build_request(
        self,
        credentials: SecondaryCredentials,
        full_prompt: str,
        options: GenerationOptions,
    ) -> PreparedRequest:
        return PreparedRequest(
            url=build_cloudflare_url(credentials.account_id, self.model),
            headers={
                "Authorization": f"Bearer {credentials.token}",
                "Content-Type": "application/json",
            },
            json_body={"prompt": full_prompt},
        )

    def _parse_success(self, response: httpx.Response) -> ProviderOutcome:
        try:
            data = response.json()
        except ValueError:
            logger.warning("[cloudflare] 2xx 响应不是合法 JSON")
            return self._malformed_response("Failed to parse response.")
        return transform_cloudflare_response(data)

    def _extract_error_message(self, response: httpx.Response) -> str | None:
        try:
            return _first_error_message(response.json())
        except ValueError:
            return None


def create_cloudflare_provider(client: httpx.AsyncClient | None = None) -> CloudflareProvider:
    return CloudflareProvider(client=client, default_timeout_ms=config.secondary_timeout_ms)
