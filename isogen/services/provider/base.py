"""
HTTP 图像 Provider 基类

负责单次生成尝试的通用流程，子类只描述各自后端的差异：

1. 解析凭据（失败 -> 配置类 SERVER_ERROR，不发请求）
2. 拼装提示词与请求体
3. 带截止时间发送请求（超时 -> TIMEOUT，请求被取消）
4. 网络层异常 -> SERVER_ERROR
5. 非 2xx -> 解析 Retry-After 与错误消息后分类
6. 2xx -> 子类提取图像

所有失败都以 ProviderFailure 返回，不向调用方抛异常。
recoverable 由 Provider 角色决定：IS_FALLBACK=True 的 Provider 产生的错误永远不可降级。
"""

from __future__ import annotations

import asyncio
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

import httpx

from isogen.clients.http_client import HTTPClientPool
from isogen.core.error_utils import extract_error_message
from isogen.core.logger import logger
from isogen.services.prompt import build_prompt
from isogen.services.provider.error_classifier import (
    classify,
    classify_for_fallback,
    classify_timeout,
    classify_timeout_for_fallback,
    parse_retry_after,
)
from isogen.services.provider.transport import redact_url_for_log
from isogen.services.provider.types import (
    ErrorCode,
    GenerationOptions,
    ImageProvider,
    NormalizedError,
    ProviderFailure,
    ProviderOutcome,
)

CONFIG_ERROR_MESSAGE = "Server configuration error."
NETWORK_ERROR_MESSAGE = "Network error occurred."

CredentialsT = TypeVar("CredentialsT")


@dataclass(frozen=True)
class PreparedRequest:
    url: str
    headers: dict[str, str]
    json_body: dict[str, Any] = field(default_factory=dict)


class HTTPImageProvider(ImageProvider, Generic[CredentialsT]):
    """基于 HTTP 的图像 Provider"""

    IS_FALLBACK: bool = False
    DEFAULT_TIMEOUT_MS: int = 30_000

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        credentials_resolver: Callable[[], CredentialsT] | None = None,
        default_timeout_ms: int | None = None,
    ) -> None:
        self._client = client
        self._credentials_resolver = credentials_resolver or self._default_credentials_resolver()
        self.default_timeout_ms = default_timeout_ms or self.DEFAULT_TIMEOUT_MS

    # ------------------------------------------------------------------
    # 子类实现
    # ------------------------------------------------------------------

    @abstractmethod
    def _default_credentials_resolver(self) -> Callable[[], CredentialsT]:
        """返回默认的凭据解析函数"""

    @abstractmethod
    def _build_request(
        self,
        credentials: CredentialsT,
        full_prompt: str,
        options: GenerationOptions,
    ) -> PreparedRequest:
        """构建后端请求"""

    @abstractmethod
    def _parse_success(self, response: httpx.Response) -> ProviderOutcome:
        """解析 2xx 响应；响应中缺少图像时返回不可降级的 SERVER_ERROR"""

    @abstractmethod
    def _extract_error_message(self, response: httpx.Response) -> str | None:
        """尽力从错误响应体中提取消息"""

    # ------------------------------------------------------------------
    # 通用流程
    # ------------------------------------------------------------------

    async def generate(self, prompt: str, options: GenerationOptions) -> ProviderOutcome:
        try:
            credentials = self._credentials_resolver()
        except Exception as exc:
            logger.error("[{}] 凭据缺失，跳过请求: {}", self.name.value, exc)
            return ProviderFailure(
                NormalizedError(
                    code=ErrorCode.SERVER_ERROR,
                    message=CONFIG_ERROR_MESSAGE,
                    recoverable=not self.IS_FALLBACK,
                )
            )

        full_prompt = build_prompt(prompt, options.style)
        request = self._build_request(credentials, full_prompt, options)
        timeout_ms = options.timeout_ms if options.timeout_ms is not None else self.default_timeout_ms

        logger.debug(
            "[{}] 发送生成请求: url={}, timeout={}ms",
            self.name.value,
            redact_url_for_log(request.url),
            timeout_ms,
        )

        try:
            client = self._client or await HTTPClientPool.get_default_client_async()
            # wait_for 超时会取消进行中的请求，不会遗留计时器
            response = await asyncio.wait_for(
                client.post(request.url, headers=request.headers, json=request.json_body),
                timeout=timeout_ms / 1000,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("[{}] 请求超时 ({}ms)", self.name.value, timeout_ms)
            return ProviderFailure(self._timeout_error())
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            logger.warning("[{}] 网络异常: {}", self.name.value, extract_error_message(exc))
            return ProviderFailure(self._request_error(extract_error_message(exc)))
        except Exception as exc:
            # 构建请求时的编码错误、客户端已关闭等
            logger.exception("[{}] 请求发送失败: {}", self.name.value, extract_error_message(exc))
            return ProviderFailure(self._request_error(extract_error_message(exc)))

        if response.is_success:
            return self._parse_success(response)

        retry_after = parse_retry_after(response.headers)
        message = self._extract_error_message(response)
        error = self._classify_http(response.status_code, message, retry_after)
        logger.warning(
            "[{}] 上游返回 HTTP {}: code={}, recoverable={}, retry_after={}",
            self.name.value,
            response.status_code,
            error.code.value,
            error.recoverable,
            error.retry_after_seconds,
        )
        return ProviderFailure(error)

    def _request_error(self, message: str) -> NormalizedError:
        return NormalizedError(
            code=ErrorCode.SERVER_ERROR,
            message=message or NETWORK_ERROR_MESSAGE,
            recoverable=not self.IS_FALLBACK,
        )

    def _timeout_error(self) -> NormalizedError:
        return classify_timeout_for_fallback() if self.IS_FALLBACK else classify_timeout()

    def _classify_http(
        self,
        status: int,
        message: str | None,
        retry_after: int | None,
    ) -> NormalizedError:
        if self.IS_FALLBACK:
            return classify_for_fallback(status, message, retry_after)
        return classify(status, message, retry_after)

    @staticmethod
    def _malformed_response(message: str) -> ProviderFailure:
        # 2xx 但没有图像：同样的请求再发给别的 Provider 意义不大，标记为不可降级
        return ProviderFailure(
            NormalizedError(code=ErrorCode.SERVER_ERROR, message=message, recoverable=False)
        )


__all__ = ["HTTPImageProvider", "PreparedRequest"]
