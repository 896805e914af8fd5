"""
全局 HTTP 客户端池

两个 Provider 共用一个 httpx.AsyncClient，复用 keep-alive 连接。
单次请求的总等待时间由 Provider 自己控制（asyncio.wait_for），
这里的 httpx.Timeout 只约束各阶段的上限。
"""

from __future__ import annotations

import asyncio

import httpx

from isogen.config import config
from isogen.core.logger import logger

_default_client_lock = asyncio.Lock()


def _build_timeout() -> httpx.Timeout:
    # read/write/pool 不设上限，整体截止时间交给调用方
    return httpx.Timeout(None, connect=config.http_connect_timeout)


def _build_limits() -> httpx.Limits:
    return httpx.Limits(
        max_connections=config.http_max_connections,
        max_keepalive_connections=config.http_keepalive_connections,
        keepalive_expiry=config.http_keepalive_expiry,
    )


class HTTPClientPool:
    """
    全局 HTTP 客户端池

    - get_default_client_async(): 进程内共享客户端（懒加载，双重检查）
    - close_all(): 应用关闭时释放连接
    """

    _default_client: httpx.AsyncClient | None = None

    @classmethod
    async def get_default_client_async(cls) -> httpx.AsyncClient:
        if cls._default_client is not None and not cls._default_client.is_closed:
            return cls._default_client

        async with _default_client_lock:
            if cls._default_client is None or cls._default_client.is_closed:
                cls._default_client = httpx.AsyncClient(
                    timeout=_build_timeout(),
                    limits=_build_limits(),
                    follow_redirects=True,
                )
                logger.info(
                    "全局HTTP客户端已初始化: max_connections={}, keepalive={}",
                    config.http_max_connections,
                    config.http_keepalive_connections,
                )
        return cls._default_client

    @classmethod
    async def close_all(cls) -> None:
        if cls._default_client is not None:
            await cls._default_client.aclose()
            cls._default_client = None
            logger.info("全局HTTP客户端已关闭")


async def close_http_clients() -> None:
    await HTTPClientPool.close_all()
