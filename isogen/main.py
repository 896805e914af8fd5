"""
FastAPI 应用入口

    uvicorn isogen.main:app
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from isogen.api.generate import router as generate_router
from isogen.clients.http_client import close_http_clients
from isogen.core.credentials import validate_env
from isogen.core.logger import logger
from isogen.services.orchestration import ProviderManager, create_provider_manager
from isogen.services.rate_limit import RequestRateLimiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = validate_env()
    if not missing:
        logger.info("[OK] 图像生成服务配置完整")
    yield
    await close_http_clients()


def create_app(
    provider_manager: ProviderManager | None = None,
    rate_limiter: RequestRateLimiter | None = None,
) -> FastAPI:
    app = FastAPI(title="isogen", lifespan=lifespan)
    app.state.provider_manager = provider_manager or create_provider_manager()
    app.state.rate_limiter = rate_limiter or RequestRateLimiter()
    app.include_router(generate_router)
    return app


app = create_app()
