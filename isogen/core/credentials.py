"""
Provider 凭据解析

每次调用时从 config 读取，缺失时抛出 MissingCredentialError，
由 Provider 转换为配置类 SERVER_ERROR。
"""

from __future__ import annotations

from dataclasses import dataclass

from isogen.config import config
from isogen.core.exceptions import MissingCredentialError
from isogen.core.logger import logger


@dataclass(frozen=True)
class PrimaryCredentials:
    endpoint: str
    key: str


@dataclass(frozen=True)
class SecondaryCredentials:
    account_id: str
    token: str


def get_primary_credentials() -> PrimaryCredentials:
    if not config.huggingface_api_key:
        raise MissingCredentialError("HUGGINGFACE_API_KEY")
    if not config.huggingface_api_url:
        raise MissingCredentialError("HUGGINGFACE_API_URL")
    return PrimaryCredentials(endpoint=config.huggingface_api_url, key=config.huggingface_api_key)


def get_secondary_credentials() -> SecondaryCredentials:
    if not config.cloudflare_account_id:
        raise MissingCredentialError("CLOUDFLARE_ACCOUNT_ID")
    if not config.cloudflare_api_token:
        raise MissingCredentialError("CLOUDFLARE_API_TOKEN")
    return SecondaryCredentials(
        account_id=config.cloudflare_account_id,
        token=config.cloudflare_api_token,
    )


def validate_env() -> list[str]:
    """启动时检查必需环境变量，缺失时仅告警（不阻止启动）"""
    missing = config.missing_env()
    if missing:
        logger.warning("缺少环境变量: {}", ", ".join(missing))
    return missing


__all__ = [
    "PrimaryCredentials",
    "SecondaryCredentials",
    "get_primary_credentials",
    "get_secondary_credentials",
    "validate_env",
]
