"""
服务配置

所有配置均来自环境变量（启动时若存在 .env 会先加载），在进程内只读。
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

DEFAULT_HUGGINGFACE_API_URL = (
    "https://router.huggingface.co/hf-inference/models/black-forest-labs/FLUX.1-schnell"
)
DEFAULT_CLOUDFLARE_MODEL = "@cf/black-forest-labs/flux-1-schnell"

REQUIRED_ENV = (
    "HUGGINGFACE_API_KEY",
    "CLOUDFLARE_ACCOUNT_ID",
    "CLOUDFLARE_API_TOKEN",
)


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


class Config:
    """环境变量配置快照"""

    def __init__(self) -> None:
        # Primary: Hugging Face Inference
        self.huggingface_api_key = _env_str("HUGGINGFACE_API_KEY")
        self.huggingface_api_url = _env_str("HUGGINGFACE_API_URL", DEFAULT_HUGGINGFACE_API_URL)
        self.primary_timeout_ms = _env_int("PRIMARY_TIMEOUT_MS", 30_000)

        # Secondary: Cloudflare Workers AI
        self.cloudflare_account_id = _env_str("CLOUDFLARE_ACCOUNT_ID")
        self.cloudflare_api_token = _env_str("CLOUDFLARE_API_TOKEN")
        self.cloudflare_model = _env_str("CLOUDFLARE_MODEL", DEFAULT_CLOUDFLARE_MODEL)
        self.secondary_timeout_ms = _env_int("SECONDARY_TIMEOUT_MS", 60_000)

        # 共享 HTTP 客户端
        self.http_connect_timeout = _env_float("HTTP_CONNECT_TIMEOUT", 10.0)
        self.http_max_connections = _env_int("HTTP_MAX_CONNECTIONS", 50)
        self.http_keepalive_connections = _env_int("HTTP_KEEPALIVE_CONNECTIONS", 10)
        self.http_keepalive_expiry = _env_float("HTTP_KEEPALIVE_EXPIRY", 30.0)

        # 服务端限流（默认每 IP 每天 5 次，全站每天 100 次）
        self.rate_limit_per_ip = _env_int("RATE_LIMIT_PER_IP", 5)
        self.rate_limit_total = _env_int("RATE_LIMIT_TOTAL", 100)
        self.rate_limit_window_seconds = _env_int("RATE_LIMIT_WINDOW_SECONDS", 24 * 60 * 60)

        self.max_prompt_length = _env_int("MAX_PROMPT_LENGTH", 200)

    def missing_env(self) -> list[str]:
        """返回未配置的必需环境变量名"""
        values = {
            "HUGGINGFACE_API_KEY": self.huggingface_api_key,
            "CLOUDFLARE_ACCOUNT_ID": self.cloudflare_account_id,
            "CLOUDFLARE_API_TOKEN": self.cloudflare_api_token,
        }
        return [name for name in REQUIRED_ENV if not values[name]]


def load_config() -> Config:
    load_dotenv()
    return Config()
