"""
日志配置 - 基于 loguru

级别约定:
- DEBUG: Provider 请求细节、提示词拼装结果
- INFO:  降级触发、降级成功、限流拒绝
- WARNING: 上游 HTTP 失败、超时、网络异常
- ERROR: 配置缺失、双 Provider 均失败

环境变量:
- LOG_LEVEL: 控制台级别（容器内默认 INFO，本地默认 DEBUG）
- LOG_DISABLE_FILE: 为 true 时不写日志文件（测试环境使用）

使用方式:
    from isogen.core.logger import logger

    logger.info("消息")
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from loguru import logger

IS_DOCKER = (
    os.path.exists("/.dockerenv")
    or os.environ.get("DOCKER_CONTAINER", "false").lower() == "true"
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if IS_DOCKER else "DEBUG").upper()

DISABLE_FILE_LOG = os.getenv("LOG_DISABLE_FILE", "false").lower() == "true"

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

CONSOLE_FORMAT_DEV = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{message}</cyan>"
)
CONSOLE_FORMAT_PROD = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def _configure_console() -> None:
    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT_PROD if IS_DOCKER else CONSOLE_FORMAT_DEV,
        level=LOG_LEVEL,
        colorize=not IS_DOCKER,
        # 生产环境关闭 backtrace/diagnose，避免把请求中的密钥打进堆栈
        backtrace=not IS_DOCKER,
        diagnose=not IS_DOCKER,
    )


def _configure_files() -> None:
    log_dir = PROJECT_ROOT / "logs"
    log_dir.mkdir(exist_ok=True)

    file_config = {
        "format": FILE_FORMAT,
        "rotation": "50 MB",
        "retention": "14 days",
        "compression": "gz",
        "enqueue": False,
        "encoding": "utf-8",
        "catch": True,
        "backtrace": not IS_DOCKER,
        "diagnose": not IS_DOCKER,
    }

    logger.add(log_dir / "app.log", level="DEBUG", **file_config)  # type: ignore[call-overload]
    # 错误日志单独一份，方便排查双 Provider 失败
    logger.add(log_dir / "error.log", level="ERROR", **file_config)  # type: ignore[call-overload]


logger.remove()
_configure_console()
if not DISABLE_FILE_LOG:
    _configure_files()

# httpx 会在 INFO 级别打印每个请求（含完整 URL），压到 WARNING
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

__all__ = ["logger"]
