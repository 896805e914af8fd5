"""
Provider 编排器 - Primary 优先，可恢复失败时降级到 Secondary 一次

状态流转:
    ATTEMPT_PRIMARY -> 成功: DONE
                    -> 不可恢复失败: DONE（不调用 Secondary）
                    -> 可恢复失败: ATTEMPT_SECONDARY
    ATTEMPT_SECONDARY -> 成功 / 失败: DONE

两个 Provider 串行调用，不并发抢跑；Secondary 收到的 prompt 与 options
与 Primary 完全相同（同一对象）。generate() 永远返回 GenerationResult，不抛异常。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from isogen.core.logger import logger
from isogen.services.provider import create_cloudflare_provider, create_huggingface_provider
from isogen.services.provider.types import (
    GenerationOptions,
    ImageProvider,
    NormalizedError,
    ProviderName,
)

DUAL_FAILURE_CODE = "DUAL_PROVIDER_FAILURE"
DUAL_FAILURE_MESSAGE = "Both image generation services are currently unavailable."
UNKNOWN_FALLBACK_ERROR = "Unknown fallback error"


@dataclass(frozen=True)
class DualFailure:
    """两个 Provider 都失败时的合并错误"""

    primary_message: str
    secondary_message: str
    retry_after_seconds: int | None = None
    message: str = DUAL_FAILURE_MESSAGE

    code: Literal["DUAL_PROVIDER_FAILURE"] = DUAL_FAILURE_CODE
    # 没有第三个 Provider
    recoverable: Literal[False] = False


@dataclass(frozen=True)
class GenerationResult:
    success: bool
    image_data_url: str | None = None
    provider: ProviderName | None = None
    fallback_attempted: bool = False
    error: NormalizedError | DualFailure | None = None

    def __post_init__(self) -> None:
        if self.success and (self.image_data_url is None or self.error is not None):
            raise ValueError("成功结果必须携带图像且不能携带错误")
        if not self.success and (self.error is None or self.image_data_url is not None):
            raise ValueError("失败结果必须携带错误且不能携带图像")


def min_retry_after(*values: int | None) -> int | None:
    """取所有非空 retry_after 的最小值，全部为空时返回 None"""
    present = [value for value in values if value is not None]
    return min(present) if present else None


class ProviderManager:
    """双 Provider 编排器，只依赖 ImageProvider 接口"""

    def __init__(self, primary_provider: ImageProvider, fallback_provider: ImageProvider) -> None:
        self.primary_provider = primary_provider
        self.fallback_provider = fallback_provider

    async def generate(self, prompt: str, options: GenerationOptions) -> GenerationResult:
        primary_name = self.primary_provider.name
        fallback_name = self.fallback_provider.name

        primary_outcome = await self.primary_provider.generate(prompt, options)
        if primary_outcome.success:
            return GenerationResult(
                success=True,
                image_data_url=primary_outcome.image_data_url,
                provider=primary_name,
                fallback_attempted=False,
            )

        primary_error = primary_outcome.error
        if not primary_error.recoverable:
            logger.info(
                "Primary({}) 不可恢复错误 {}，不降级",
                primary_name.value,
                primary_error.code.value,
            )
            return GenerationResult(
                success=False,
                provider=primary_name,
                fallback_attempted=False,
                error=primary_error,
            )

        logger.info(
            "Primary({}) 失败 {}，降级到 {}",
            primary_name.value,
            primary_error.code.value,
            fallback_name.value,
        )
        fallback_outcome = await self.fallback_provider.generate(prompt, options)
        if fallback_outcome.success:
            logger.info("降级成功: provider={}", fallback_name.value)
            return GenerationResult(
                success=True,
                image_data_url=fallback_outcome.image_data_url,
                provider=fallback_name,
                fallback_attempted=True,
            )

        fallback_error = fallback_outcome.error
        dual_error = DualFailure(
            primary_message=primary_error.message,
            secondary_message=fallback_error.message or UNKNOWN_FALLBACK_ERROR,
            retry_after_seconds=min_retry_after(
                primary_error.retry_after_seconds,
                fallback_error.retry_after_seconds,
            ),
        )
        logger.error(
            "双 Provider 均失败: primary={} ({}), fallback={} ({}), retry_after={}",
            primary_error.code.value,
            primary_error.message,
            fallback_error.code.value,
            fallback_error.message,
            dual_error.retry_after_seconds,
        )
        return GenerationResult(success=False, fallback_attempted=True, error=dual_error)


def create_provider_manager() -> ProviderManager:
    """默认编排器：Hugging Face 为 Primary，Cloudflare 为 Secondary"""
    return ProviderManager(
        primary_provider=create_huggingface_provider(),
        fallback_provider=create_cloudflare_provider(),
    )


__all__ = [
    "DUAL_FAILURE_CODE",
    "DUAL_FAILURE_MESSAGE",
    "DualFailure",
    "GenerationResult",
    "ProviderManager",
    "create_provider_manager",
    "min_retry_after",
]
