"""
Provider 层的数据类型

- GenerationOptions: 单次生成请求的参数（不可变，逐层原样传递）
- NormalizedError: 归一化后的错误描述，带 recoverable 标记
- ProviderSuccess / ProviderFailure: 单次 Provider 调用结果（标签联合）
- ImageProvider: 所有图像 Provider 需要实现的接口
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Literal, Union

from isogen.core.styles import StylePreset


class ProviderName(str, Enum):
    HUGGINGFACE = "huggingface"  # Primary
    CLOUDFLARE = "cloudflare"  # Secondary


class ErrorCode(str, Enum):
    """归一化错误码（封闭集合）"""

    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    SERVER_ERROR = "SERVER_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PAYMENT_REQUIRED = "PAYMENT_REQUIRED"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class GenerationOptions:
    style: StylePreset = StylePreset.DEFAULT
    negative_prompt: str | None = None
    timeout_ms: int | None = None


@dataclass(frozen=True)
class NormalizedError:
    """
    归一化错误

    retry_after_seconds 只允许出现在 RATE_LIMIT 上；
    recoverable 决定编排器是否尝试下一个 Provider。
    """

    code: ErrorCode
    message: str
    recoverable: bool
    retry_after_seconds: int | None = None

    def __post_init__(self) -> None:
        if self.retry_after_seconds is not None and self.code is not ErrorCode.RATE_LIMIT:
            raise ValueError(f"retry_after_seconds 仅适用于 RATE_LIMIT，当前为 {self.code.value}")


@dataclass(frozen=True)
class ProviderSuccess:
    image_data_url: str

    success: ClassVar[Literal[True]] = True

    @property
    def error(self) -> None:
        return None


@dataclass(frozen=True)
class ProviderFailure:
    error: NormalizedError

    success: ClassVar[Literal[False]] = False

    @property
    def image_data_url(self) -> None:
        return None


ProviderOutcome = Union[ProviderSuccess, ProviderFailure]


class ImageProvider(ABC):
    """图像生成 Provider 接口，编排器只依赖这个接口"""

    name: ProviderName

    @abstractmethod
    async def generate(self, prompt: str, options: GenerationOptions) -> ProviderOutcome:
        """执行一次生成尝试；任何失败都以 ProviderFailure 返回，不抛异常"""


__all__ = [
    "ErrorCode",
    "GenerationOptions",
    "ImageProvider",
    "NormalizedError",
    "ProviderFailure",
    "ProviderName",
    "ProviderOutcome",
    "ProviderSuccess",
]
