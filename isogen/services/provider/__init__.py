"""
图像 Provider 模块

- HuggingFaceProvider: Primary，按状态码判断是否可降级
- CloudflareProvider: Secondary，所有错误均不可降级
- error_classifier: 状态码/超时 -> NormalizedError
"""

from isogen.services.provider.cloudflare import CloudflareProvider, create_cloudflare_provider
from isogen.services.provider.huggingface import HuggingFaceProvider, create_huggingface_provider
from isogen.services.provider.types import (
    ErrorCode,
    GenerationOptions,
    ImageProvider,
    NormalizedError,
    ProviderFailure,
    ProviderName,
    ProviderOutcome,
    ProviderSuccess,
)

__all__ = [
    "CloudflareProvider",
    "ErrorCode",
    "GenerationOptions",
    "HuggingFaceProvider",
    "ImageProvider",
    "NormalizedError",
    "ProviderFailure",
    "ProviderName",
    "ProviderOutcome",
    "ProviderSuccess",
    "create_cloudflare_provider",
    "create_huggingface_provider",
]
