"""
Orchestration 模块

- ProviderManager: 双 Provider 编排器（Primary 优先，单次降级）
- GenerationResult / DualFailure: 编排结果与合并错误
"""

from isogen.services.orchestration.provider_manager import (
    DualFailure,
    GenerationResult,
    ProviderManager,
    create_provider_manager,
)

__all__ = [
    "DualFailure",
    "GenerationResult",
    "ProviderManager",
    "create_provider_manager",
]
