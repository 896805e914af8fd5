from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from isogen.core.credentials import PrimaryCredentials, SecondaryCredentials
from isogen.core.styles import StylePreset
from isogen.services.orchestration.provider_manager import (
    DUAL_FAILURE_MESSAGE,
    DualFailure,
    GenerationResult,
    ProviderManager,
    min_retry_after,
)
from isogen.services.provider import CloudflareProvider, HuggingFaceProvider
from isogen.services.provider.types import (
    ErrorCode,
    GenerationOptions,
    NormalizedError,
    ProviderFailure,
    ProviderName,
    ProviderSuccess,
)


def _fake_provider(name: ProviderName, outcome) -> SimpleNamespace:
    return SimpleNamespace(name=name, generate=AsyncMock(return_value=outcome))


def _failure(code: ErrorCode, recoverable: bool, message: str = "boom", retry_after=None):
    return ProviderFailure(
        NormalizedError(
            code=code,
            message=message,
            recoverable=recoverable,
            retry_after_seconds=retry_after,
        )
    )


def _manager(primary_outcome, fallback_outcome):
    primary = _fake_provider(ProviderName.HUGGINGFACE, primary_outcome)
    fallback = _fake_provider(ProviderName.CLOUDFLARE, fallback_outcome)
    return ProviderManager(primary, fallback), primary, fallback


@pytest.mark.asyncio
async def test_primary_success_skips_fallback() -> None:
    manager, primary, fallback = _manager(
        ProviderSuccess("data:image/png;base64,AAA"),
        ProviderSuccess("data:image/png;base64,BBB"),
    )

    result = await manager.generate("a cat", GenerationOptions())

    assert result.success is True
    assert result.image_data_url == "data:image/png;base64,AAA"
    assert result.provider == ProviderName.HUGGINGFACE
    assert result.fallback_attempted is False
    assert result.error is None
    assert fallback.generate.await_count == 0


@pytest.mark.asyncio
async def test_recoverable_primary_failure_falls_back_once() -> None:
    manager, primary, fallback = _manager(
        _failure(ErrorCode.SERVICE_UNAVAILABLE, True),
        ProviderSuccess("data:image/png;base64,BBB"),
    )

    result = await manager.generate("a cat", GenerationOptions())

    assert result.success is True
    assert result.image_data_url == "data:image/png;base64,BBB"
    assert result.provider == ProviderName.CLOUDFLARE
    assert result.fallback_attempted is True
    assert primary.generate.await_count == 1
    assert fallback.generate.await_count == 1


@pytest.mark.asyncio
async def test_non_recoverable_primary_failure_is_returned_unchanged() -> None:
    primary_outcome = _failure(ErrorCode.UNAUTHORIZED, False, "bad key")
    manager, primary, fallback = _manager(primary_outcome, ProviderSuccess("x"))

    result = await manager.generate("a cat", GenerationOptions())

    assert result.success is False
    assert result.error is primary_outcome.error
    assert result.provider == ProviderName.HUGGINGFACE
    assert result.fallback_attempted is False
    assert fallback.generate.await_count == 0


@pytest.mark.asyncio
async def test_fallback_receives_identical_arguments() -> None:
    manager, primary, fallback = _manager(
        _failure(ErrorCode.TIMEOUT, True),
        ProviderSuccess("data:image/png;base64,BBB"),
    )
    options = GenerationOptions(style=StylePreset.PASTEL, negative_prompt="text", timeout_ms=5000)

    await manager.generate("a cat", options)

    primary_args = primary.generate.await_args.args
    fallback_args = fallback.generate.await_args.args
    assert fallback_args[0] == primary_args[0] == "a cat"
    assert fallback_args[1] is primary_args[1] is options


@pytest.mark.asyncio
async def test_dual_failure_merges_messages() -> None:
    manager, _, _ = _manager(
        _failure(ErrorCode.SERVER_ERROR, True, "primary down"),
        _failure(ErrorCode.SERVICE_UNAVAILABLE, False, "fallback down"),
    )

    result = await manager.generate("a cat", GenerationOptions())

    assert result.success is False
    assert result.fallback_attempted is True
    assert result.provider is None
    error = result.error
    assert isinstance(error, DualFailure)
    assert error.code == "DUAL_PROVIDER_FAILURE"
    assert error.message == DUAL_FAILURE_MESSAGE
    assert error.primary_message == "primary down"
    assert error.secondary_message == "fallback down"
    assert error.recoverable is False
    assert error.retry_after_seconds is None


@pytest.mark.asyncio
async def test_dual_failure_uses_smallest_retry_after() -> None:
    manager, _, _ = _manager(
        _failure(ErrorCode.RATE_LIMIT, True, retry_after=60),
        _failure(ErrorCode.RATE_LIMIT, False, retry_after=15),
    )

    result = await manager.generate("a cat", GenerationOptions())
    assert result.error.retry_after_seconds == 15


@pytest.mark.asyncio
async def test_dual_failure_keeps_single_retry_after() -> None:
    manager, _, _ = _manager(
        _failure(ErrorCode.RATE_LIMIT, True, retry_after=60),
        _failure(ErrorCode.SERVER_ERROR, False),
    )

    result = await manager.generate("a cat", GenerationOptions())
    assert result.error.retry_after_seconds == 60


@pytest.mark.asyncio
async def test_dual_failure_with_empty_fallback_message() -> None:
    manager, _, _ = _manager(
        _failure(ErrorCode.SERVER_ERROR, True, "primary down"),
        _failure(ErrorCode.SERVER_ERROR, False, ""),
    )

    result = await manager.generate("a cat", GenerationOptions())
    assert result.error.secondary_message == "Unknown fallback error"


def test_min_retry_after() -> None:
    assert min_retry_after(None, None) is None
    assert min_retry_after(30, None) == 30
    assert min_retry_after(None, 5) == 5
    assert min_retry_after(30, 5) == 5


def test_generation_result_enforces_exclusive_outcome() -> None:
    error = NormalizedError(code=ErrorCode.UNKNOWN, message="x", recoverable=False)
    with pytest.raises(ValueError):
        GenerationResult(success=True)
    with pytest.raises(ValueError):
        GenerationResult(success=True, image_data_url="data:", error=error)
    with pytest.raises(ValueError):
        GenerationResult(success=False)
    with pytest.raises(ValueError):
        GenerationResult(success=False, image_data_url="data:", error=error)


def _real_manager(primary_handler, fallback_handler):
    primary = HuggingFaceProvider(
        client=httpx.AsyncClient(transport=httpx.MockTransport(primary_handler)),
        credentials_resolver=lambda: PrimaryCredentials(endpoint="https://hf.example.com/m", key="k"),
    )
    fallback = CloudflareProvider(
        client=httpx.AsyncClient(transport=httpx.MockTransport(fallback_handler)),
        credentials_resolver=lambda: SecondaryCredentials(account_id="acc", token="t"),
        model="@cf/test/model",
    )
    return ProviderManager(primary, fallback)


@pytest.mark.asyncio
async def test_primary_rate_limit_falls_back_to_secondary_success() -> None:
    prompts: list[str] = []

    def primary_handler(request: httpx.Request) -> httpx.Response:
        prompts.append(request.content.decode())
        return httpx.Response(429)

    def fallback_handler(request: httpx.Request) -> httpx.Response:
        prompts.append(request.content.decode())
        return httpx.Response(200, json={"success": True, "result": {"image": "QUJD"}})

    manager = _real_manager(primary_handler, fallback_handler)
    result = await manager.generate("a tower", GenerationOptions(style=StylePreset.MONOCHROME))

    assert result.success is True
    assert result.provider == ProviderName.CLOUDFLARE
    assert result.fallback_attempted is True
    assert result.image_data_url == "data:image/png;base64,QUJD"
    assert len(prompts) == 2
    assert all("isometric 3D icon of a tower, grayscale monochrome" in body for body in prompts)


@pytest.mark.asyncio
async def test_primary_server_error_then_secondary_rate_limit() -> None:
    def primary_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="internal")

    def fallback_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, headers={"Retry-After": "45"})

    manager = _real_manager(primary_handler, fallback_handler)
    result = await manager.generate("a tower", GenerationOptions())

    assert result.success is False
    assert isinstance(result.error, DualFailure)
    assert result.error.retry_after_seconds == 45
    assert result.error.primary_message == "internal"


@pytest.mark.asyncio
async def test_primary_unauthorized_never_reaches_secondary() -> None:
    fallback_calls = []

    def primary_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "Invalid credentials"})

    def fallback_handler(request: httpx.Request) -> httpx.Response:
        fallback_calls.append(request)
        return httpx.Response(200, json={"success": True, "result": {"image": "QUJD"}})

    manager = _real_manager(primary_handler, fallback_handler)
    result = await manager.generate("a tower", GenerationOptions())

    assert result.success is False
    assert result.fallback_attempted is False
    assert result.error.code == ErrorCode.UNAUTHORIZED
    assert fallback_calls == []


@pytest.mark.asyncio
async def test_primary_request_build_error_falls_back() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True, "result": {"image": "QUJD"}})

    primary = HuggingFaceProvider(
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        credentials_resolver=lambda: PrimaryCredentials(endpoint="https://hf.example.com/m", key="kéy"),
    )
    fallback = CloudflareProvider(
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        credentials_resolver=lambda: SecondaryCredentials(account_id="acc", token="t"),
        model="@cf/test/model",
    )

    result = await ProviderManager(primary, fallback).generate("a tower", GenerationOptions())

    assert result.success is True
    assert result.provider == ProviderName.CLOUDFLARE
    assert result.fallback_attempted is True
