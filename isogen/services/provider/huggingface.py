"""
Hugging Face Inference Provider（Primary）

请求: {"inputs": <prompt>, "parameters": {"negative_prompt", ...}}
成功: 响应体为图像字节流
失败: JSON 或纯文本 + HTTP 状态码，429 时可能带 Retry-After
"""

from __future__ import annotations

import base64
from typing import Callable

import httpx

from isogen.config import config
from isogen.core.credentials import PrimaryCredentials, get_primary_credentials
from isogen.core.error_utils import extract_body_message
from isogen.services.provider.base import HTTPImageProvider, PreparedRequest
from isogen.services.provider.transport import to_png_data_url
from isogen.services.provider.types import (
    GenerationOptions,
    ProviderName,
    ProviderOutcome,
    ProviderSuccess,
)

DEFAULT_NEGATIVE_PROMPT = "blurry, low quality, distorted, ugly"
NUM_INFERENCE_STEPS = 30
GUIDANCE_SCALE = 7.5


class HuggingFaceProvider(HTTPImageProvider[PrimaryCredentials]):
    name = ProviderName.HUGGINGFACE
    IS_FALLBACK = False
    DEFAULT_TIMEOUT_MS = 30_000

    def _default_credentials_resolver(self) -> Callable[[], PrimaryCredentials]:
        return get_primary_credentials

    def _build_request(
        self,
        credentials: PrimaryCredentials,
        full_prompt: str,
        options: GenerationOptions,
    ) -> PreparedRequest:
        negative_prompt = (
            options.negative_prompt if options.negative_prompt is not None else DEFAULT_NEGATIVE_PROMPT
        )
        return PreparedRequest(
            url=credentials.endpoint,
            headers={
                "Authorization": f"Bearer {credentials.key}",
                "Content-Type": "application/json",
            },
            json_body={
                "inputs": full_prompt,
                "parameters": {
                    "negative_prompt": negative_prompt,
                    "num_inference_steps": NUM_INFERENCE_STEPS,
                    "guidance_scale": GUIDANCE_SCALE,
                },
            },
        )

    def _parse_success(self, response: httpx.Response) -> ProviderOutcome:
        image_bytes = response.content
        if not image_bytes:
            return self._malformed_response("Failed to process image response.")
        encoded = base64.b64encode(image_bytes).decode("ascii")
        return ProviderSuccess(image_data_url=to_png_data_url(encoded))

    def _extract_error_message(self, response: httpx.Response) -> str | None:
        return extract_body_message(response.text)


def create_huggingface_provider(client: httpx.AsyncClient | None = None) -> HuggingFaceProvider:
    return HuggingFaceProvider(client=client, default_timeout_ms=config.primary_timeout_ms)
