"""
提示词输入处理：XSS 清洗、非空校验、长度截断
"""

from __future__ import annotations

import re
from dataclasses import dataclass

MAX_PROMPT_LENGTH = 200

_HTML_ESCAPES = (
    ("&", "&amp;"),  # 必须最先替换
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
)
_JAVASCRIPT_URL_PATTERN = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_PATTERN = re.compile(r"on\w+\s*=", re.IGNORECASE)
_DATA_HTML_PATTERN = re.compile(r"data:\s*text/html", re.IGNORECASE)


@dataclass(frozen=True)
class ProcessedPrompt:
    sanitized: str
    is_valid: bool
    remaining: int


def sanitize_input(value: object) -> str:
    """
    清洗用户输入

    - 去除 NUL 字节
    - 转义 HTML 特殊字符
    - 去除 javascript: 协议、on*= 事件处理器、data:text/html
    """
    if not isinstance(value, str):
        return ""

    sanitized = value.replace("\0", "")
    for char, escaped in _HTML_ESCAPES:
        sanitized = sanitized.replace(char, escaped)

    sanitized = _JAVASCRIPT_URL_PATTERN.sub("", sanitized)
    sanitized = _EVENT_HANDLER_PATTERN.sub("", sanitized)
    sanitized = _DATA_HTML_PATTERN.sub("", sanitized)
    return sanitized


def is_valid_prompt(prompt: object) -> bool:
    return isinstance(prompt, str) and len(prompt.strip()) > 0


def enforce_character_limit(value: object, limit: int = MAX_PROMPT_LENGTH) -> str:
    if not isinstance(value, str):
        return ""
    return value[:limit]


def calculate_remaining(value: object, limit: int = MAX_PROMPT_LENGTH) -> int:
    if not isinstance(value, str):
        return limit
    return limit - min(len(value), limit)


def _drop_partial_entity(value: str) -> str:
    # 清洗后的 "&" 只会是实体开头，截断后没有 ";" 收尾说明实体被截断
    amp = value.rfind("&")
    if amp != -1 and ";" not in value[amp:]:
        return value[:amp]
    return value


def process_prompt_input(value: object, limit: int = MAX_PROMPT_LENGTH) -> ProcessedPrompt:
    """清洗 -> 截断（不切断 HTML 实体） -> 校验，一次完成"""
    limited = _drop_partial_entity(enforce_character_limit(sanitize_input(value), limit))
    return ProcessedPrompt(
        sanitized=limited,
        is_valid=is_valid_prompt(limited),
        remaining=calculate_remaining(limited, limit),
    )
