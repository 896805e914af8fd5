"""
图标风格预设
"""

from dataclasses import dataclass
from enum import Enum


class StylePreset(str, Enum):
    """风格预设 - 决定提示词后缀与前端配色"""

    DEFAULT = "default"
    WARM = "warm"
    MONOCHROME = "monochrome"
    PASTEL = "pastel"


@dataclass(frozen=True)
class StyleConfig:
    name: str
    colors: tuple[str, str]
    prompt_suffix: str


STYLE_CONFIGS: dict[StylePreset, StyleConfig] = {
    StylePreset.DEFAULT: StyleConfig("Default", ("#6366f1", "#3b82f6"), "blue tones"),
    StylePreset.WARM: StyleConfig("Warm", ("#f97316", "#ef4444"), "warm orange and red tones"),
    StylePreset.MONOCHROME: StyleConfig("Monochrome", ("#6b7280", "#374151"), "grayscale monochrome"),
    StylePreset.PASTEL: StyleConfig("Pastel", ("#f9a8d4", "#a5b4fc"), "soft pastel colors"),
}


def parse_style(value: object) -> StylePreset | None:
    """把外部输入解析为 StylePreset，非法值返回 None"""
    if not isinstance(value, str):
        return None
    try:
        return StylePreset(value)
    except ValueError:
        return None


__all__ = ["StylePreset", "StyleConfig", "STYLE_CONFIGS", "parse_style"]
