"""
提示词构建 - 用户输入 + 风格后缀 -> 完整提示词
"""

from isogen.core.styles import STYLE_CONFIGS, StylePreset

PROMPT_TEMPLATE = "isometric 3D icon of {subject}, {suffix}, clean background, minimalist design, high quality"


def build_prompt(user_prompt: str, style: StylePreset) -> str:
    return PROMPT_TEMPLATE.format(subject=user_prompt, suffix=STYLE_CONFIGS[style].prompt_suffix)
