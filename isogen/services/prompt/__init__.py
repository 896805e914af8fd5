"""
提示词服务
"""

from isogen.services.prompt.builder import build_prompt

__all__ = ["build_prompt"]
