"""
配置模块

    from isogen.config import config
"""

from isogen.config.settings import Config, load_config

config = load_config()

__all__ = ["Config", "config", "load_config"]
