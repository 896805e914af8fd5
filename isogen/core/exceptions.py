"""
项目内部异常定义

核心生成流程（Provider / 编排器）不向外抛异常，这里的异常只用于
配置解析等边界位置，并在 Provider 内部被捕获转换为 NormalizedError。
"""


class IsogenException(Exception):
    """项目异常基类"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingCredentialError(IsogenException):
    """必需的凭据/端点配置缺失"""

    def __init__(self, env_name: str):
        super().__init__(f"{env_name} is not configured. Please set it in .env")
        self.env_name = env_name


__all__ = ["IsogenException", "MissingCredentialError"]
