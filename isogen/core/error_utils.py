"""
错误消息处理工具函数
"""

import json


def extract_error_message(error: Exception) -> str:
    """
    从传输层异常中提取可读的错误消息

    httpx 的部分异常（如超时、连接被重置）str() 为空，此时回退到 repr，
    保证返回给上层的 message 永远非空。
    """
    return str(error) or repr(error)


def extract_body_message(text: str | None) -> str | None:
    """
    从上游错误响应体中尽力提取消息

    优先解析 JSON 的 error / message 字段，解析失败则返回原始文本。
    空响应体返回 None（由分类器填充默认消息）。

    Args:
        text: 响应体文本

    Returns:
        错误消息或 None
    """
    if not text or not text.strip():
        return None

    try:
        data = json.loads(text)
    except ValueError:
        return text

    if isinstance(data, dict):
        for field in ("error", "message"):
            value = data.get(field)
            if isinstance(value, str) and value.strip():
                return value
            # {"error": {"message": "..."}} 形式
            if isinstance(value, dict):
                nested = value.get("message")
                if isinstance(nested, str) and nested.strip():
                    return nested
    return text
