"""
请求处理工具函数
"""

from fastapi import Request


def get_client_ip(request: Request) -> str:
    """
    获取客户端 IP（用于限流计数）

    按优先级检查：
    1. X-Forwarded-For 的第一个 IP（原始客户端）
    2. X-Real-IP
    3. 直接连接的客户端地址

    Returns:
        str: 客户端 IP，无法获取时返回 "unknown"
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        ips = [ip.strip() for ip in forwarded_for.split(",") if ip.strip()]
        if ips:
            return ips[0]

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"
