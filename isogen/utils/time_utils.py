"""
时间格式化工具
"""


def format_time(total_seconds: int) -> str:
    """秒数 -> "23h 50m 16s" / "5m 3s" / "42s"，非正数返回 "0s" """
    if total_seconds <= 0:
        return "0s"

    hours, remainder = divmod(int(total_seconds), 3600)
    minutes, seconds = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"
