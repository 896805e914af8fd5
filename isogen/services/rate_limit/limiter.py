"""
请求限流器 - 单 IP 配额 + 全局配额（固定窗口）

功能：
1. 每个 IP 在窗口内最多 N 次成功生成
2. 所有 IP 合计在窗口内最多 M 次
3. 计数存储可替换（CounterStore），默认内存实现，仅在单实例环境下安全

只有生成成功才调用 record()，失败的请求不消耗配额。
"""

from __future__ import annotations

import asyncio
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from isogen.config import config
from isogen.core.logger import logger
from isogen.utils.time_utils import format_time

TOTAL_COUNTER_KEY = "__total__"


@dataclass(frozen=True)
class CounterEntry:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    reason: str | None = None
    remaining_requests: int | None = None
    reset_in_seconds: int | None = None


class CounterStore(ABC):
    """固定窗口计数存储"""

    @abstractmethod
    async def get(self, key: str) -> CounterEntry | None:
        """返回未过期的计数，过期或不存在返回 None"""

    @abstractmethod
    async def increment(self, key: str, window_seconds: float) -> CounterEntry:
        """计数 +1；窗口过期或不存在时从 1 开始新窗口"""

    @abstractmethod
    async def reset(self, key: str | None = None) -> None:
        """清除指定 key，key 为 None 时清空全部"""


class MemoryCounterStore(CounterStore):
    """内存计数存储（进程重启即清零）"""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = asyncio.Lock()
        self._entries: dict[str, CounterEntry] = {}

    def now(self) -> float:
        return self._clock()

    async def get(self, key: str) -> CounterEntry | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() >= entry.reset_at:
                del self._entries[key]
                return None
            return entry

    async def increment(self, key: str, window_seconds: float) -> CounterEntry:
        async with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is None or now >= entry.reset_at:
                entry = CounterEntry(count=1, reset_at=now + window_seconds)
            else:
                entry = CounterEntry(count=entry.count + 1, reset_at=entry.reset_at)
            self._entries[key] = entry
            return entry

    async def reset(self, key: str | None = None) -> None:
        async with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)


class RequestRateLimiter:
    """按 IP 与全局两级配额的限流器"""

    def __init__(
        self,
        store: CounterStore | None = None,
        max_per_ip: int | None = None,
        max_total: int | None = None,
        window_seconds: int | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._clock = clock or time.monotonic
        self.store = store or MemoryCounterStore(clock=self._clock)
        self.max_per_ip = max_per_ip if max_per_ip is not None else config.rate_limit_per_ip
        self.max_total = max_total if max_total is not None else config.rate_limit_total
        self.window_seconds = (
            window_seconds if window_seconds is not None else config.rate_limit_window_seconds
        )

    def _reset_in(self, entry: CounterEntry) -> int:
        return max(0, math.ceil(entry.reset_at - self._clock()))

    async def check(self, ip: str) -> RateLimitDecision:
        """先检查全局配额，再检查 IP 配额；不修改计数"""
        total = await self.store.get(TOTAL_COUNTER_KEY)
        if total is not None and total.count >= self.max_total:
            reset_in = self._reset_in(total)
            logger.warning("全局配额已用尽: {}/{}", total.count, self.max_total)
            return RateLimitDecision(
                allowed=False,
                reason=f"Daily limit reached. Please try again in {format_time(reset_in)}.",
                reset_in_seconds=reset_in,
            )

        entry = await self.store.get(ip)
        if entry is None:
            return RateLimitDecision(allowed=True, remaining_requests=self.max_per_ip)

        if entry.count >= self.max_per_ip:
            reset_in = self._reset_in(entry)
            logger.info("IP {} 配额已用尽 ({}/{})", ip, entry.count, self.max_per_ip)
            return RateLimitDecision(
                allowed=False,
                reason=(
                    f"You have reached your daily limit of {self.max_per_ip} generations. "
                    f"Please try again in {format_time(reset_in)}."
                ),
                remaining_requests=0,
                reset_in_seconds=reset_in,
            )

        return RateLimitDecision(allowed=True, remaining_requests=self.max_per_ip - entry.count)

    async def record(self, ip: str) -> None:
        await self.store.increment(TOTAL_COUNTER_KEY, self.window_seconds)
        entry = await self.store.increment(ip, self.window_seconds)
        logger.debug("记录请求: ip={}, count={}", ip, entry.count)

    async def info(self) -> dict[str, int | float]:
        total = await self.store.get(TOTAL_COUNTER_KEY)
        return {
            "max_per_ip": self.max_per_ip,
            "max_total": self.max_total,
            "total_used": total.count if total else 0,
            "window_hours": self.window_seconds / 3600,
        }


__all__ = [
    "CounterEntry",
    "CounterStore",
    "MemoryCounterStore",
    "RateLimitDecision",
    "RequestRateLimiter",
]
