"""
AI API 调用频率限制器

防止 AI 服务被频繁调用，保护 API 配额并避免被服务端限流。
限制规则：两次调用的最小间隔、每分钟与每小时的最大调用次数（滑动窗口）。
"""

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Optional

from episode_recognizer.core.config import RateLimitConfig

logger = logging.getLogger(__name__)

MINUTE_SECONDS = 60
HOUR_SECONDS = 60 * 60
# 等待许可时单次休眠的上限
MAX_WAIT_STEP_SECONDS = 5.0


class AIApiRateLimiter:
    """线程安全的 AI API 调用频率限制器"""

    def __init__(self, config: Optional[RateLimitConfig] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._call_history: Deque[float] = deque()
        self._total_calls = 0
        self._last_call_time: Optional[float] = None
        logger.info(f"AI API 限流器已初始化 (每分钟 {self.config.max_calls_per_minute} 次, "
                    f"每小时 {self.config.max_calls_per_hour} 次, 最小间隔 {self.config.min_interval_seconds}s)")

    def _cleanup_old_records(self, now: float) -> None:
        # 只保留最近 1 小时的调用记录
        while self._call_history and now - self._call_history[0] >= HOUR_SECONDS:
            self._call_history.popleft()

    def _count_within(self, now: float, window: float) -> int:
        return sum(1 for t in self._call_history if now - t < window)

    def request_permission(self, service_name: str) -> bool:
        """
        请求一次 API 调用许可

        Args:
            service_name: 服务名称（仅用于日志）

        Returns:
            允许调用返回 True，被限制返回 False
        """
        if not self.config.enabled:
            logger.debug(f"限流未启用，允许 {service_name} 调用 API")
            return True

        with self._lock:
            now = self._clock()
            self._cleanup_old_records(now)

            if self._last_call_time is not None:
                interval = now - self._last_call_time
                if interval < self.config.min_interval_seconds:
                    logger.warning(f"拒绝 {service_name} 的 API 调用 - 调用过于频繁 "
                                   f"({interval:.2f}s < {self.config.min_interval_seconds}s)")
                    return False

            calls_last_minute = self._count_within(now, MINUTE_SECONDS)
            if calls_last_minute >= self.config.max_calls_per_minute:
                logger.warning(f"拒绝 {service_name} 的 API 调用 - 超出每分钟限制 "
                               f"({calls_last_minute}/{self.config.max_calls_per_minute})")
                return False

            calls_last_hour = len(self._call_history)
            if calls_last_hour >= self.config.max_calls_per_hour:
                logger.warning(f"拒绝 {service_name} 的 API 调用 - 超出每小时限制 "
                               f"({calls_last_hour}/{self.config.max_calls_per_hour})")
                return False

            self._call_history.append(now)
            self._last_call_time = now
            self._total_calls += 1
            logger.debug(f"允许 {service_name} 调用 API - 总计: {self._total_calls}, "
                         f"最近一分钟: {calls_last_minute + 1}, 最近一小时: {calls_last_hour + 1}")
            return True

    def wait_for_permission(self, service_name: str, max_wait: float) -> bool:
        """阻塞等待直到获得许可，超过 max_wait 秒返回 False"""
        start = self._clock()
        while self._clock() - start < max_wait:
            if self.request_permission(service_name):
                return True
            self._sleep(min(self.config.min_interval_seconds, MAX_WAIT_STEP_SECONDS))
        logger.error(f"{service_name} 等待 API 调用许可超时 ({max_wait}s)")
        return False

    @property
    def total_calls(self) -> int:
        return self._total_calls

    def statistics(self) -> str:
        with self._lock:
            now = self._clock()
            self._cleanup_old_records(now)
            calls_last_minute = self._count_within(now, MINUTE_SECONDS)
            calls_last_hour = len(self._call_history)
        return (f"AI API Stats - Total: {self._total_calls}, "
                f"Last minute: {calls_last_minute}/{self.config.max_calls_per_minute}, "
                f"Last hour: {calls_last_hour}/{self.config.max_calls_per_hour}, "
                f"Rate limit: {'ON' if self.config.enabled else 'OFF'}")

    def reset(self) -> None:
        """重置调用记录与统计"""
        with self._lock:
            self._call_history.clear()
            self._total_calls = 0
            self._last_call_time = None
        logger.info("AI API 限流器统计已重置")
