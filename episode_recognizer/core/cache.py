"""
识别结果缓存

进程内的识别结果缓存：按 (阶段前缀, 文件名, 剧集名) 生成哈希键，
支持 TTL 过期、LRU 淘汰与热点数据保护，并提供命中率等统计信息。

流水线由多个工作线程并发调用，所有读写与统计计数都在同一把锁内完成；
淘汰扫描是尽力而为的，竞争下短暂略超容量可以接受。

使用方式:
    cache = ResultCache(max_size=10000, ttl=24 * 3600)
    key = generate_cache_key("filename", "Show/S01E02.mkv", "Show")
    cache.put(key, result)
    cache.get(key)
"""

import base64
import hashlib
import logging
import threading
import time
import unicodedata
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 10000                # 最大缓存条目数
DEFAULT_TTL_SECONDS = 24 * 60 * 60      # 24 小时 TTL
HOT_ACCESS_COUNT = 3                    # 访问次数达到该值即为热点
HOT_WINDOW_SECONDS = 60                 # 最近 1 分钟内访问过即为热点
EVICTION_TARGET_RATIO = 0.8             # 淘汰到 80% 容量
MAX_NORMALIZED_LENGTH = 500

# clear_ai_entries 会清理的键前缀
AI_KEY_PREFIXES = ("ai", "hybrid")

# 控制字符、格式字符、私用区、未分配码位
_STRIPPED_CATEGORIES = frozenset({"Cc", "Cf", "Co", "Cn"})


# ==================== 缓存键 ====================

def normalize_for_cache(value: Optional[str]) -> str:
    """移除不可见字符、做 NFC 标准化并截断长度"""
    if not value:
        return ""
    cleaned = "".join(ch for ch in value if unicodedata.category(ch) not in _STRIPPED_CATEGORIES)
    cleaned = unicodedata.normalize("NFC", cleaned)
    return cleaned[:MAX_NORMALIZED_LENGTH]


def _b64(value: str) -> str:
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii")


def generate_cache_key(prefix: str, filename: Optional[str], showname: Optional[str] = None) -> str:
    """
    生成稳定、定长的缓存键

    格式为 "{prefix}_{sha256}"；哈希不可用时降级为 "{prefix}:{base64}:{base64}"，
    降级键同样唯一，只是更长。剧集名为 None 时以 "null" 参与计算。
    """
    normalized_filename = normalize_for_cache(filename)
    normalized_showname = normalize_for_cache(showname) if showname is not None else "null"
    combined = f"{prefix}:{normalized_filename}:{normalized_showname}"
    try:
        digest = hashlib.sha256(combined.encode("utf-8")).hexdigest()
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"生成 SHA-256 缓存键失败，降级为 Base64 编码: {e}")
        safe_showname = _b64(normalized_showname) if showname is not None else "null"
        return f"{prefix}:{_b64(normalized_filename)}:{safe_showname}"
    return f"{prefix}_{digest}"


def _is_ai_key(key: str) -> bool:
    return any(key.startswith(f"{prefix}_") or key.startswith(f"{prefix}:") for prefix in AI_KEY_PREFIXES)


def _detached(result: Any) -> Any:
    """返回结果的独立副本，调用方修改返回值不会影响缓存内容"""
    copy = getattr(result, "copy", None)
    return copy() if callable(copy) else result


# ==================== 缓存条目 ====================

@dataclass
class CacheEntry:
    """缓存条目：识别结果 + 创建时间、最后访问时间与访问次数"""
    result: Any
    created_at: float
    last_access_at: float
    access_count: int = 1

    def is_expired(self, now: float, ttl: float) -> bool:
        return now - self.created_at > ttl

    def is_hot(self, now: float) -> bool:
        """访问频繁或最近访问过的数据视为热点，不参与 LRU 淘汰"""
        return self.access_count >= HOT_ACCESS_COUNT or now - self.last_access_at < HOT_WINDOW_SECONDS

    def record_access(self, now: float) -> None:
        self.last_access_at = now
        self.access_count += 1


# ==================== 结果缓存 ====================

class ResultCache:
    """
    线程安全的识别结果缓存

    - 容量达到上限时插入会触发淘汰，按最后访问时间升序清理到 80% 容量，热点条目跳过
    - 查询时发现过期条目会立即删除并计为未命中
    - clear_ai_entries 只清理 ai / hybrid 前缀的键
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, ttl: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.time):
        if max_size <= 0:
            raise ValueError(f"缓存容量必须为正数: {max_size}")
        self._store: Dict[str, CacheEntry] = {}
        self._max_size = max_size
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._hot_hits = 0

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def ttl(self) -> float:
        return self._ttl

    # ---------- 读写 ----------

    def get(self, key: str) -> Optional[Any]:
        """获取缓存结果，不存在或已过期返回 None"""
        with self._lock:
            now = self._clock()
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(now, self._ttl):
                del self._store[key]
                self._misses += 1
                logger.debug(f"缓存条目已过期并移除: {key}")
                return None
            if entry.is_hot(now):
                self._hot_hits += 1
            entry.record_access(now)
            self._hits += 1
            return _detached(entry.result)

    def put(self, key: str, result: Any) -> None:
        """存储结果，容量已满时先执行 LRU 淘汰"""
        with self._lock:
            now = self._clock()
            if key not in self._store and len(self._store) >= self._max_size:
                self._evict(now)
            self._store[key] = CacheEntry(result=_detached(result), created_at=now, last_access_at=now)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
            return entry is not None and not entry.is_expired(self._clock(), self._ttl)

    def __len__(self) -> int:
        return self.size

    def _evict(self, now: float) -> int:
        """按最后访问时间淘汰到目标容量，热点数据排在最后且不会被移除"""
        target_size = int(self._max_size * EVICTION_TARGET_RATIO)
        to_remove = len(self._store) - target_size
        if to_remove <= 0:
            return 0

        snapshot: List[Tuple[str, CacheEntry]] = list(self._store.items())
        snapshot.sort(key=lambda item: (item[1].is_hot(now), item[1].last_access_at))

        removed = 0
        for key, entry in snapshot:
            if removed >= to_remove:
                break
            if entry.is_hot(now):
                continue
            del self._store[key]
            removed += 1
        self._evictions += removed
        logger.debug(f"LRU 淘汰完成: 移除 {removed} 条，目标 {to_remove} 条，热点数据受保护")
        return removed

    # ---------- 管理 ----------

    def clear(self) -> int:
        """清空全部缓存，返回清除数量"""
        with self._lock:
            count = len(self._store)
            self._store.clear()
        logger.debug(f"识别缓存已清空 ({count} 条)")
        return count

    def clear_ai_entries(self) -> int:
        """只清理 AI / 混合识别阶段产生的条目，返回清除数量"""
        with self._lock:
            keys_to_delete = [k for k in self._store if _is_ai_key(k)]
            for k in keys_to_delete:
                del self._store[k]
        logger.info(f"已清理 {len(keys_to_delete)} 条 AI 相关缓存")
        return len(keys_to_delete)

    def purge_expired(self) -> int:
        """主动清理所有过期条目"""
        with self._lock:
            now = self._clock()
            expired = [k for k, entry in self._store.items() if entry.is_expired(now, self._ttl)]
            for k in expired:
                del self._store[k]
        if expired:
            logger.debug(f"清理过期缓存 {len(expired)} 条")
        return len(expired)

    def reset_statistics(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0

    # ---------- 统计 ----------

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._store)

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    @property
    def evictions(self) -> int:
        return self._evictions

    @property
    def hot_hits(self) -> int:
        return self._hot_hits

    @property
    def hit_rate(self) -> float:
        with self._lock:
            total = self._hits + self._misses
            return self._hits * 100.0 / total if total > 0 else 0.0

    def statistics(self) -> str:
        return (f"Cache: {self.size} entries, Hits: {self.hits}, Misses: {self.misses}, "
                f"Hit rate: {self.hit_rate:.1f}%")
