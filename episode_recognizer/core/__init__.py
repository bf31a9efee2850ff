"""
核心模块 - 静态配置与识别结果缓存

使用方式:
    from episode_recognizer.core import settings, ResultCache
    from episode_recognizer.core.config import settings
    from episode_recognizer.core.cache import ResultCache, generate_cache_key
"""

# 配置相关
from .config import settings, Settings, AIConfig, CacheConfig, LogConfig, RateLimitConfig

# 识别结果缓存
from .cache import (
    CacheEntry,
    ResultCache,
    generate_cache_key,
    normalize_for_cache,
)

__all__ = [
    # 配置
    'settings',
    'Settings',
    'AIConfig',
    'CacheConfig',
    'LogConfig',
    'RateLimitConfig',
    # 缓存
    'CacheEntry',
    'ResultCache',
    'generate_cache_key',
    'normalize_for_cache',
]
