"""
混合剧集识别

识别顺序：传统文件名解析 → 中文格式解析 → （按智能决策）AI 辅助识别。
每一步的结果都会写入注入的 ResultCache，重复识别同一文件直接命中缓存。

使用方式:
    recognizer = create_hybrid_recognizer()
    result = recognizer.recognize("Show/Season 1/Show.S01E02.mkv", "Show")
"""

import logging
from typing import Optional

from episode_recognizer.core.cache import ResultCache, generate_cache_key
from episode_recognizer.core.config import Settings
from episode_recognizer.services.ai_recognition import (
    AIDecisionMaker,
    AIRecognitionPort,
    OpenAIEpisodeRecognizer,
)
from episode_recognizer.services.rate_limiter import AIApiRateLimiter
from episode_recognizer.utils.filename_parser import (
    MatchResult,
    detect_episode_from_filename,
    parse_chinese_episode_format,
)

logger = logging.getLogger(__name__)

HYBRID_CACHE_PREFIX = "hybrid"
AI_CACHE_PREFIX = "ai"


class HybridRecognizer:
    """混合识别协调器，缓存与 AI 端口均由外部注入"""

    def __init__(self, cache: ResultCache, ai_port: Optional[AIRecognitionPort] = None,
                 enable_ai: bool = True, ai_threshold: float = 0.5):
        self.cache = cache
        self.ai_port = ai_port
        self.enable_ai = enable_ai
        self.decision_maker = AIDecisionMaker(threshold=ai_threshold)

    def recognize(self, filename: str, show_title: Optional[str],
                  enable_ai: Optional[bool] = None) -> MatchResult:
        """
        识别文件的季数与集数

        Args:
            filename: 相对路径或文件名
            show_title: 剧集名
            enable_ai: 覆盖构造时的 AI 开关，None 表示沿用
        """
        use_ai = self.enable_ai if enable_ai is None else enable_ai
        cache_key = generate_cache_key(HYBRID_CACHE_PREFIX, filename, show_title)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"使用缓存的混合识别结果: {filename}")
            return cached

        # 1. 传统解析
        traditional_result = detect_episode_from_filename(filename, show_title, cache=self.cache)
        if traditional_result.is_complete:
            logger.debug(f"传统解析成功: {filename}")
            self.cache.put(cache_key, traditional_result)
            return traditional_result

        # 2. 中文格式解析
        logger.debug(f"传统解析失败，尝试中文格式解析: {filename}")
        chinese_result = parse_chinese_episode_format(MatchResult(), filename)
        if chinese_result.episodes:
            if chinese_result.season == -1:
                chinese_result.season = 1
            logger.info(f"中文格式解析: {filename} → "
                        f"S{chinese_result.season:02d}E{chinese_result.episodes[0]:02d}")
            self.cache.put(cache_key, chinese_result)
            return chinese_result

        # 3. AI 辅助识别
        if not use_ai or self.ai_port is None:
            logger.debug(f"AI 识别未启用，返回中文解析结果: {filename}")
            self.cache.put(cache_key, chinese_result)
            return chinese_result

        if not self.decision_maker.should_use_ai(filename, show_title, chinese_result):
            logger.debug(f"智能决策: 跳过 AI ({filename} 价值较低)")
            self.cache.put(cache_key, chinese_result)
            return chinese_result

        logger.info(f"智能决策: 使用 AI 识别 {filename}")
        ai_result = self.detect_episode_with_ai(filename, show_title)
        if ai_result.is_complete:
            logger.info(f"AI 识别: {filename} → S{ai_result.season:02d}E{ai_result.episodes[0]:02d}")
            self.cache.put(cache_key, ai_result)
            return ai_result

        # 所有方法都失败，返回已有的部分结果
        logger.warning(f"所有识别方法均失败: {filename}")
        fallback = chinese_result if not chinese_result.is_empty else traditional_result
        self.cache.put(cache_key, fallback)
        return fallback

    def detect_episode_with_ai(self, filename: str, show_title: Optional[str]) -> MatchResult:
        """调用 AI 端口识别，结果（包括空结果）按 "ai" 前缀缓存"""
        cache_key = generate_cache_key(AI_CACHE_PREFIX, filename, show_title)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"使用缓存的 AI 识别结果: {filename}")
            return cached

        if self.ai_port is None or not self.ai_port.is_eligible(filename, show_title):
            logger.info(f"跳过 AI 识别: {filename}")
            empty = MatchResult()
            # 缓存空结果
            self.cache.put(cache_key, empty)
            return empty

        logger.info(f"尝试 AI 辅助识别: {filename}")
        try:
            ai_result = self.ai_port.recognize(filename, show_title)
        except Exception as e:
            logger.error(f"AI 识别端口异常: {filename}: {e}", exc_info=True)
            ai_result = MatchResult()

        self.cache.put(cache_key, ai_result)
        return ai_result


def create_hybrid_recognizer(settings: Optional[Settings] = None,
                             cache: Optional[ResultCache] = None) -> HybridRecognizer:
    """根据配置创建混合识别器：缓存、限流器与 AI 端口"""
    if settings is None:
        from episode_recognizer.core.config import settings as default_settings
        settings = default_settings

    if cache is None:
        cache = ResultCache(max_size=settings.cache.max_size, ttl=settings.cache.ttl_seconds)

    ai_port: Optional[AIRecognitionPort] = None
    if settings.ai.enabled:
        rate_limiter = AIApiRateLimiter(settings.rate_limit)
        ai_port = OpenAIEpisodeRecognizer(settings.ai, rate_limiter=rate_limiter)
        logger.info(f"AI 辅助识别已启用 (模型: {settings.ai.model})")

    return HybridRecognizer(
        cache=cache,
        ai_port=ai_port,
        enable_ai=settings.ai.enabled,
        ai_threshold=settings.ai.decision_threshold,
    )
