"""
AI 辅助剧集识别

传统解析与中文格式解析都失败时的兜底方案：
- AIRecognitionPort: 识别端口抽象，混合识别器只依赖这个接口
- is_ai_eligible / AIDecisionMaker: 判断文件名是否值得调用 AI
- OpenAIEpisodeRecognizer: 基于 OpenAI 兼容 Chat Completions 接口的实现

端口实现不向外抛出网络、HTTP、JSON 或解析异常，失败时返回空结果。
"""

import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

import httpx

from episode_recognizer.core.config import AIConfig
from episode_recognizer.services.rate_limiter import AIApiRateLimiter
from episode_recognizer.utils.filename_parser import MatchResult

logger = logging.getLogger(__name__)
# 原始 AI 响应写入专用日志文件
ai_responses_logger = logging.getLogger("ai_responses")

SERVICE_NAME = "OpenAIEpisodeRecognition"

# 文件名超过该长度时通常是描述性文字，不是标准剧集
MAX_AI_FILENAME_LENGTH = 100

# 明显不是正片的关键词
NON_EPISODE_KEYWORDS = (
    "trailer", "预告", "花絮", "幕后", "making", "behind",
    "interview", "访谈", "documentary", "纪录片", "special", "特辑",
    "opening", "ending", "op", "ed", "主题曲", "片头", "片尾",
)

# 短拉丁关键词按完整单词匹配
_SHORT_KEYWORD_RES = {
    keyword: re.compile(r'(?<![a-z])' + keyword + r'(?![a-z])')
    for keyword in NON_EPISODE_KEYWORDS if keyword.isascii() and len(keyword) <= 2
}

AI_RESPONSE_PATTERN = re.compile(r'(\d{1,3})\s+(\d{1,4})')

EPISODE_RECOGNITION_PROMPT = (
    "你是一个专业的电视剧剧集文件名解析引擎。你的任务是从复杂的剧集文件名中准确提取季数和集数信息，必要时可以联网搜索确认。\n\n"
    "**输入：**\n"
    "电视剧标题和剧集文件名。\n\n"
    "**输出：**\n"
    "严格按照 `季数 集数` 格式输出，用空格分隔，绝对不要返回任何解释或错误信息。如果是特别篇或OVA，季数使用0。\n\n"
    "**处理规则：**\n"
    "1. 优先识别明确的季数集数标记（S01E01、第一季第01集等）\n"
    "2. 对于动漫，识别\"第X话\"、\"第X集\"等格式\n"
    "3. 特别篇、OVA、SP等归为第0季\n"
    "4. 如果只有集数没有季数，默认为第1季\n"
    "5. 如果完全无法识别，输出 \"1 1\"\n"
    "6. 禁止返回'I am unable to'或任何错误说明\n\n"
    "**输出示例：**\n"
    "1 5\n"
    "2 12\n"
    "0 1\n"
    "3 8\n\n"
    "**错误示例（不要这样输出）：**\n"
    "❌ 第1季第5集\n"
    "❌ Season 1 Episode 5\n"
    "❌ 1-5\n"
    "❌ 任何解释性文字\n"
    "❌ I am unable to...\n\n"
)


# ============================================================================
# 调用资格与智能决策
# ============================================================================

def _contains_keyword(lower_filename: str, keyword: str) -> bool:
    short_re = _SHORT_KEYWORD_RES.get(keyword)
    if short_re is not None:
        return short_re.search(lower_filename) is not None
    return keyword in lower_filename


def _letters_and_digits(value: str) -> str:
    return "".join(ch for ch in value if ch.isalnum()).lower()


def is_ai_eligible(filename: str, show_title: Optional[str]) -> bool:
    """
    检查文件是否适合 AI 识别

    过长的文件名、包含非正片关键词的文件，以及与剧集名没有任何共同字符的文件
    （可能是错误归类）都不送去 AI。
    """
    if len(filename) > MAX_AI_FILENAME_LENGTH:
        logger.debug(f"文件名过长，跳过 AI 识别: {filename}")
        return False

    lower_filename = filename.lower()
    for keyword in NON_EPISODE_KEYWORDS:
        if _contains_keyword(lower_filename, keyword):
            logger.debug(f"文件名包含非正片关键词 '{keyword}'，跳过 AI: {filename}")
            return False

    if show_title:
        clean_title = _letters_and_digits(show_title)
        clean_filename = _letters_and_digits(filename)
        has_common_chars = any(ch in clean_filename for ch in clean_title)
        if not has_common_chars and len(clean_title) > 2:
            logger.debug(f"文件名与剧集名没有共同字符，跳过 AI: {filename} vs {show_title}")
            return False

    return True


class AIDecisionMaker:
    """
    智能 AI 调用决策器

    评分 = 文件类型权重×0.3 + 传统解析失败程度×0.4 + 文件名复杂度×0.2 + 剧集名匹配度×0.1，
    评分超过阈值才调用 AI。
    """

    # 基于经验的文件类型 AI 成功率权重
    FILE_TYPE_WEIGHTS: Dict[str, float] = {
        "mkv": 0.9,
        "mp4": 0.85,
        "avi": 0.8,
        "wmv": 0.7,
        "flv": 0.6,
    }
    DEFAULT_FILE_TYPE_WEIGHT = 0.75

    def __init__(self, threshold: float = 0.5):
        self.threshold = threshold

    @staticmethod
    def _file_extension(filename: str) -> str:
        last_dot = filename.rfind('.')
        return filename[last_dot + 1:] if last_dot > 0 else ""

    @staticmethod
    def failure_score(result: MatchResult) -> float:
        has_season = result.season >= 0
        if has_season and result.episodes:
            return 0.2  # 传统解析成功，AI 价值较低
        if has_season or result.episodes:
            return 0.6  # 部分成功
        return 1.0      # 完全失败，AI 价值最高

    @staticmethod
    def complexity_score(filename: str) -> float:
        if not filename:
            return 0.5
        special_chars = len(re.sub(r'[a-zA-Z0-9\s]', '', filename))
        return min(1.0, special_chars / len(filename) * 2)

    @staticmethod
    def title_match_score(filename: str, show_title: Optional[str]) -> float:
        if not show_title:
            return 0.5  # 无法判断，给中等分
        if show_title.lower() in filename.lower():
            return 0.3  # 包含剧集名，传统解析可能足够
        return 0.8

    def score(self, filename: str, show_title: Optional[str], result: MatchResult) -> float:
        extension = self._file_extension(filename).lower()
        type_weight = self.FILE_TYPE_WEIGHTS.get(extension, self.DEFAULT_FILE_TYPE_WEIGHT)
        score = (type_weight * 0.3
                 + self.failure_score(result) * 0.4
                 + self.complexity_score(filename) * 0.2
                 + self.title_match_score(filename, show_title) * 0.1)
        return min(1.0, max(0.0, score))

    def should_use_ai(self, filename: str, show_title: Optional[str], result: MatchResult) -> bool:
        if not is_ai_eligible(filename, show_title):
            return False
        score = self.score(filename, show_title, result)
        decision = score > self.threshold
        logger.debug(f"AI 调用决策 {filename}: 评分={score:.2f}, 阈值={self.threshold}, 调用={decision}")
        return decision


# ============================================================================
# 识别端口
# ============================================================================

class AIRecognitionPort(ABC):
    """AI 识别端口抽象"""

    @abstractmethod
    def recognize(self, filename: str, show_title: Optional[str]) -> MatchResult:
        """识别季数与集数，失败时返回空结果"""
        raise NotImplementedError

    def is_eligible(self, filename: str, show_title: Optional[str]) -> bool:
        return is_ai_eligible(filename, show_title)


def parse_ai_response(content: Optional[str]) -> MatchResult:
    """解析 AI 返回的 "季数 集数" 文本"""
    result = MatchResult()
    if not content or not content.strip():
        return result

    cleaned = content.strip()
    m = AI_RESPONSE_PATTERN.search(cleaned)
    if m:
        result.season = int(m.group(1))
        result.add_episode(int(m.group(2)))
        logger.debug(f"AI 响应解析成功 - 季: {result.season}, 集: {result.episodes}")
        return result

    logger.warning(f"无法解析 AI 响应: {cleaned}")
    return result


def extract_path_context(full_path: Optional[str]) -> Optional[str]:
    """提取路径的最后三层（含文件名），为 AI 提供目录上下文"""
    if not full_path or not full_path.strip():
        return full_path
    parts = full_path.replace('\\', '/').split('/')
    context = "/".join(parts[-3:])
    logger.debug(f"路径上下文: '{full_path}' -> '{context}'")
    return context


class OpenAIEpisodeRecognizer(AIRecognitionPort):
    """基于 OpenAI 兼容接口的剧集识别，带限流与指数退避重试"""

    def __init__(self, config: AIConfig, rate_limiter: Optional[AIApiRateLimiter] = None,
                 client: Optional[httpx.Client] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self.rate_limiter = rate_limiter
        self._client = client
        self._sleep = sleep

    def _get_client(self) -> httpx.Client:
        """获取或创建 httpx 客户端"""
        if self._client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.config.timeout, connect=self.config.connect_timeout)
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _build_payload(self, path_context: str, show_title: Optional[str]) -> Dict[str, Any]:
        user_prompt = f"电视剧: {show_title}\n剧集文件: {path_context}"
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": EPISODE_RECOGNITION_PROMPT},
            {"role": "user", "content": user_prompt},
        ]
        return {
            "model": self.config.model,
            "messages": messages,
            "max_tokens": 500,
            "temperature": 0.3,
        }

    def _call_api(self, path_context: str, show_title: Optional[str]) -> Optional[str]:
        """调用 Chat Completions 接口，返回回复文本；非 200 响应返回 None"""
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }
        payload = self._build_payload(path_context, show_title)
        logger.debug(f"AI 请求: url={self.config.api_url}, model={self.config.model}, 文件={path_context}")

        response = self._get_client().post(self.config.api_url, json=payload, headers=headers)
        if response.status_code != 200:
            logger.error(f"AI API 错误: {response.status_code} - {response.text[:500]}")
            return None

        data = response.json()
        ai_responses_logger.debug(f"剧集识别响应 [{path_context}]: {data}")
        choices = data.get("choices") or []
        if not choices:
            return None
        return (choices[0].get("message") or {}).get("content")

    def recognize(self, filename: str, show_title: Optional[str]) -> MatchResult:
        if not self.config.api_url or not self.config.api_key:
            logger.warning("AI API 未配置 (api_url / api_key 为空)，跳过 AI 识别")
            return MatchResult()

        max_retries = max(1, self.config.max_retries)
        last_error: Optional[Exception] = None
        for attempt in range(1, max_retries + 1):
            start = time.monotonic()
            try:
                logger.info(f"AI 剧集识别 (第 {attempt}/{max_retries} 次): {filename}")
                if self.rate_limiter is not None and not self.rate_limiter.request_permission(SERVICE_NAME):
                    logger.warning(f"AI 调用被限流 (第 {attempt}/{max_retries} 次)")
                else:
                    path_context = extract_path_context(filename)
                    content = self._call_api(path_context, show_title)
                    elapsed_ms = int((time.monotonic() - start) * 1000)
                    if content and content.strip():
                        result = parse_ai_response(content)
                        if result.season > 0 or result.episodes:
                            logger.info(f"AI 识别完成 (第 {attempt} 次, {elapsed_ms}ms): "
                                        f"季 {result.season}, 集 {result.episodes}")
                            return result
                        logger.warning(f"AI 返回无效结果 (第 {attempt}/{max_retries} 次, {elapsed_ms}ms): '{content}'")
                    else:
                        logger.warning(f"AI 返回空结果 (第 {attempt}/{max_retries} 次, {elapsed_ms}ms)")
            except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError, IndexError) as e:
                last_error = e
                logger.warning(f"AI 识别失败 (第 {attempt}/{max_retries} 次): {e}")

            if attempt < max_retries:
                # 指数退避: 1s, 2s, 4s...
                delay = 1.0 * (2 ** (attempt - 1))
                logger.info(f"{delay:.0f}s 后重试 AI 识别")
                self._sleep(delay)

        if last_error is not None:
            logger.error(f"AI 识别在 {max_retries} 次尝试后失败: {filename}", exc_info=last_error)
        else:
            logger.warning(f"AI 识别在 {max_retries} 次尝试后仍无有效结果: {filename}")
        return MatchResult()
