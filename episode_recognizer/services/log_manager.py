import logging
import logging.handlers
import os
import re
from pathlib import Path
from typing import Optional

from episode_recognizer.core.config import LogConfig, settings

AI_RESPONSES_LOGGER = "ai_responses"


# 一个过滤器，用于隐藏日志中的敏感信息（API密钥、Token等）
class SensitiveInfoFilter(logging.Filter):
    """过滤器，用于隐藏日志中的敏感信息"""

    # 敏感信息的正则表达式模式
    PATTERNS = [
        (re.compile(r'(api_key=)([a-zA-Z0-9_-]{20,})'), r'\1****'),  # URL 中的 API key
        (re.compile(r'(apikey=)([a-zA-Z0-9_-]{20,})'), r'\1****'),
        (re.compile(r'(token=)([a-zA-Z0-9_-]{20,})'), r'\1****'),
        (re.compile(r'(Bearer\s+)([a-zA-Z0-9._-]{16,})'), r'\1****'),  # Authorization 头
        (re.compile(r'\b(sk-)([a-zA-Z0-9_-]{16,})'), r'\1****'),  # OpenAI 风格的密钥
    ]

    def filter(self, record):
        msg = record.getMessage()

        for pattern, replacement in self.PATTERNS:
            msg = pattern.sub(replacement, msg)

        record.msg = msg
        record.args = ()  # 清空args，因为我们已经格式化了消息

        return True


def _is_docker_environment() -> bool:
    """检测是否在Docker容器中运行"""
    if Path("/.dockerenv").exists():
        return True
    if os.getenv("DOCKER_CONTAINER") == "true" or os.getenv("IN_DOCKER") == "true":
        return True
    return Path.cwd() == Path("/app")


def get_log_dir(log_config: Optional[LogConfig] = None) -> Path:
    """返回日志目录路径：优先使用配置，其次按运行环境选择默认目录。"""
    log_config = log_config or settings.log
    if log_config.log_dir:
        return Path(log_config.log_dir)
    if _is_docker_environment():
        return Path("/app/config/logs")
    return Path("config/logs")


def setup_logging(log_config: Optional[LogConfig] = None) -> Path:
    """
    配置根日志记录器，使其能够将日志输出到控制台和一个可轮转的文件，
    并为 AI 原始响应配置一个独立的日志文件。
    此函数应在应用启动时被调用一次，返回实际使用的日志目录。
    """
    log_config = log_config or settings.log
    log_dir = get_log_dir(log_config)

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # 如果无法创建日志目录，使用当前目录
        print(f"警告: 无法创建日志目录 {log_dir}: {e}，将使用当前目录")
        log_dir = Path(".")
    log_file = log_dir / "app.log"

    # 为控制台和文件日志定义详细的格式
    verbose_formatter = logging.Formatter(
        '[%(asctime)s] [%(name)s:%(lineno)d] [%(levelname)s] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # 从配置中获取日志级别，如果无效则默认为 INFO
    log_level = getattr(logging, log_config.level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # 清理已存在的处理器，以避免重复初始化时重复添加
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    for existing in [f for f in root_logger.filters if isinstance(f, SensitiveInfoFilter)]:
        root_logger.removeFilter(existing)

    root_logger.addFilter(SensitiveInfoFilter())
    root_logger.addHandler(logging.StreamHandler())  # 控制台处理器
    root_logger.addHandler(logging.handlers.RotatingFileHandler(
        log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8'))  # 文件处理器

    for handler in root_logger.handlers:
        handler.setFormatter(verbose_formatter)
        handler.addFilter(SensitiveInfoFilter())

    # httpx 每个请求都会输出 INFO 日志，只保留警告以上
    httpx_logger = logging.getLogger("httpx")
    httpx_logger.setLevel(logging.WARNING)
    if not any(isinstance(f, SensitiveInfoFilter) for f in httpx_logger.filters):
        httpx_logger.addFilter(SensitiveInfoFilter())

    # --- 专用日志记录器配置 ---
    ai_filepath = log_dir / "ai_responses.log"
    ai_logger = logging.getLogger(AI_RESPONSES_LOGGER)
    ai_logger.setLevel(logging.DEBUG)
    ai_logger.propagate = False
    for handler in list(ai_logger.handlers):
        ai_logger.removeHandler(handler)
        handler.close()
    ai_handler = logging.handlers.RotatingFileHandler(
        ai_filepath, maxBytes=10 * 1024 * 1024, backupCount=3, encoding='utf-8'
    )
    ai_handler.setFormatter(logging.Formatter('[%(asctime)s] - %(message)s', datefmt='%Y-%m-%d %H:%M:%S'))
    ai_handler.addFilter(SensitiveInfoFilter())
    ai_logger.addHandler(ai_handler)

    logging.info(f"日志系统已初始化 (目录: {log_dir})\n"
                 f"           - app.log (主日志)\n"
                 f"           - ai_responses.log (AI响应)")
    return log_dir
