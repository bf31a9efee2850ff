"""
episode_recognizer - 基于文件名的剧集季数/集数识别

使用方式:
    from episode_recognizer import detect_episode_from_filename, setup_logging
    setup_logging()
    result = detect_episode_from_filename("Show/Season 1/Show.S01E02.mkv", "Show")
"""

__version__ = "0.1.0"

from .utils.filename_parser import (
    MatchResult,
    detect_episode_from_filename,
    clean_episode_title,
)
from .core.cache import ResultCache
from .services.hybrid_recognition import HybridRecognizer, create_hybrid_recognizer
from .services.log_manager import setup_logging

__all__ = [
    'MatchResult',
    'detect_episode_from_filename',
    'clean_episode_title',
    'ResultCache',
    'HybridRecognizer',
    'create_hybrid_recognizer',
    'setup_logging',
]
