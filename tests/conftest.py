"""
Pytest configuration and shared fixtures.
"""

from typing import List, Optional, Tuple

import pytest

from episode_recognizer.core.cache import ResultCache
from episode_recognizer.services.ai_recognition import AIRecognitionPort
from episode_recognizer.utils.filename_parser import MatchResult


class FakeClock:
    """Manually advanced clock for cache and rate limiter tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAIPort(AIRecognitionPort):
    """AI port returning a canned result and recording calls."""

    def __init__(self, season: int = -1, episodes: Optional[List[int]] = None,
                 error: Optional[Exception] = None, eligible: Optional[bool] = None):
        self.season = season
        self.episodes = episodes or []
        self.error = error
        self.eligible = eligible
        self.calls: List[Tuple[str, Optional[str]]] = []

    def recognize(self, filename, show_title):
        self.calls.append((filename, show_title))
        if self.error is not None:
            raise self.error
        result = MatchResult(season=self.season)
        for episode in self.episodes:
            result.add_episode(episode)
        return result

    def is_eligible(self, filename, show_title):
        if self.eligible is not None:
            return self.eligible
        return super().is_eligible(filename, show_title)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ResultCache:
    """Fresh cache driven by the fake clock."""
    return ResultCache(max_size=100, ttl=24 * 60 * 60, clock=clock)


@pytest.fixture
def fake_ai_port() -> FakeAIPort:
    return FakeAIPort(season=2, episodes=[7])
