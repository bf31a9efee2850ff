import datetime

from episode_recognizer.core.cache import generate_cache_key
from episode_recognizer.core.config import AIConfig, Settings
from episode_recognizer.services.ai_recognition import OpenAIEpisodeRecognizer
from episode_recognizer.services.hybrid_recognition import HybridRecognizer, create_hybrid_recognizer

from conftest import FakeAIPort


class TestTraditionalAndChinese:
    def test_traditional_success_skips_ai(self, cache, fake_ai_port):
        recognizer = HybridRecognizer(cache, ai_port=fake_ai_port)
        result = recognizer.recognize("Show.S01E02.mkv", "Show")
        assert result.season == 1
        assert result.episodes == [2]
        assert fake_ai_port.calls == []
        assert generate_cache_key("hybrid", "Show.S01E02.mkv", "Show") in cache

    def test_chinese_season_and_episode(self, cache, fake_ai_port):
        recognizer = HybridRecognizer(cache, ai_port=fake_ai_port)
        result = recognizer.recognize("第2季第10集.mkv", "某剧")
        assert result.season == 2
        assert result.episodes == [10]
        assert fake_ai_port.calls == []

    def test_chinese_episode_defaults_to_season_one(self, cache):
        result = HybridRecognizer(cache).recognize("某剧 第5集.mp4", "某剧")
        assert result.season == 1
        assert result.episodes == [5]

    def test_second_call_is_served_from_cache(self, cache):
        recognizer = HybridRecognizer(cache)
        first = recognizer.recognize("第2季第10集.mkv", "某剧")
        hits = cache.hits
        assert recognizer.recognize("第2季第10集.mkv", "某剧") == first
        assert cache.hits == hits + 1


class TestAIFallback:
    def test_ai_disabled(self, cache, fake_ai_port):
        recognizer = HybridRecognizer(cache, ai_port=fake_ai_port, enable_ai=False)
        result = recognizer.recognize("某剧 最终回.mkv", "某剧")
        assert result.is_empty
        assert fake_ai_port.calls == []

    def test_ai_disabled_per_call(self, cache, fake_ai_port):
        recognizer = HybridRecognizer(cache, ai_port=fake_ai_port)
        assert recognizer.recognize("某剧 最终回.mkv", "某剧", enable_ai=False).is_empty
        assert fake_ai_port.calls == []

    def test_ai_result_is_used_and_cached(self, cache, fake_ai_port):
        recognizer = HybridRecognizer(cache, ai_port=fake_ai_port)
        result = recognizer.recognize("某剧 最终回.mkv", "某剧")
        assert result.season == 2
        assert result.episodes == [7]
        recognizer.recognize("某剧 最终回.mkv", "某剧")
        assert len(fake_ai_port.calls) == 1

    def test_low_value_file_skips_ai(self, cache, fake_ai_port):
        recognizer = HybridRecognizer(cache, ai_port=fake_ai_port)
        assert recognizer.recognize("Show trailer.mkv", "Show").is_empty
        assert fake_ai_port.calls == []

    def test_port_failure_returns_empty_result(self, cache):
        port = FakeAIPort(error=RuntimeError("boom"))
        recognizer = HybridRecognizer(cache, ai_port=port)
        assert recognizer.detect_episode_with_ai("某剧 最终回.mkv", "某剧").is_empty
        assert recognizer.detect_episode_with_ai("某剧 最终回.mkv", "某剧").is_empty
        assert len(port.calls) == 1

    def test_ineligible_port_is_not_called(self, cache):
        port = FakeAIPort(season=1, episodes=[1], eligible=False)
        recognizer = HybridRecognizer(cache, ai_port=port)
        assert recognizer.detect_episode_with_ai("某剧 最终回.mkv", "某剧").is_empty
        assert port.calls == []
        assert generate_cache_key("ai", "某剧 最终回.mkv", "某剧") in cache

    def test_partial_traditional_result_is_kept(self, cache):
        port = FakeAIPort()
        recognizer = HybridRecognizer(cache, ai_port=port)
        result = recognizer.recognize("某剧 2021-03-15.mkv", "某剧")
        assert len(port.calls) == 1
        assert result.season == 2021
        assert result.date == datetime.date(2021, 3, 15)


class TestFactory:
    def test_without_ai(self, monkeypatch, tmp_path):
        monkeypatch.setenv("EPISODE_RECOGNIZER_CONFIG_FILE", str(tmp_path / "missing.yml"))
        recognizer = create_hybrid_recognizer(Settings())
        assert recognizer.ai_port is None
        assert recognizer.enable_ai is False
        assert recognizer.cache.max_size == 10000

    def test_with_ai(self, monkeypatch, tmp_path):
        monkeypatch.setenv("EPISODE_RECOGNIZER_CONFIG_FILE", str(tmp_path / "missing.yml"))
        settings = Settings(ai=AIConfig(enabled=True, api_url="http://localhost/v1", api_key="k",
                                        decision_threshold=0.7))
        recognizer = create_hybrid_recognizer(settings)
        assert isinstance(recognizer.ai_port, OpenAIEpisodeRecognizer)
        assert recognizer.enable_ai is True
        assert recognizer.decision_maker.threshold == 0.7
