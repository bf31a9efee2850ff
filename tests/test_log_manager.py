import logging

import pytest

from episode_recognizer.core.config import LogConfig
from episode_recognizer.services.log_manager import SensitiveInfoFilter, get_log_dir, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    ai_logger = logging.getLogger("ai_responses")
    saved = (list(root.handlers), list(root.filters), root.level, list(ai_logger.handlers), ai_logger.propagate)
    yield
    for handler in root.handlers + ai_logger.handlers:
        if handler not in saved[0] and handler not in saved[3]:
            handler.close()
    root.handlers[:] = saved[0]
    root.filters[:] = saved[1]
    root.setLevel(saved[2])
    ai_logger.handlers[:] = saved[3]
    ai_logger.propagate = saved[4]


def _record(msg, *args):
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


class TestSensitiveInfoFilter:
    def test_masks_bearer_token(self):
        record = _record("Authorization: Bearer %s", "sk-abcdefghijklmnopqrstuvwxyz")
        assert SensitiveInfoFilter().filter(record) is True
        assert "abcdefghijklmnop" not in record.msg
        assert "Bearer ****" in record.msg
        assert record.args == ()

    def test_masks_openai_key(self):
        record = _record("key is sk-abcdefghijklmnopqrstuvwxyz")
        SensitiveInfoFilter().filter(record)
        assert record.msg == "key is sk-****"

    def test_masks_query_parameter(self):
        record = _record("GET /v1?api_key=abcdefghijklmnopqrstuvwxyz")
        SensitiveInfoFilter().filter(record)
        assert record.msg == "GET /v1?api_key=****"

    def test_plain_message_untouched(self):
        record = _record("识别到集数 '%s'", 5)
        SensitiveInfoFilter().filter(record)
        assert record.msg == "识别到集数 '5'"


def test_log_dir_from_config(tmp_path):
    assert get_log_dir(LogConfig(log_dir=str(tmp_path))) == tmp_path


def test_setup_logging(tmp_path, restore_logging):
    log_dir = setup_logging(LogConfig(level="DEBUG", log_dir=str(tmp_path / "logs")))
    assert log_dir == tmp_path / "logs"
    assert (log_dir / "app.log").exists()
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING

    ai_logger = logging.getLogger("ai_responses")
    assert ai_logger.propagate is False
    ai_logger.debug("raw response")
    for handler in ai_logger.handlers:
        handler.flush()
    assert "raw response" in (log_dir / "ai_responses.log").read_text(encoding="utf-8")


def test_setup_logging_from_package_root(tmp_path, restore_logging):
    import episode_recognizer

    log_dir = episode_recognizer.setup_logging(LogConfig(log_dir=str(tmp_path)))
    logging.getLogger("episode_recognizer.utils.filename_parser").info("token=abcdefghijklmnopqrstuvwxyz")
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "token=****" in (log_dir / "app.log").read_text(encoding="utf-8")
