import json
import logging

import pytest
import structlog

from solchat import __version__
from solchat.config import settings
from solchat.logging_config import SERVICE_NAME, add_service_context, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_service_context_is_added_without_overriding():
    assert add_service_context(None, "info", {"event": "x"}) == {
        "event": "x",
        "service": SERVICE_NAME,
        "version": __version__,
    }
    assert add_service_context(None, "info", {"service": "cli"})["service"] == "cli"


def test_json_records_carry_service_fields(restore_logging, capsys):
    setup_logging("INFO", json_logs=True)

    logging.getLogger("solchat.test").warning("plain stdlib record")
    structlog.stdlib.get_logger("solchat.test").info("turn_started", turn_id="abc")

    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.strip()]
    assert [line["event"] for line in lines] == ["plain stdlib record", "turn_started"]
    for line in lines:
        assert line["service"] == "solchat"
        assert line["version"] == __version__
        assert "timestamp" in line
    assert lines[1]["turn_id"] == "abc"
    assert lines[1]["level"] == "info"


def test_quiet_loggers_come_from_settings(restore_logging, monkeypatch):
    monkeypatch.setattr(settings, "quiet_loggers", ["solchat.noisy.dependency"])

    setup_logging("DEBUG")

    assert logging.getLogger("solchat.noisy.dependency").level == logging.WARNING
    assert logging.getLogger().level == logging.DEBUG
