import io
import json
import logging

import pytest

from observability.logging import ColoredFormatter, JSONFormatter, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(message="Loaded guideline", level=logging.INFO, **extra):
    record = logging.LogRecord("pipelines.aggregator", level, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    entry = json.loads(JSONFormatter("test-service").format(make_record(page_id="101")))
    assert entry["message"] == "Loaded guideline"
    assert entry["level"] == "INFO"
    assert entry["service"] == "test-service"
    assert entry["page_id"] == "101"


def test_colored_formatter_without_colors():
    line = ColoredFormatter(use_colors=False).format(make_record(level=logging.WARNING))
    assert "| WARNING  | pipelines.aggregator | Loaded guideline" in line
    assert "\033[" not in line


def test_setup_logging_writes_to_given_stream():
    stream = io.StringIO()
    setup_logging(level="DEBUG", stream=stream)

    logging.getLogger("guideline.test").debug("hello stream")

    assert "hello stream" in stream.getvalue()
    assert logging.getLogger().level == logging.DEBUG


def test_setup_logging_json_file(tmp_path):
    log_file = tmp_path / "logs" / "server.log"
    setup_logging(level="INFO", stream=io.StringIO(), log_file=str(log_file))

    logging.getLogger("guideline.test").info("to file")
    for handler in logging.getLogger().handlers:
        handler.flush()

    entry = json.loads(log_file.read_text().strip().splitlines()[-1])
    assert entry["message"] == "to file"
