import io
import json
import logging

import pytest

from backend.strategy_analyser.app import logging as logging_config


def _reset_root_logger(original_handlers):
    root = logging.getLogger()
    root.handlers = list(original_handlers)
    root.setLevel(logging.NOTSET)


@pytest.mark.parametrize("initial_handlers", [None, [logging.StreamHandler(io.StringIO())]])
def test_setup_logging_respects_existing_handlers(initial_handlers):
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    try:
        if initial_handlers is None:
            root.handlers = []
            expected_handlers = 1
        else:
            root.handlers = list(initial_handlers)
            expected_handlers = len(initial_handlers)

        logging_config.setup_logging(level="DEBUG")

        assert len(root.handlers) == expected_handlers
        assert root.level == logging.DEBUG
        for handler in root.handlers:
            if initial_handlers is None:
                assert handler.level in (logging.NOTSET, logging.DEBUG)
            else:
                assert handler.level == logging.DEBUG
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    finally:
        _reset_root_logger(original_handlers)


def test_structlog_events_render_as_json(capsys):
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    try:
        logging_config.setup_logging(level="INFO")
        logging_config.bind_contextvars(request_id="req-1")
        logging_config.get_logger("strategy_analyser.test").info("run_ingested", run_id=7)
    finally:
        logging_config.clear_contextvars()
        _reset_root_logger(original_handlers)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["event"] == "run_ingested"
    assert payload["run_id"] == 7
    assert payload["request_id"] == "req-1"
    assert payload["level"] == "info"
