from __future__ import annotations

import logging
from io import StringIO

import trade_enricher.logging.init as log_init
from trade_enricher.logging.init import LabeledFormatter, get_logger, log_summary, reset_logging, setup_logging


def setup_function(_fn):
    reset_logging()


def teardown_function(_fn):
    reset_logging()


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()

    assert logger.name == "trade_enricher"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_logging_labeled_prefixes():
    captured_output = StringIO()
    logger = logging.getLogger("test_trade_enricher_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logging.addLevelName(25, "SUMMARY")
    handler = logging.StreamHandler(captured_output)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(25, "Test summary message")

    lines = captured_output.getvalue().strip().split('\n')
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_get_logger_returns_configured_logger():
    setup_logger = setup_logging()
    assert get_logger() is setup_logger


def test_setup_logging_idempotent():
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1


def test_setup_logging_debug_lowers_level():
    logger = setup_logging(debug=True)
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)


def test_child_module_loggers_reach_package_handler(capsys):
    setup_logging()
    logging.getLogger("trade_enricher.services.diagnostics").warning("child message")
    assert "WARN child message" in capsys.readouterr().out


def test_log_summary_convenience_function(capsys):
    setup_logging()
    log_summary("files=1 success=1 failed=0")
    assert capsys.readouterr().out.strip() == "SUMMARY files=1 success=1 failed=0"


def test_reset_logging_clears_state():
    setup_logging()
    reset_logging()
    assert log_init._logger is None
    assert logging.getLogger("trade_enricher").handlers == []
