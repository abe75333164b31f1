from __future__ import annotations

import logging
from io import StringIO

import forklift.logging.init
from forklift.logging.init import LOGGER_NAME, SUMMARY_LEVEL, LabeledFormatter, get_logger, log_summary, setup_logging


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()

    assert logger.name == "forklift"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    handler = logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert isinstance(handler.formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent():
    assert setup_logging() is setup_logging()
    assert len(logging.getLogger(LOGGER_NAME).handlers) == 1


def test_logging_labeled_prefixes():
    captured_output = StringIO()
    logger = logging.getLogger("test_forklift_labels")
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    handler = logging.StreamHandler(captured_output)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.debug("Test debug message")
    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")

    lines = captured_output.getvalue().strip().split("\n")
    assert lines == [
        "DEBUG Test debug message",
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_module_loggers_share_the_forklift_handler(capsys):
    setup_logging()

    logging.getLogger("forklift.services.orchestrator").info("imported something")

    assert "INFO imported something" in capsys.readouterr().out


def test_log_summary_and_get_logger(capsys):
    forklift.logging.init.reset_logging()
    logger = get_logger()
    assert logger is get_logger()

    log_summary("files=1 imported=1")

    assert "SUMMARY files=1 imported=1" in capsys.readouterr().out
