from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from eclipse_pdf.utils import logging as logging_utils


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({}, None),
        ({"ECLIPSE_PDF_LOG_LEVEL": "warning"}, logging.WARNING),
        ({"ECLIPSE_PDF_LOG_LEVEL": "15"}, 15),
        ({"ECLIPSE_PDF_DEBUG": "yes"}, logging.DEBUG),
        ({"ECLIPSE_PDF_LOG_LEVEL": "error", "ECLIPSE_PDF_DEBUG": "1"}, logging.ERROR),
        ({"ECLIPSE_PDF_LOG_LEVEL": "²"}, None),
        ({"ECLIPSE_PDF_LOG_LEVEL": "chatty"}, None),
    ],
)
def test_level_from_env(environ, expected) -> None:
    assert logging_utils.level_from_env(environ) == expected


def test_env_level_beats_debug_setting(root_logger) -> None:
    level = logging_utils.configure_logging(debug=True, environ={"ECLIPSE_PDF_LOG_LEVEL": "WARNING"})

    assert level == logging.WARNING
    assert root_logger.level == logging.WARNING


def test_debug_setting_applies_without_env(root_logger) -> None:
    assert logging_utils.configure_logging(debug=True, environ={}) == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_file_log_attached_once(root_logger, tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"

    logging_utils.configure_logging(log_dir=log_dir, environ={})
    logging_utils.configure_logging(log_dir=log_dir, environ={})

    file_handlers = [h for h in root_logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert Path(file_handlers[0].baseFilename) == (log_dir / logging_utils.LOG_FILE_NAME).resolve()

    logging.getLogger("eclipse_pdf.test").warning("ledger persisted")
    file_handlers[0].flush()
    assert "ledger persisted" in (log_dir / logging_utils.LOG_FILE_NAME).read_text(encoding="utf-8")
