"""Tests for the package logger helper."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from stylepipe.orchestrator.logging import get_logger


@pytest.fixture
def fresh_logger(request):
    name = f"stylepipe.test.{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.NOTSET)


def _file_handlers(logger: logging.Logger) -> list:
    return [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]


class TestGetLogger:
    def test_names_live_under_package(self) -> None:
        assert get_logger("styles").name == "stylepipe.styles"
        assert get_logger("stylepipe.cli").name == "stylepipe.cli"

    def test_level_applied(self, fresh_logger: str) -> None:
        logger = get_logger(fresh_logger, level="warning")
        assert logger.level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, fresh_logger: str) -> None:
        logger = get_logger(fresh_logger, level="chatty")
        assert logger.level == logging.INFO

    def test_log_file_created_and_written(self, tmp_path: Path, fresh_logger: str) -> None:
        log_file = tmp_path / "logs" / "build.log"
        logger = get_logger(fresh_logger, log_file=log_file, level="INFO")

        logger.info("compiled a.scss")
        for h in logger.handlers:
            h.flush()

        assert "compiled a.scss" in log_file.read_text()

    def test_same_file_not_added_twice(self, tmp_path: Path, fresh_logger: str) -> None:
        log_file = tmp_path / "build.log"
        get_logger(fresh_logger, log_file=log_file)
        logger = get_logger(fresh_logger, log_file=log_file)
        assert len(_file_handlers(logger)) == 1

    def test_new_file_replaces_old_one(self, tmp_path: Path, fresh_logger: str) -> None:
        get_logger(fresh_logger, log_file=tmp_path / "first.log")
        logger = get_logger(fresh_logger, log_file=tmp_path / "second.log")

        handlers = _file_handlers(logger)
        assert [Path(h.baseFilename).name for h in handlers] == ["second.log"]
