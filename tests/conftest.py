"""Shared fixtures for the SimpleSync tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

import simple_sync


@pytest.fixture
def logger() -> logging.Logger:
    # propagates to the root logger so caplog sees the records
    log = logging.getLogger("tests.simple_sync")
    log.setLevel(logging.DEBUG)
    return log


@pytest.fixture
def trees(tmp_path: Path) -> tuple[Path, Path]:
    source = tmp_path / "source"
    destination = tmp_path / "destination"
    source.mkdir()
    destination.mkdir()
    return source, destination


@pytest.fixture
def scheduler(trees, logger) -> simple_sync.Scheduler:
    source, destination = trees
    return simple_sync.Scheduler(source, destination, 60.0, logger)


@pytest.fixture(autouse=True)
def _reset_app_logger():
    yield
    app_logger = logging.getLogger(simple_sync.LOGGER_NAME)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
