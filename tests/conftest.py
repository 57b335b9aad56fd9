from __future__ import annotations

import logging

import pytest


@pytest.fixture
def quiet_logger():
    """
    Isolated logger that still propagates to caplog.
    """
    logger = logging.getLogger("memstats_test")
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)
    logger.propagate = True
    return logger


@pytest.fixture
def error_reporter(tmp_path):
    from memstats.core.error_reporter import ErrorReporter

    return ErrorReporter(path=str(tmp_path / "logs" / "errors.jsonl"))


@pytest.fixture
def client_context(tmp_path, quiet_logger):
    from memstats.core.config import StatsConfigFile
    from memstats.core.context import ClientContext

    cfg = StatsConfigFile(log_dir=str(tmp_path / "logs"), errors_path=str(tmp_path / "logs" / "errors.jsonl"))
    ctx = ClientContext(config=cfg, logger=quiet_logger)
    yield ctx
    ctx.close()
