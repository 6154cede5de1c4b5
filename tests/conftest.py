"""Pytest configuration for test isolation.

The CLI resolves its data file and export directory from the environment
(defaulting to the current working directory) and configures the package
logger once per process. Both leak across tests when left alone: a later
test would read the ledger an earlier one wrote, and the handler attached by
``configure_logging`` would keep pointing at a stream that ``CliRunner`` has
already closed.

To keep tests hermetic we point every path at the test's own temporary
directory and restore the package logger after each test.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from company_ledger import logging_setup


@pytest.fixture(autouse=True)
def _isolate_ledger_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Force per-test data/export locations so tests don't share on-disk state."""

    export_dir = tmp_path / "exports"
    monkeypatch.setenv("LEDGER_DATA_FILE", os.fspath(tmp_path / "ledger.json"))
    monkeypatch.setenv("LEDGER_EXPORT_DIR", os.fspath(export_dir))
    monkeypatch.delenv("LEDGER_DATABASE_URL", raising=False)
    monkeypatch.delenv("LEDGER_CURRENCY_SYMBOL", raising=False)
    monkeypatch.delenv("LEDGER_LOG_LEVEL", raising=False)
    # Keep a stray .env in the developer's checkout out of CLI runs.
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("company_ledger")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    logging_setup._CONFIGURED = False
