"""Package logger for ``company_ledger``.

Modules ask for ``get_logger("company_ledger.<module>")`` and never attach
handlers. Only the CLI calls :func:`configure_logging`, which sends records
to stderr at the level named by ``LEDGER_LOG_LEVEL`` (``WARNING`` when unset
or unrecognized, so command output stays readable).
"""

from __future__ import annotations

import logging
import os
import sys

_PKG_LOGGER_NAME = "company_ledger"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _env_level() -> int:
    raw = (os.getenv("LEDGER_LOG_LEVEL") or "").strip().upper()
    if raw.isdigit():
        return int(raw)
    return logging.getLevelNamesMapping().get(raw, logging.WARNING)


def configure_logging() -> None:
    """Attach one stderr handler to the package logger; later calls do nothing."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_env_level())
    logger.propagate = False
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    # A NullHandler keeps library use silent until the CLI configures output.
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
