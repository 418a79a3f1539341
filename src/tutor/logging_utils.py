"""Runtime logging helpers."""

from __future__ import annotations

import os

import loguru
from loguru import logger
from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "{extra[session]} | {message}"
_CONFIGURED = False


def _inject_session(record: loguru.Record) -> None:
    from tutor.session.store import current_session

    record["extra"]["session"] = current_session()


def configure_logging(level: str | None = None) -> None:
    """Route loguru through a stderr RichHandler once per process.

    Every line carries the name of the active session, ``-`` when anonymous.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    level = (level or os.getenv("TT_LOG_LEVEL", "WARNING")).upper()
    logger.remove()
    logger.add(
        RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
            rich_tracebacks=False,
        ),
        level=level,
        format=LOG_FORMAT,
        backtrace=False,
        diagnose=False,
    )
    logger.configure(patcher=_inject_session)
    _CONFIGURED = True
