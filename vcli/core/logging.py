"""Stderr loguru configuration for the vcli command line."""

from __future__ import annotations

import sys

from loguru import logger

from vcli.core.diagnostics import is_diagnostic_record

DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} - {message}"
)
DIAGNOSTIC_STDERR_FORMAT = "{time:HH:mm:ss.SSS} | diag     | {message}"


def configure_logging(
    level: str,
    *,
    diagnostics: bool = False,
    colorize: bool = False,
) -> tuple[int, ...]:
    """Replace loguru handlers with stderr ones.

    Ordinary records are filtered by `level`. Per-attempt diagnostic lines
    (records bound with `diagnostic=True`) never go through that handler;
    with `diagnostics` on they get their own handler regardless of `level`.
    """
    logger.remove()

    handler_ids = [
        logger.add(
            sys.stderr,
            level=level,
            format=DEFAULT_LOG_FORMAT,
            colorize=colorize,
            filter=lambda record: not is_diagnostic_record(record),
        )
    ]
    if diagnostics:
        handler_ids.append(
            logger.add(
                sys.stderr,
                level="DEBUG",
                format=DIAGNOSTIC_STDERR_FORMAT,
                colorize=colorize,
                filter=is_diagnostic_record,
            )
        )
    return tuple(handler_ids)
