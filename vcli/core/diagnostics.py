"""
Best-effort diagnostic sink.

When debug logging is enabled every endpoint attempt produces one line. Lines
go through loguru with a `diagnostic` marker so that an optional append-only
file sink picks up exactly those lines. A failing sink never changes the
result of an invalidation.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol, runtime_checkable

from loguru import logger

from vcli.datastructures.type_aliases import DiagnosticLine

DIAGNOSTIC_FILE_FORMAT = "[{time:YYYY-MM-DD HH:mm:ss!UTC}] {message}"


@runtime_checkable
class DiagnosticSink(Protocol):
    def emit(self, line: DiagnosticLine) -> None: ...


class NullDiagnosticSink:
    """Sink used when debug logging is off."""

    def emit(self, line: DiagnosticLine) -> None:
        return None


class LoguruDiagnosticSink:
    def __init__(self, level: str = "DEBUG") -> None:
        self._level = level
        self._logger = logger.bind(diagnostic=True)

    def emit(self, line: DiagnosticLine) -> None:
        self._logger.log(self._level, line)


class RecordingDiagnosticSink:
    """Keeps emitted lines in memory (used by the CLI and in tests)."""

    def __init__(self) -> None:
        self.lines: list[DiagnosticLine] = []

    def emit(self, line: DiagnosticLine) -> None:
        self.lines.append(line)


def emit_safely(sink: DiagnosticSink | None, line: DiagnosticLine) -> None:
    if sink is None:
        return
    with contextlib.suppress(Exception):
        sink.emit(line)


def is_diagnostic_record(record: dict) -> bool:
    return record["extra"].get("diagnostic") is True


@contextlib.contextmanager
def diagnostic_sink(
    debug: bool, log_file: Path | None = None
) -> Iterator[DiagnosticSink]:
    """Yield the sink for one broadcast, attaching `log_file` for its duration."""
    if not debug:
        yield NullDiagnosticSink()
        return

    handler_id: int | None = None
    if log_file is not None:
        try:
            handler_id = logger.add(
                str(log_file),
                level="DEBUG",
                format=DIAGNOSTIC_FILE_FORMAT,
                filter=is_diagnostic_record,
                catch=True,
            )
        except Exception as e:
            logger.warning("Diagnostic log file {} unavailable: {}", log_file, e)

    try:
        yield LoguruDiagnosticSink()
    finally:
        if handler_id is not None:
            with contextlib.suppress(ValueError):
                logger.remove(handler_id)
