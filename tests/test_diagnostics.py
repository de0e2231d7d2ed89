from loguru import logger

from vcli.core.diagnostics import (
    LoguruDiagnosticSink,
    NullDiagnosticSink,
    RecordingDiagnosticSink,
    diagnostic_sink,
    emit_safely,
)
from vcli.core.logging import configure_logging


class BrokenSink:
    def emit(self, line: str) -> None:
        raise RuntimeError("sink unavailable")


def test_emit_safely_swallows_sink_errors():
    emit_safely(BrokenSink(), "CLI BAN @ h:1 :: OK")
    emit_safely(None, "ignored")


def test_debug_off_yields_null_sink():
    with diagnostic_sink(False) as sink:
        assert isinstance(sink, NullDiagnosticSink)
        sink.emit("nothing happens")


def test_debug_on_writes_lines_to_log_file(tmp_path):
    log_file = tmp_path / "vcli-diagnostics.log"
    with diagnostic_sink(True, log_file) as sink:
        assert isinstance(sink, LoguruDiagnosticSink)
        sink.emit("CLI BAN @ 127.0.0.1:6082 /foo :: OK :: BAN OK")
        logger.info("not a diagnostic line")

    content = log_file.read_text()
    assert "CLI BAN @ 127.0.0.1:6082 /foo :: OK :: BAN OK" in content
    assert "not a diagnostic line" not in content
    assert content.startswith("[")


def test_file_sink_is_released_after_the_block(tmp_path):
    log_file = tmp_path / "vcli-diagnostics.log"
    with diagnostic_sink(True, log_file) as sink:
        sink.emit("first")
    LoguruDiagnosticSink().emit("after the block")
    assert "after the block" not in log_file.read_text()


def test_unwritable_log_file_does_not_raise(tmp_path):
    missing_dir = tmp_path / "missing" / "dir" / "file.log"
    missing_dir.parent.parent.write_text("a file, not a directory")
    with diagnostic_sink(True, missing_dir) as sink:
        emit_safely(sink, "still fine")


def test_recording_sink():
    sink = RecordingDiagnosticSink()
    sink.emit("one")
    sink.emit("two")
    assert sink.lines == ["one", "two"]


def test_diagnostic_lines_reach_stderr_only_when_enabled(capsys):
    configure_logging("WARNING", diagnostics=True)
    LoguruDiagnosticSink().emit("CLI BAN @ 127.0.0.1:6082 :: OK")
    logger.debug("ordinary debug chatter")
    err = capsys.readouterr().err
    assert "diag     | CLI BAN @ 127.0.0.1:6082 :: OK" in err
    assert "ordinary debug chatter" not in err

    configure_logging("WARNING")
    LoguruDiagnosticSink().emit("CLI BAN @ 127.0.0.1:6082 :: OK")
    assert capsys.readouterr().err == ""


def test_verbose_logging_does_not_duplicate_diagnostic_lines(capsys):
    ids = configure_logging("DEBUG", diagnostics=True)
    assert len(ids) == 2
    LoguruDiagnosticSink().emit("only once")
    logger.debug("ordinary debug chatter")
    err = capsys.readouterr().err
    assert err.count("only once") == 1
    assert "ordinary debug chatter" in err
