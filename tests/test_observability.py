"""
Tests for observability — diagnostics lines, die(), timings, logging setup.
"""

import io
import logging

import pytest

from conftest import FakeClock

from distropkg.core.errors import FatalInstallError, InstallError, UnsupportedPlatformError
from distropkg.core.observability.diagnostics import backtrace, die, err, warn
from distropkg.core.observability.logging_config import _parse_level, resolve_level, setup_logging
from distropkg.core.observability.timing import OperationTimer


def _raised(exc):
    try:
        raise exc
    except Exception as caught:  # noqa: BLE001
        return caught


# ── Diagnostics ──────────────────────────────────────────────────────


class TestErrWarn:
    def test_err_line(self):
        out = io.StringIO()
        line = err("something broke", stream=out)
        assert line.startswith("[ERROR] ")
        assert line.endswith(" something broke")
        assert out.getvalue() == line + "\n"

    def test_err_appends_error_log(self, tmp_path):
        log_dir = tmp_path / "logs"
        err("first", log_dir=log_dir, stream=io.StringIO())
        err("second", log_dir=log_dir, stream=io.StringIO())
        lines = (log_dir / "error.log").read_text().splitlines()
        assert len(lines) == 2
        assert lines[1].endswith("second")

    def test_warn_line(self):
        out = io.StringIO()
        warn("careful", stream=out)
        assert out.getvalue().startswith("[WARNING] ")
        assert "careful" in out.getvalue()

    def test_backtrace_header(self):
        exc = _raised(ValueError("x"))
        lines = backtrace(exc.__traceback__)
        assert lines[0] == "[Call Trace]"
        assert lines[-1].endswith(":_raised")


class TestDie:
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (InstallError("retry failed"), 1),
            (FatalInstallError("Detected fatal package install failure"), 2),
            (UnsupportedPlatformError("nope"), 1),
            (RuntimeError("unexpected"), 1),
        ],
    )
    def test_exit_codes(self, exc, code):
        out = io.StringIO()
        with pytest.raises(SystemExit) as exc_info:
            die(_raised(exc), stream=out)
        assert exc_info.value.code == code

    def test_report_shape(self, tmp_path):
        out = io.StringIO()
        with pytest.raises(SystemExit):
            die(_raised(FatalInstallError("bad package")), log_dir=tmp_path, stream=out)

        lines = out.getvalue().splitlines()
        assert lines[0] == "[Call Trace]"
        assert lines[-1].startswith("[ERROR] ")
        assert lines[-1].endswith("bad package")
        assert "bad package" in (tmp_path / "error.log").read_text()


# ── Timings ──────────────────────────────────────────────────────────


class TestOperationTimer:
    def test_records_durations(self):
        clock = FakeClock()
        timer = OperationTimer(clock=clock)
        with timer.time("apt-get"):
            clock.sleep(2.0)
        with timer.time("apt-get"):
            clock.sleep(1.0)

        h = timer.histogram("apt-get")
        assert h.count == 2
        assert h.total == 3.0
        assert h.max == 2.0

    def test_records_on_error(self):
        clock = FakeClock()
        timer = OperationTimer(clock=clock)
        with pytest.raises(RuntimeError):
            with timer.time("yum_install"):
                clock.sleep(1.5)
                raise RuntimeError("boom")
        assert timer.histogram("yum_install").count == 1

    def test_summary_sorted(self):
        timer = OperationTimer(clock=FakeClock())
        with timer.time("zypper_install"):
            pass
        with timer.time("apt-get"):
            pass
        assert [row["name"] for row in timer.summary()] == ["apt-get", "zypper_install"]

    def test_reset(self):
        timer = OperationTimer(clock=FakeClock())
        with timer.time("apt-get"):
            pass
        timer.reset()
        assert timer.summary() == []


# ── Logging setup ────────────────────────────────────────────────────


class TestSetupLogging:
    def test_debug_flag(self):
        assert setup_logging(debug=True, environ={}) == logging.DEBUG
        assert logging.getLogger().level == logging.DEBUG

    def test_level_from_environment(self):
        setup_logging(environ={"DISTROPKG_LOG_LEVEL": "ERROR"})
        assert logging.getLogger().level == logging.ERROR

    def test_single_console_handler(self):
        setup_logging(environ={})
        setup_logging(verbose=True, environ={})
        assert len(logging.getLogger().handlers) == 1

    def test_file_output(self, tmp_path):
        log_file = tmp_path / "distropkg.log"
        console = setup_logging(
            quiet=True,
            environ={"DISTROPKG_LOG_FILE": str(log_file), "DISTROPKG_LOG_FILE_LEVEL": "INFO"},
        )
        assert console == logging.ERROR
        assert logging.getLogger().level == logging.INFO
        logging.getLogger("distropkg.test").info("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()

    def test_file_level_defaults_to_console(self, tmp_path):
        log_file = tmp_path / "distropkg.log"
        setup_logging(environ={"DISTROPKG_LOG_FILE": str(log_file)})
        logging.getLogger("distropkg.test").info("console level only")
        logging.getLogger("distropkg.test").warning("kept")
        for handler in logging.getLogger().handlers:
            handler.flush()
        text = log_file.read_text()
        assert "kept" in text
        assert "console level only" not in text

    @pytest.mark.parametrize(
        ("flags", "environ", "expected"),
        [
            ({"debug": True, "quiet": True}, {}, "DEBUG"),
            ({"verbose": True}, {"DISTROPKG_LOG_LEVEL": "ERROR"}, "INFO"),
            ({"quiet": True}, {}, "ERROR"),
            ({}, {"DISTROPKG_LOG_LEVEL": "INFO"}, "INFO"),
            ({}, {}, "WARNING"),
        ],
    )
    def test_resolve_level(self, flags, environ, expected):
        assert resolve_level(**flags, environ=environ) == expected

    @pytest.mark.parametrize(
        ("name", "level"),
        [("debug", logging.DEBUG), ("INFO", logging.INFO), ("bogus", logging.WARNING), (None, logging.WARNING)],
    )
    def test_parse_level(self, name, level):
        assert _parse_level(name) == level
