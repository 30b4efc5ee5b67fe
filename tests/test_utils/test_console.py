"""Tests for the colorful log formatter."""

import logging

from console_actions.utils.console import ColorfulFormatter


def _record(name: str, msg: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, msg, None, None)


def test_plain_format_without_colors() -> None:
    """Without colors the line has no escape codes."""
    formatter = ColorfulFormatter(use_colors=False)

    line = formatter.format(_record("console_actions.services.vsphere", "Connected"))

    assert "\033[" not in line
    assert "INFO" in line
    assert "services.vsphere" in line
    assert line.endswith("Connected")


def test_colors_applied() -> None:
    """With colors the level and highlights are colored."""
    formatter = ColorfulFormatter(use_colors=True)

    line = formatter.format(
        _record("console_actions.actions.vmware", "Snapshot 'nightly' took 2.5s", logging.WARNING)
    )

    assert "\033[93m" in line
    assert "\033[36m'nightly'" in line


def test_exception_appended() -> None:
    """Tracebacks follow the log line."""
    formatter = ColorfulFormatter(use_colors=False)
    try:
        raise RuntimeError("kaput")
    except RuntimeError:
        import sys

        record = logging.LogRecord(
            "console_actions.actions.runner", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
        )

    line = formatter.format(record)

    assert "RuntimeError: kaput" in line
