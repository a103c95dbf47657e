"""Tests for notification sinks."""

import io

import pytest

from uptimedash.notify import ERROR, SUCCESS, WARNING, ConsoleNotifier


class TestConsoleNotifier:
    """Tests for ConsoleNotifier."""

    def test_streams_by_level(self) -> None:
        """Success goes to stdout; warnings and errors to stderr."""
        out, err = io.StringIO(), io.StringIO()
        notifier = ConsoleNotifier(out=out, err=err)

        notifier.notify("Site deleted", SUCCESS)
        notifier.notify("Added 2 of 3 sites", WARNING)
        notifier.notify("Network error", ERROR)

        assert out.getvalue() == "[success] Site deleted\n"
        assert err.getvalue() == "[warning] Added 2 of 3 sites\n[error] Network error\n"

    def test_unknown_level_is_info(self) -> None:
        """Unrecognized levels print as info."""
        out = io.StringIO()

        ConsoleNotifier(out=out).notify("hello", "loud")

        assert out.getvalue() == "[info] hello\n"

    def test_defaults_to_process_streams(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Without explicit streams the current stdout/stderr are used."""
        notifier = ConsoleNotifier()

        notifier.notify("ok")
        notifier.notify("bad", ERROR)

        captured = capsys.readouterr()
        assert captured.out == "[info] ok\n"
        assert captured.err == "[error] bad\n"
