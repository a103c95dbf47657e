"""User-facing notification sinks."""

import logging
import sys
from typing import Protocol, TextIO

logger = logging.getLogger(__name__)

INFO = "info"
SUCCESS = "success"
WARNING = "warning"
ERROR = "error"

LEVELS = (INFO, SUCCESS, WARNING, ERROR)

class Notifier(Protocol):
    """Receives success/failure messages meant for the user."""

    def notify(self, message: str, level: str = INFO) -> None: ...


class ConsoleNotifier:
    """Prints notifications to the terminal, errors and warnings to stderr."""

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self._out = out
        self._err = err

    def notify(self, message: str, level: str = INFO) -> None:
        if level not in LEVELS:
            logger.debug("Unknown notification level %r, using info", level)
            level = INFO
        if level in (WARNING, ERROR):
            stream = self._err or sys.stderr
        else:
            stream = self._out or sys.stdout
        print(f"[{level}] {message}", file=stream)
