"""
Progress sinks — where the engine's plain-text messages go.

Every orchestrator and primitive that reports progress takes a sink
argument instead of writing to the console.  The CLI passes one that
echoes to stdout; tests pass a ``RecordingSink`` and assert on
``messages``.  Every sink also mirrors its messages into the
``n2s_installer.progress`` logger, so ``--verbose`` shows them even when
the console output is silenced.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger("n2s_installer.progress")


class ProgressSink(ABC):
    """Receiver for progress and diagnostic messages."""

    @abstractmethod
    def emit(self, message: str) -> None:
        """Deliver one message. Must not raise."""

    def __call__(self, message: str) -> None:
        self.emit(message)


class LoggingSink(ProgressSink):
    """Sends messages to the log only (``--silent`` and library default)."""

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def emit(self, message: str) -> None:
        logger.log(self._level, "%s", message)


class CallbackSink(ProgressSink):
    """Hands each message to a plain callable (e.g. ``click.echo``)."""

    def __init__(self, callback: Callable[[str], None]) -> None:
        self._callback = callback

    def emit(self, message: str) -> None:
        logger.debug("%s", message)
        self._callback(message)


class RecordingSink(ProgressSink):
    """Keeps every message in order."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def emit(self, message: str) -> None:
        logger.debug("%s", message)
        self.messages.append(message)

    def clear(self) -> None:
        self.messages.clear()


def ensure_sink(sink: ProgressSink | None) -> ProgressSink:
    """Return ``sink``, or a logging-only sink when none was given."""
    return sink if sink is not None else LoggingSink()
