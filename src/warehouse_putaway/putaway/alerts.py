from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Alerting(Protocol):
    def notify_blocking(self) -> None:
        ...


class NullAlerting:
    def notify_blocking(self) -> None:
        return None


class TerminalAlerting:
    """
    Rings the terminal bell when a move needs an override.

    A terminal has no vibration API, so the haptic half of the signal is a no-op.
    """

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream or sys.stderr

    def notify_blocking(self) -> None:
        self.stream.write("\a")
        self.stream.flush()
