"""
Progress reporting for import runs.
"""

from contextlib import ExitStack
from typing import Optional, Protocol

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm


class ProgressReporter(Protocol):
    """Receives a monotonically increasing processed-line count."""

    def start(self, total: int) -> None:
        """Called once before the first line with the total line count."""

    def update(self, processed: int, label: str) -> None:
        """Called after each line with the running count and current file."""

    def close(self) -> None:
        """Called once when the run ends, successfully or not."""


class NullProgress:
    """Reporter that ignores all progress."""

    def start(self, total: int) -> None:
        pass

    def update(self, processed: int, label: str) -> None:
        pass

    def close(self) -> None:
        pass


class TqdmProgress:
    """Terminal progress bar backed by tqdm.

    Console log records are written through tqdm while the bar is open so they
    do not break it.
    """

    def __init__(self, desc: str = "Lines", disable: bool = False):
        self.desc = desc
        self.disable = disable
        self._bar: Optional[tqdm] = None
        self._label: Optional[str] = None
        self._stack: Optional[ExitStack] = None

    def start(self, total: int) -> None:
        self._stack = ExitStack()
        self._bar = self._stack.enter_context(
            tqdm(total=total, desc=self.desc, unit="line", disable=self.disable)
        )
        self._stack.enter_context(logging_redirect_tqdm())

    def update(self, processed: int, label: str) -> None:
        if self._bar is None:
            return
        if label != self._label:
            self._label = label
            self._bar.set_postfix_str(label, refresh=False)
        self._bar.update(processed - self._bar.n)

    def close(self) -> None:
        if self._stack is not None:
            self._stack.close()
            self._stack = None
        self._bar = None
