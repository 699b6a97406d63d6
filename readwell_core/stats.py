"""
Reading Stats - accumulated active reading time

Time counts while the reader is active. Hiding the page pauses the count,
showing it again resumes, and scrolling resumes it after a pause. With no
scroll activity for IDLE_TIMEOUT seconds the count stops at the moment
the timeout ran out.
"""

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

IDLE_TIMEOUT = 3.0


class ReadingStats:
    def __init__(self, clock: Callable[[], float] = time.monotonic, idle_timeout: float = IDLE_TIMEOUT):
        self.clock = clock
        self.idle_timeout = idle_timeout
        self._total = 0.0
        self._since: Optional[float] = None
        self._last_activity: Optional[float] = None

    @property
    def is_reading(self) -> bool:
        return self._since is not None

    def resume(self) -> None:
        if self._since is None:
            self._since = self.clock()

    def pause(self, at: Optional[float] = None) -> None:
        if self._since is None:
            return
        end = self.clock() if at is None else at
        self._total += max(0.0, end - self._since)
        self._since = None

    def on_visibility_change(self, hidden: bool) -> None:
        if hidden:
            self.pause()
        else:
            self.resume()

    def on_scroll(self) -> None:
        self.resume()
        self._last_activity = self.clock()

    def check_idle(self) -> bool:
        """Pause if scrolling stopped long enough ago; True if it paused."""
        if self._since is None or self._last_activity is None:
            return False
        deadline = self._last_activity + self.idle_timeout
        if self.clock() < deadline:
            return False
        self.pause(at=max(deadline, self._since))
        logger.debug(f"Reading paused after {self.idle_timeout:g}s without scrolling")
        return True

    def total_seconds(self) -> int:
        total = self._total
        if self._since is not None:
            total += max(0.0, self.clock() - self._since)
        return int(total)
