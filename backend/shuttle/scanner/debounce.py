import time
from typing import Callable, Optional


class ScanDebouncer:
    """
    Drops repeats of the same code for `window_seconds` after it was first
    accepted. Cameras decode the same QR on many consecutive frames; this
    only absorbs that. The booking status check is what makes check-in safe.
    """

    def __init__(self, window_seconds: float = 3.0, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._last_code: Optional[str] = None
        self._last_at = 0.0

    def accept(self, code: str) -> bool:
        now = self._clock()
        if code == self._last_code and now - self._last_at < self.window_seconds:
            return False
        self._last_code = code
        self._last_at = now
        return True

    def reset(self) -> None:
        self._last_code = None
        self._last_at = 0.0
