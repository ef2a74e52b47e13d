import threading
import time
from typing import Callable, List


class UploadRateLimiter:
    """
    Sliding-window upload counter for one client session.

    Advisory only: ``can_upload`` and ``record_upload`` are separate calls and
    the caller is expected to check before recording. The real limit is
    enforced server-side.
    """

    def __init__(
        self,
        max_uploads: int = 10,
        window_minutes: float = 1,
        clock: Callable[[], float] = time.time,
    ):
        if max_uploads <= 0:
            raise ValueError("max_uploads must be a positive integer")
        if window_minutes <= 0:
            raise ValueError("window_minutes must be positive")

        self.max_uploads = max_uploads
        self.window_ms = window_minutes * 60 * 1000
        self._clock = clock
        self._uploads: List[float] = []
        self._lock = threading.Lock()

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _purge(self, now: float) -> None:
        self._uploads = [ts for ts in self._uploads if now - ts < self.window_ms]

    def can_upload(self) -> bool:
        with self._lock:
            self._purge(self._now_ms())
            return len(self._uploads) < self.max_uploads

    def record_upload(self) -> None:
        with self._lock:
            self._uploads.append(self._now_ms())

    def get_remaining_uploads(self) -> int:
        with self._lock:
            self._purge(self._now_ms())
            return max(0, self.max_uploads - len(self._uploads))

    def reset(self) -> None:
        with self._lock:
            self._uploads.clear()
