"""In-memory fixed-window request throttling per client address."""

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_MAX_REQUESTS = 100
DEFAULT_WINDOW_SECONDS = 15 * 60


@dataclass
class RateWindow:
    """Request count for one client within the current window."""

    count: int
    window_start: float


class RequestThrottle:
    """
    Fixed-window request counter keyed by client address.

    Each client gets a window that starts with its first request. Up to
    ``max_requests`` requests are allowed inside the window; the window
    resets once ``window_seconds`` have elapsed since it started (the
    boundary instant itself already belongs to the new window).

    Expired windows are swept out at most once per window duration so the
    table stays bounded by the number of clients seen in roughly the last
    two windows.

    Attributes:
        max_requests: Requests allowed per window (default: 100)
        window_seconds: Window length in seconds (default: 900)

    Example:
        >>> throttle = RequestThrottle(max_requests=100, window_seconds=900)
        >>> if not throttle.allow("192.168.1.1"):
        ...     raise RateLimitedError(retry_after=throttle.retry_after("192.168.1.1"))
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, RateWindow] = {}
        self._lock = Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._windows)

    def allow(self, client_key: str) -> bool:
        """
        Count a request from ``client_key`` and decide whether to serve it.

        Args:
            client_key: Client address

        Returns:
            True if the request is within the ceiling, False if it must be
            rejected
        """
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            window = self._windows.get(client_key)

            if window is None or now - window.window_start >= self.window_seconds:
                self._windows[client_key] = RateWindow(count=1, window_start=now)
                return True

            if window.count >= self.max_requests:
                logger.warning(
                    "rate_limited",
                    client=client_key,
                    request_count=window.count,
                    window_seconds=self.window_seconds,
                )
                return False

            window.count += 1
            return True

    def retry_after(self, client_key: str) -> int:
        """
        Get seconds until the client's window resets (for Retry-After header).

        Returns:
            Whole seconds, rounded up, or 0 if the client is not limited
        """
        with self._lock:
            window = self._windows.get(client_key)
            if window is None or window.count < self.max_requests:
                return 0

            remaining = window.window_start + self.window_seconds - self._clock()
            return max(0, int(-(-remaining // 1)))

    def sweep(self) -> int:
        """
        Remove windows whose duration has elapsed.

        Returns:
            Number of windows removed
        """
        with self._lock:
            return self._sweep(self._clock())

    def clear(self, client_key: str) -> None:
        """Forget the window for ``client_key``."""
        with self._lock:
            self._windows.pop(client_key, None)

    def _sweep(self, now: float) -> int:
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.window_start >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]

        self._last_sweep = now
        if expired:
            logger.debug("rate_windows_swept", removed=len(expired), remaining=len(self._windows))
        return len(expired)
