"""
Replay Cache
============
In-memory counter of signature token presentations.

A token may be presented ``admission_threshold + 1`` times while its embedded
timestamp is inside the freshness window; the next presentation is blocked.
Tokens outside the window are never blocked here.
"""

import math
import threading
import time
from typing import Callable, Dict, Optional, Tuple

import structlog

from .config import FRESHNESS_WINDOW_SECONDS, SIGNATURE_CACHE_SIZE

logger = structlog.get_logger(__name__)


class ReplayCache:
    """
    Process-local replay cache.

    Entries are kept for the life of the process unless ``max_age_seconds``
    is set, in which case entries first seen longer ago than that are pruned
    on each call.
    """

    def __init__(
        self,
        freshness_window_seconds: int = FRESHNESS_WINDOW_SECONDS,
        admission_threshold: int = SIGNATURE_CACHE_SIZE,
        max_age_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.freshness_window_seconds = freshness_window_seconds
        self.admission_threshold = admission_threshold
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # token -> (count, first_seen)
        self._entries: Dict[str, Tuple[int, float]] = {}

    def is_blocked(self, timestamp, token: str) -> bool:
        """
        Record a presentation of ``token`` and report whether it is a replay.

        Args:
            timestamp: Unix timestamp (seconds) embedded in the token
            token: Raw signature header value

        Returns:
            True if the token has exceeded its admissions inside the window
        """
        if not _is_positive_int(timestamp):
            return False

        now = self._clock()
        if int(now) - timestamp > self.freshness_window_seconds:
            return False

        with self._lock:
            if self.max_age_seconds is not None:
                self._prune(now)

            entry = self._entries.get(token)
            if entry is None:
                self._entries[token] = (1, now)
                return False

            count, first_seen = entry
            if count <= self.admission_threshold:
                self._entries[token] = (count + 1, first_seen)
                return False

        logger.warning("replay_detected", token=token[:8], presentations=count)
        return True

    def count(self, token: str) -> int:
        """Number of admitted presentations recorded for ``token``."""
        with self._lock:
            entry = self._entries.get(token)
        return entry[0] if entry else 0

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _prune(self, now: float) -> None:
        """Remove entries older than max_age_seconds. Caller holds the lock."""
        expired = [
            token for token, (_, first_seen) in self._entries.items()
            if now - first_seen > self.max_age_seconds
        ]
        for token in expired:
            del self._entries[token]


def _is_positive_int(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and (not math.isfinite(value) or not value.is_integer()):
        return False
    return value > 0
