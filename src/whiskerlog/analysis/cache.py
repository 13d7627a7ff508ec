"""
Time-boxed memoization of analyzer output.

The cache is owned by the caller (CLI, dashboard); analyzers themselves
are stateless.
"""

import threading
import time
from typing import Callable, Generic, Optional, TypeVar

from ..utils.logger import debug
from ..utils.settings import get_settings

T = TypeVar("T")


class AnalysisCache(Generic[T]):
    """Holds the last computed value and when it was computed.

    Example:
        cache = AnalysisCache(lambda: analyze_danger(commands), max_age=30)
        report = cache.get()  # computes
        report = cache.get()  # served from cache until 30s have passed
        cache.invalidate()    # next get() recomputes
    """

    def __init__(
        self,
        compute: Callable[[], T],
        max_age: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._compute = compute
        self.max_age = get_settings().analysis_cache_seconds if max_age is None else max_age
        self._clock = clock
        self._value: Optional[T] = None
        self._computed_at: Optional[float] = None
        self._lock = threading.Lock()

    @property
    def computed_at(self) -> Optional[float]:
        return self._computed_at

    def is_stale(self) -> bool:
        if self._computed_at is None:
            return True
        return self._clock() - self._computed_at >= self.max_age

    def get(self) -> T:
        """Cached value, recomputed when missing or older than max_age."""
        with self._lock:
            if self.is_stale():
                debug("Recomputing cached analysis")
                self._value = self._compute()
                self._computed_at = self._clock()
            return self._value  # type: ignore[return-value]

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._computed_at = None
