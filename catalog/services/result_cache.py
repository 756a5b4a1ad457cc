"""Single-slot TTL cache for the default product listing."""

import logging
import time
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 60.0


class ResultCache(Generic[T]):
    """Holds at most one value together with the time it was stored.

    Not synchronized: concurrent put() and clear() calls are last-writer-wins.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._value: Optional[T] = None
        self._stored_at: Optional[float] = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self) -> Optional[T]:
        """Return the cached value if it is younger than the TTL."""
        if self._stored_at is None:
            return None
        if self._clock() - self._stored_at >= self._ttl_seconds:
            logger.debug("Cached result expired")
            self.clear()
            return None
        return self._value

    def put(self, value: T) -> None:
        self._value = value
        self._stored_at = self._clock()

    def clear(self) -> None:
        self._value = None
        self._stored_at = None
