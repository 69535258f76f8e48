import threading
import time
from collections.abc import Callable
from typing import Protocol

from agent_runner_sdk.signing import NONCE_TTL_SECONDS


class NonceStore(Protocol):
    def try_accept(self, nonce: str) -> bool:
        """Record ``nonce`` and return True, or return False if it is still remembered."""
        ...


class InMemoryNonceStore:
    """Process-local replay window.

    Records are kept in insertion order. With a constant TTL and a monotonic
    clock that is also expiry order, so purging only ever pops from the front.
    """

    def __init__(
        self,
        ttl_seconds: float = NONCE_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._expires_at: dict[str, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._expires_at)

    def try_accept(self, nonce: str) -> bool:
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            if nonce in self._expires_at:
                return False
            self._expires_at[nonce] = now + self._ttl_seconds
            return True

    def _purge_expired(self, now: float) -> None:
        while self._expires_at:
            oldest = next(iter(self._expires_at))
            if self._expires_at[oldest] > now:
                return
            del self._expires_at[oldest]
