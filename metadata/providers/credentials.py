from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from config.settings import TOKEN_EXPIRY_MARGIN_SECONDS

logger = logging.getLogger(__name__)

# A fetcher returns (access_token, expires_in_seconds).
TokenFetcher = Callable[[], tuple[str, float]]


class TokenCache:
    """Access token owned by one adapter instance.

    A missing or expired token triggers exactly one ``fetch``; the result is
    reused until ``expires_in - margin`` seconds have passed. Concurrent
    refreshes are not deduplicated; the token and its expiry are swapped
    together under a lock, so the last writer wins without tearing.
    """

    def __init__(
        self,
        *,
        margin_seconds: float = TOKEN_EXPIRY_MARGIN_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.margin_seconds = float(margin_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._state: tuple[str | None, float] = (None, 0.0)

    @property
    def token(self) -> str | None:
        return self._state[0]

    @property
    def expires_at(self) -> float:
        return self._state[1]

    def is_valid(self) -> bool:
        token, expires_at = self._state
        return bool(token) and self._clock() < expires_at

    def ensure_valid(self, fetch: TokenFetcher) -> str:
        token, expires_at = self._state
        if token and self._clock() < expires_at:
            return token
        new_token, expires_in = fetch()
        new_expiry = self._clock() + max(0.0, float(expires_in) - self.margin_seconds)
        with self._lock:
            self._state = (new_token, new_expiry)
        logger.debug("token refreshed expires_in=%s", expires_in)
        return new_token

    def invalidate(self) -> None:
        with self._lock:
            self._state = (None, 0.0)
