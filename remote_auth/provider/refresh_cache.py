"""
Exchange expired opaque tokens for fresh ones, at most once per token.

Background for newcomers:
    When a browser holds an expired session token, several of its requests
    usually hit us at the same moment and all of them get a 401 from the
    backend. Asking ``/refresh`` once per request would mint several new
    tokens for the same session. Instead the first caller refreshes while
    holding the lock, the others wait and then read the replacement from the
    map. Replacements are forgotten after a fixed retention window (5 minutes
    by default), counted from insertion, however often they are read.

    Expiry is tracked in a heap of ``(deadline, old token)``. A single daemon
    thread pops entries as their deadlines pass, and every read also sweeps
    expired entries under the lock, so a late evictor never serves a stale
    replacement.
"""

from __future__ import annotations

import heapq
import logging
import threading
import time
from typing import Callable

import requests

from .errors import RefreshError

logger = logging.getLogger(__name__)

ThreadFactory = Callable[..., threading.Thread]


class RefreshCache:
    """Lock-guarded map of old opaque token -> refreshed opaque token."""

    def __init__(
        self,
        refresh_url: str,
        token_field: str = "token",
        retention_seconds: float = 300.0,
        timeout_seconds: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
        thread_factory: ThreadFactory = threading.Thread,
    ) -> None:
        self._url = refresh_url
        self._token_field = token_field
        self._retention = retention_seconds
        self._timeout = timeout_seconds
        self._clock = clock
        self._thread_factory = thread_factory
        self._lock = threading.Lock()
        self._wakeup = threading.Condition(self._lock)
        self._tokens: dict[str, tuple[str, float]] = {}
        self._deadlines: list[tuple[float, str]] = []
        self._evictor: threading.Thread | None = None

    def __contains__(self, old: str) -> bool:
        with self._lock:
            self._sweep()
            return old in self._tokens

    def __len__(self) -> int:
        with self._lock:
            self._sweep()
            return len(self._tokens)

    def _sweep(self) -> None:
        """Drop every entry whose deadline has passed. Caller holds the lock."""
        now = self._clock()
        while self._deadlines and self._deadlines[0][0] <= now:
            _, old = heapq.heappop(self._deadlines)
            entry = self._tokens.get(old)
            if entry is not None and entry[1] <= now:
                del self._tokens[old]
                logger.debug("Evicted refreshed token entry")

    def _run_evictor(self) -> None:
        with self._wakeup:
            while True:
                self._sweep()
                if self._deadlines:
                    self._wakeup.wait(max(self._deadlines[0][0] - self._clock(), 0.0))
                else:
                    self._wakeup.wait()

    def _ensure_evictor(self) -> None:
        """Start the eviction thread once. Caller holds the lock."""
        if self._evictor is not None:
            return
        evictor = self._thread_factory(target=self._run_evictor, name="refresh-cache-evictor", daemon=True)
        try:
            evictor.start()
        except RuntimeError as e:
            logger.error("Could not start refresh cache evictor")
            raise RefreshError("token refresh cache unavailable") from e
        self._evictor = evictor

    def _request_new_token(self, old: str) -> str:
        try:
            resp = requests.post(self._url, json={self._token_field: old}, timeout=self._timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as e:
            logger.error("Token refresh failed: %s", type(e).__name__)
            raise RefreshError("token refresh request failed") from e
        except ValueError as e:
            logger.error("Token refresh returned a non-JSON body")
            raise RefreshError("token refresh response is not valid JSON") from e

        new = body.get(self._token_field) if isinstance(body, dict) else None
        if not isinstance(new, str) or not new:
            logger.error("Token refresh response has no %r field", self._token_field)
            raise RefreshError(f"token refresh response has no {self._token_field!r} field")
        return new

    def refresh(self, old: str) -> str:
        """
        Return the replacement for ``old``, asking the backend only if needed.

        The lock is held across the remote call, so concurrent callers with
        the same token issue one POST between them and all get the same
        result. Raises RefreshError on failure; nothing is cached then.
        """
        with self._lock:
            self._sweep()
            cached = self._tokens.get(old)
            if cached is not None:
                logger.debug("Refresh cache hit")
                return cached[0]

            self._ensure_evictor()
            new = self._request_new_token(old)
            deadline = self._clock() + self._retention
            self._tokens[old] = (new, deadline)
            heapq.heappush(self._deadlines, (deadline, old))
            self._wakeup.notify()
            logger.info("Refreshed session token; cached for %ss", self._retention)
            return new
