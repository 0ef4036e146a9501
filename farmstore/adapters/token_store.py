"""
In-memory processed-token store.

Process-local set of confirmation tokens currently being handled, used
to absorb near-simultaneous duplicate confirmation requests. Contents
are lost on restart and not shared between workers.
"""

from __future__ import annotations

import threading


class InMemoryProcessedTokenStore:
    """Thread-safe set implementing ProcessedTokenStorePort."""

    def __init__(self) -> None:
        self._tokens: set[str] = set()
        self._lock = threading.Lock()

    def add_if_absent(self, token: str) -> bool:
        with self._lock:
            if token in self._tokens:
                return False
            self._tokens.add(token)
            return True

    def discard(self, token: str) -> None:
        with self._lock:
            self._tokens.discard(token)

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._tokens

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
