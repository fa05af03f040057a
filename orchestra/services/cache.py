"""In-memory semantic cache for repeated prompts."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

DEFAULT_TTL_SECONDS = 3600.0


@dataclass(slots=True)
class CacheEntry:
    response: str
    timestamp: float


class SemanticCache:
    """Prompt-keyed answer cache with a fixed time-to-live.

    Keys are normalized by lower-casing and trimming. A miss or an expired entry
    always falls through to a live model call.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    @staticmethod
    def normalize(query: str) -> str:
        return query.lower().strip()

    def get(self, query: str) -> Optional[str]:
        key = self.normalize(query)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self._ttl:
            del self._entries[key]
            return None
        return entry.response

    def put(self, query: str, response: str) -> None:
        self._entries[self.normalize(query)] = CacheEntry(response=response, timestamp=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
