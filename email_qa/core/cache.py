"""In-process TTL cache owned by the validation toolkit"""

from typing import Any, Callable, Dict, Optional
import hashlib
import json
import time


class TTLCache:
    """
    Bounded key/value cache with time-based expiry.
    When full, the oldest inserted entry is evicted first.
    """

    def __init__(self, ttl_seconds: float, max_entries: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        """Get cached value, dropping it if expired"""
        entry = self._entries.get(key)
        if entry is None:
            return None

        # Check TTL
        if self._clock() - entry["created_at"] >= self.ttl_seconds:
            del self._entries[key]
            return None

        return entry["data"]

    def set(self, key: str, data: Any):
        """Store value; evicts the oldest entry when at capacity"""
        if key in self._entries:
            del self._entries[key]
        while self._entries and len(self._entries) >= self.max_entries:
            oldest_key = min(self._entries, key=lambda k: self._entries[k]["created_at"])
            del self._entries[oldest_key]

        self._entries[key] = {
            "data": data,
            "created_at": self._clock(),
        }

    def clear(self):
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)


def hash_payload(*parts: Any) -> str:
    """Generate SHA256 hash over strings and JSON-serializable payloads"""
    digest = hashlib.sha256()
    for part in parts:
        if not isinstance(part, str):
            part = json.dumps(part, sort_keys=True, default=str, ensure_ascii=False)
        digest.update(part.encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()
