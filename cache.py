import time
from typing import Any, Callable, Dict, Optional, Tuple


class TTLCache:
    """
    Small key -> value cache where every entry expires `ttl` seconds after it
    was stored. The clock is injectable so tests can move time forward.

    No locking: concurrent writers can overwrite each other, which only ever
    costs a recomputation.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self.clock() - stored_at >= self.ttl:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any):
        self._entries[key] = (self.clock(), value)

    def clear(self):
        self._entries.clear()
