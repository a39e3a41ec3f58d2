import threading
import time
from typing import Callable, Dict


def now_ms() -> int:
    return int(time.time() * 1000)


class OrderKeyClock:
    """
    Hands out millisecond order keys that strictly increase per group, even
    when several inserts land within the same millisecond.

    Remote calls run in worker threads while fallback calls run on the event
    loop, so every read-modify-write of `_last` holds the lock.
    """

    def __init__(self, clock: Callable[[], int] = now_ms):
        self._clock = clock
        self._last: Dict[str, int] = {}
        self._lock = threading.Lock()

    def observe(self, group_id: str, key: int) -> None:
        """Make sure later keys for the group sort after an existing one."""
        with self._lock:
            if key > self._last.get(group_id, -1):
                self._last[group_id] = key

    def next_key(self, group_id: str, span: int = 1) -> int:
        """Reserve `span` consecutive keys and return the first one."""
        with self._lock:
            base = max(self._clock(), self._last.get(group_id, -1) + 1)
            self._last[group_id] = base + max(span, 1) - 1
            return base
