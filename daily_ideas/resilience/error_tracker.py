import logging
from typing import Callable, Optional

from daily_ideas.resilience.storage import KeyValueStore

logger = logging.getLogger(__name__)

ERROR_COUNT_KEY = "remote_error_count"
DEFAULT_THRESHOLD = 3


class ErrorTracker:
    """
    Counts remote failures for the current session.

    Reaching the threshold calls `on_threshold` (failover activation). The
    counter itself is only reset by `clear()`.
    """

    def __init__(
        self,
        store: KeyValueStore,
        threshold: int = DEFAULT_THRESHOLD,
        on_threshold: Optional[Callable[[], None]] = None,
    ):
        self.store = store
        self.threshold = threshold
        self.on_threshold = on_threshold

    @property
    def count(self) -> int:
        raw = self.store.get(ERROR_COUNT_KEY)
        try:
            return int(raw) if raw is not None else 0
        except ValueError:
            logger.warning(f"Discarding malformed error counter: {raw!r}")
            return 0

    def record_failure(self) -> int:
        count = self.count + 1
        self.store.set(ERROR_COUNT_KEY, str(count))
        logger.debug(f"Remote failure recorded ({count}/{self.threshold})")
        if count >= self.threshold:
            logger.warning(f"Remote error count reached {count}, activating failover")
            if self.on_threshold is not None:
                self.on_threshold()
        return count

    def clear(self) -> None:
        self.store.remove(ERROR_COUNT_KEY)
