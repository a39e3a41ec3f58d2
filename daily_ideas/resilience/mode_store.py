import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from pydantic import ValidationError

from daily_ideas.modules.groups.schemas import GroupResponse
from daily_ideas.resilience.storage import KeyValueStore

logger = logging.getLogger(__name__)

FAILOVER_ACTIVE_KEY = "failover_active"
ACTIVATED_AT_KEY = "failover_activated_at"
SELECTED_GROUP_KEY = "selected_group"
REMOTE_UNAVAILABLE_KEY = "remote_unavailable"

FailoverListener = Callable[[], None]


class ModeStore:
    """
    Persisted failover ("demo mode") flag.

    Once active the flag stays set across restarts until
    `deactivate_failover()` is called explicitly.
    """

    def __init__(
        self,
        store: KeyValueStore,
        snapshot_provider: Optional[Callable[[], GroupResponse]] = None,
    ):
        self.store = store
        self.snapshot_provider = snapshot_provider
        self._listeners: List[FailoverListener] = []

    def is_failover_active(self) -> bool:
        return self.store.get(FAILOVER_ACTIVE_KEY) == "true"

    def activate_failover(self, reason: str = "") -> bool:
        """Turn failover on. Returns False when it was already active."""
        if self.is_failover_active():
            return False
        self.store.set(FAILOVER_ACTIVE_KEY, "true")
        self.store.set(ACTIVATED_AT_KEY, datetime.now(timezone.utc).isoformat())
        if self.snapshot_provider is not None:
            snapshot = self.snapshot_provider()
            self.store.set(SELECTED_GROUP_KEY, snapshot.model_dump_json())
        logger.warning(f"Failover activated{': ' + reason if reason else ''}")
        self._notify()
        return True

    def deactivate_failover(self) -> None:
        for key in (FAILOVER_ACTIVE_KEY, ACTIVATED_AT_KEY, SELECTED_GROUP_KEY, REMOTE_UNAVAILABLE_KEY):
            self.store.remove(key)
        logger.info("Failover deactivated")

    def mark_remote_unavailable(self) -> None:
        self.store.set(REMOTE_UNAVAILABLE_KEY, "true")

    def is_remote_marked_unavailable(self) -> bool:
        return self.store.get(REMOTE_UNAVAILABLE_KEY) == "true"

    def activated_at(self) -> Optional[datetime]:
        raw = self.store.get(ACTIVATED_AT_KEY)
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None

    def selected_group(self) -> Optional[GroupResponse]:
        raw = self.store.get(SELECTED_GROUP_KEY)
        if not raw:
            return None
        try:
            return GroupResponse.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding invalid group snapshot: {e}")
            return None

    def subscribe(self, listener: FailoverListener) -> Callable[[], None]:
        """Register a callback fired once when failover switches on."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Failover listener {listener!r} failed: {e}")
