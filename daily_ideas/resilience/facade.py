"""
Single entry point for every data operation.

Each call goes to the remote backend unless failover ("demo mode") is
active. Remote failures are classified: business-rule rejections reach the
caller untouched, anything else is counted and the same operation is served
from the in-memory fallback dataset, so callers get a result instead of an
exception.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from daily_ideas.config.settings import Settings
from daily_ideas.core.errors import DomainError
from daily_ideas.core.ordering import OrderKeyClock
from daily_ideas.database.supabase_adapter import SupabaseDataAdapter
from daily_ideas.modules.categories.schemas import CategoryCreate, CategoryUpdate, CategoryResponse
from daily_ideas.modules.completions.schemas import DailyCompletionResponse
from daily_ideas.modules.demo.dataset import FallbackDataset
from daily_ideas.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GroupResponse, GroupWithMembersResponse, GroupRole
)
from daily_ideas.modules.ideas.schemas import IdeaCreate, IdeaUpdate, IdeaResponse
from daily_ideas.modules.status.schemas import FailoverStatus
from daily_ideas.resilience.classification import ErrorKind, classify_error, error_message
from daily_ideas.resilience.connectivity import ConnectivityMonitor
from daily_ideas.resilience.error_tracker import ErrorTracker
from daily_ideas.resilience.mode_store import ModeStore, FailoverListener
from daily_ideas.resilience.storage import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore

logger = logging.getLogger(__name__)

SINGLE_STRIKE_READS = frozenset({"get_group_ideas", "get_group_categories"})
DEVICE_STATE_FILE = "device_state.json"

# Session scope: outlives a rebuilt service, forgotten when the process exits
SESSION_STORE = MemoryKeyValueStore()


@dataclass
class FailoverPolicy:
    error_threshold: int = 3
    # Whether a successful remote call forgets earlier failures
    reset_on_success: bool = False
    # Operations that fail over on their first connectivity error instead of
    # waiting for the error threshold
    single_strike_operations: FrozenSet[str] = field(default_factory=lambda: SINGLE_STRIKE_READS)
    fallback_latency: float = 0.0


class ResilientDataService:
    def __init__(
        self,
        remote: Any,
        fallback: FallbackDataset,
        mode_store: ModeStore,
        error_tracker: ErrorTracker,
        connectivity: ConnectivityMonitor,
        policy: Optional[FailoverPolicy] = None,
    ):
        self.remote = remote
        self.fallback = fallback
        self.mode_store = mode_store
        self.error_tracker = error_tracker
        self.connectivity = connectivity
        self.policy = policy or FailoverPolicy(error_threshold=error_tracker.threshold)

    @classmethod
    def from_settings(cls, settings: Settings, session_store: Optional[KeyValueStore] = None) -> "ResilientDataService":
        """Wire up the service and its collaborators for the application root."""
        clock = OrderKeyClock()
        fallback = FallbackDataset(clock=clock)
        mode_store = ModeStore(
            JsonFileKeyValueStore(Path(settings.state_dir) / DEVICE_STATE_FILE),
            snapshot_provider=fallback.canonical_group,
        )
        error_tracker = ErrorTracker(
            session_store if session_store is not None else SESSION_STORE,
            threshold=settings.failover_error_threshold,
            on_threshold=lambda: mode_store.activate_failover("too many remote errors"),
        )
        connectivity = ConnectivityMonitor(
            settings.get_supabase_host(), timeout=settings.connectivity_probe_timeout
        )
        policy = FailoverPolicy(
            error_threshold=settings.failover_error_threshold,
            reset_on_success=settings.failover_reset_on_success,
            single_strike_operations=SINGLE_STRIKE_READS if settings.failover_single_strike_reads else frozenset(),
            fallback_latency=settings.fallback_latency_ms / 1000,
        )
        return cls(SupabaseDataAdapter(clock=clock), fallback, mode_store, error_tracker, connectivity, policy)

    # Mode handling
    async def bootstrap(self) -> bool:
        """
        Decide at startup whether to begin in demo mode, before any remote
        call is attempted. Returns the resulting mode.
        """
        if self.mode_store.is_failover_active():
            logger.info("Demo mode persisted from a previous run")
            return True
        if self.mode_store.is_remote_marked_unavailable():
            self.mode_store.activate_failover("server previously marked unavailable")
            return True
        online = await asyncio.to_thread(self.connectivity.probe)
        if not online:
            self.mode_store.mark_remote_unavailable()
            self.mode_store.activate_failover("device is offline")
            return True
        if self.error_tracker.count >= self.policy.error_threshold:
            self.mode_store.activate_failover("too many remote errors in this session")
            return True
        return False

    def notify_connectivity_change(self, online: bool) -> FailoverStatus:
        self.connectivity.set_online(online)
        if not online:
            self.mode_store.mark_remote_unavailable()
            self.mode_store.activate_failover("device went offline")
        return self.status()

    def is_demo_mode(self) -> bool:
        return self.mode_store.is_failover_active()

    def mark_remote_unavailable(self) -> None:
        self.mode_store.mark_remote_unavailable()

    def deactivate_failover(self) -> FailoverStatus:
        """Operator action: go back to the remote backend."""
        self.mode_store.deactivate_failover()
        self.error_tracker.clear()
        return self.status()

    def subscribe(self, listener: FailoverListener) -> Callable[[], None]:
        return self.mode_store.subscribe(listener)

    def status(self) -> FailoverStatus:
        return FailoverStatus(
            demo_mode=self.mode_store.is_failover_active(),
            remote_marked_unavailable=self.mode_store.is_remote_marked_unavailable(),
            online=self.connectivity.is_online(),
            error_count=self.error_tracker.count,
            error_threshold=self.policy.error_threshold,
            activated_at=self.mode_store.activated_at(),
            selected_group=self.mode_store.selected_group(),
        )

    def record_remote_failure(self, error: Exception, operation: str = "") -> ErrorKind:
        """
        Classify a failed remote call and update the failover state. Domain
        rejections are returned untouched and never counted.
        """
        kind = classify_error(error, online=self.connectivity.is_online())
        if kind is ErrorKind.DOMAIN:
            return kind
        logger.warning(f"Remote {operation or 'call'} failed ({kind.value}): {error_message(error)}")
        self.error_tracker.record_failure()
        if kind is ErrorKind.CONNECTIVITY and operation in self.policy.single_strike_operations:
            self.mode_store.mark_remote_unavailable()
            self.mode_store.activate_failover(f"{operation} could not reach the server")
        return kind

    # Dispatch
    async def _run_fallback(self, operation: str, *args, **kwargs):
        if self.policy.fallback_latency:
            await asyncio.sleep(self.policy.fallback_latency)
        return getattr(self.fallback, operation)(*args, **kwargs)

    async def _run(self, operation: str, *args, **kwargs):
        if self.mode_store.is_failover_active():
            return await self._run_fallback(operation, *args, **kwargs)

        remote_call = getattr(self.remote, operation)
        try:
            result = await asyncio.to_thread(remote_call, *args, **kwargs)
        except Exception as e:
            kind = self.record_remote_failure(e, operation)
            if kind is ErrorKind.DOMAIN:
                if isinstance(e, DomainError):
                    raise
                raise DomainError(error_message(e)) from e
            return await self._run_fallback(operation, *args, **kwargs)

        if self.policy.reset_on_success:
            self.error_tracker.clear()
        return result

    # Ideas
    async def get_group_ideas(self, group_id: str) -> List[IdeaResponse]:
        ideas = await self._run("get_group_ideas", group_id)
        return sorted(ideas, key=lambda i: i.sort_order)

    async def get_pending_ideas(self, group_id: str) -> List[IdeaResponse]:
        ideas = await self._run("get_pending_ideas", group_id)
        return sorted(ideas, key=lambda i: i.sort_order)

    async def create_idea(self, idea_data: IdeaCreate, user_id: str) -> IdeaResponse:
        return await self._run("create_idea", idea_data, user_id)

    async def update_idea(self, idea_id: str, idea_data: IdeaUpdate) -> Optional[IdeaResponse]:
        return await self._run("update_idea", idea_id, idea_data)

    async def delete_idea(self, idea_id: str) -> bool:
        return await self._run("delete_idea", idea_id)

    async def complete_idea(self, user_id: str, idea_id: str, date: str) -> Optional[IdeaResponse]:
        return await self._run("complete_idea", user_id, idea_id, date)

    async def import_ideas(self, user_id: str, group_id: str, text: str, category_id: Optional[str] = None) -> int:
        return await self._run("import_ideas", user_id, group_id, text, category_id)

    # Categories
    async def get_group_categories(self, group_id: str) -> List[CategoryResponse]:
        categories = await self._run("get_group_categories", group_id)
        return sorted(categories, key=lambda c: c.sort_order)

    async def create_category(self, category_data: CategoryCreate, user_id: str) -> CategoryResponse:
        return await self._run("create_category", category_data, user_id)

    async def update_category(self, category_id: str, category_data: CategoryUpdate) -> Optional[CategoryResponse]:
        return await self._run("update_category", category_id, category_data)

    async def delete_category(self, category_id: str) -> bool:
        return await self._run("delete_category", category_id)

    # Groups
    async def get_user_groups(self, user_id: str) -> List[GroupWithMembersResponse]:
        return await self._run("get_user_groups", user_id)

    async def create_group(self, group_data: GroupCreate, user_id: str) -> GroupResponse:
        return await self._run("create_group", group_data, user_id)

    async def update_group(self, group_id: str, group_data: GroupUpdate) -> Optional[GroupResponse]:
        return await self._run("update_group", group_id, group_data)

    async def join_group(self, user_id: str, invite_code: str) -> GroupResponse:
        """Invalid or already-used codes raise DomainError on either path."""
        return await self._run("join_group", user_id, invite_code)

    async def remove_group_member(self, group_id: str, user_id: str) -> bool:
        return await self._run("remove_group_member", group_id, user_id)

    async def update_member_role(self, group_id: str, user_id: str, role: GroupRole) -> bool:
        return await self._run("update_member_role", group_id, user_id, role)

    # Completions
    async def get_daily_completions(self, group_id: str, date: str) -> List[DailyCompletionResponse]:
        return await self._run("get_daily_completions", group_id, date)

    async def get_calendar_data(self, group_id: str, month: Optional[str] = None) -> Dict[str, List[DailyCompletionResponse]]:
        return await self._run("get_calendar_data", group_id, month)
