"""
Pytest fixtures for testing
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from daily_ideas.core.ordering import OrderKeyClock
from daily_ideas.database.supabase_adapter import SupabaseDataAdapter
from daily_ideas.modules.demo.dataset import FallbackDataset
from daily_ideas.modules.ideas.schemas import IdeaResponse
from daily_ideas.resilience.connectivity import ConnectivityMonitor
from daily_ideas.resilience.error_tracker import ErrorTracker
from daily_ideas.resilience.facade import ResilientDataService
from daily_ideas.resilience.mode_store import ModeStore
from daily_ideas.resilience.storage import MemoryKeyValueStore


def make_idea(idea_id, sort_order, group_id="group-1", **fields):
    """Build an idea as the remote backend would return it."""
    data = {
        "id": idea_id,
        "text": f"Idea {idea_id}",
        "created_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
        "sort_order": sort_order,
        "group_id": group_id,
        "created_by": "user-1",
    }
    data.update(fields)
    return IdeaResponse(**data)


QUERY_METHODS = ("select", "eq", "in_", "order", "limit", "insert", "update", "delete", "gte", "lte")


def fake_table(*results):
    """
    Chainable Supabase query builder; each execute() returns the next canned
    rows, or raises when the canned result is an exception.
    """
    query = MagicMock()
    for name in QUERY_METHODS:
        getattr(query, name).return_value = query
    query.execute.side_effect = [
        rows if isinstance(rows, Exception) else MagicMock(data=rows) for rows in results
    ]
    return query


def fake_client(**tables):
    client = MagicMock()
    client.table.side_effect = lambda name: tables[name]
    return client


@pytest.fixture
def clock():
    return OrderKeyClock()


@pytest.fixture
def fallback(clock):
    """Freshly seeded fallback dataset"""
    return FallbackDataset(clock=clock)


@pytest.fixture
def remote():
    """Remote backend double; configure return values or side effects per test"""
    return MagicMock(spec=SupabaseDataAdapter)


@pytest.fixture
def mode_store(fallback):
    return ModeStore(MemoryKeyValueStore(), snapshot_provider=fallback.canonical_group)


@pytest.fixture
def error_tracker(mode_store):
    return ErrorTracker(
        MemoryKeyValueStore(),
        threshold=3,
        on_threshold=lambda: mode_store.activate_failover("too many remote errors"),
    )


@pytest.fixture
def connectivity():
    return ConnectivityMonitor(host=None, online=True)


@pytest.fixture
def service(remote, fallback, mode_store, error_tracker, connectivity):
    return ResilientDataService(remote, fallback, mode_store, error_tracker, connectivity)


@pytest.fixture
def demo_service(service):
    """Service already switched to the fallback dataset"""
    service.mode_store.activate_failover("test")
    return service
