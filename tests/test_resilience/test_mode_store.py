"""Tests for the persisted demo mode flag"""
import pytest

from daily_ideas.modules.demo.dataset import FallbackDataset
from daily_ideas.modules.demo.seed import DEMO_GROUP_ID
from daily_ideas.resilience.mode_store import ModeStore, SELECTED_GROUP_KEY
from daily_ideas.resilience.storage import MemoryKeyValueStore, JsonFileKeyValueStore


@pytest.fixture
def store():
    return ModeStore(MemoryKeyValueStore(), snapshot_provider=FallbackDataset().canonical_group)


class TestActivation:
    def test_inactive_by_default(self, store):
        assert store.is_failover_active() is False
        assert store.activated_at() is None
        assert store.selected_group() is None

    def test_activate_sets_flag_and_snapshot(self, store):
        assert store.activate_failover("offline") is True

        assert store.is_failover_active() is True
        assert store.activated_at() is not None
        group = store.selected_group()
        assert group.id == DEMO_GROUP_ID
        assert group.invite_code == "DEMO123"

    def test_second_activation_is_a_noop(self, store):
        store.activate_failover()
        assert store.activate_failover() is False

    def test_deactivate_clears_everything(self, store):
        store.activate_failover()
        store.mark_remote_unavailable()
        store.deactivate_failover()

        assert store.is_failover_active() is False
        assert store.is_remote_marked_unavailable() is False
        assert store.selected_group() is None
        assert store.activated_at() is None

    def test_flag_survives_restart(self, tmp_path):
        path = tmp_path / "device.json"
        ModeStore(JsonFileKeyValueStore(path)).activate_failover()

        assert ModeStore(JsonFileKeyValueStore(path)).is_failover_active() is True


class TestSnapshot:
    def test_invalid_snapshot_is_discarded(self):
        backing = MemoryKeyValueStore()
        backing.set(SELECTED_GROUP_KEY, '{"id": "g1"}')

        assert ModeStore(backing).selected_group() is None


class TestSubscribers:
    def test_listener_notified_once_per_activation(self, store):
        calls = []
        store.subscribe(lambda: calls.append("on"))

        store.activate_failover()
        store.activate_failover()
        assert calls == ["on"]

        store.deactivate_failover()
        store.activate_failover()
        assert calls == ["on", "on"]

    def test_unsubscribe(self, store):
        calls = []
        unsubscribe = store.subscribe(lambda: calls.append("on"))
        unsubscribe()
        unsubscribe()

        store.activate_failover()
        assert calls == []

    def test_failing_listener_does_not_block_others(self, store):
        calls = []

        def broken():
            raise RuntimeError("listener broke")

        store.subscribe(broken)
        store.subscribe(lambda: calls.append("on"))

        assert store.activate_failover() is True
        assert calls == ["on"]
