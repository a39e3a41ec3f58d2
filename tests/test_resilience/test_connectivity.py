"""Tests for the backend reachability monitor"""
from unittest.mock import MagicMock

from daily_ideas.resilience import connectivity
from daily_ideas.resilience.connectivity import ConnectivityMonitor


def test_no_host_means_offline():
    monitor = ConnectivityMonitor(host=None)
    assert monitor.probe() is False
    assert monitor.is_online() is False


def test_probe_reachable_host(monkeypatch):
    sock = MagicMock()
    create_connection = MagicMock(return_value=sock)
    monkeypatch.setattr(connectivity.socket, "create_connection", create_connection)
    monitor = ConnectivityMonitor(host="abc.supabase.co", online=False, timeout=1.5)

    assert monitor.probe() is True
    create_connection.assert_called_once_with(("abc.supabase.co", 443), timeout=1.5)


def test_probe_unreachable_host(monkeypatch):
    monkeypatch.setattr(
        connectivity.socket, "create_connection", MagicMock(side_effect=OSError("unreachable"))
    )
    monitor = ConnectivityMonitor(host="abc.supabase.co")

    assert monitor.probe() is False
    assert monitor.is_online() is False


def test_set_online_reports_changes():
    monitor = ConnectivityMonitor(host=None, online=True)
    assert monitor.set_online(True) is False
    assert monitor.set_online(False) is True
    assert monitor.is_online() is False
