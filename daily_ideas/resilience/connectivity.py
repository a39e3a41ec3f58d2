import socket
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class ConnectivityMonitor:
    """
    Last known "can we reach the backend host" answer.

    Sampled with `probe()` at startup; later changes arrive through
    `set_online()`.
    """

    def __init__(self, host: Optional[str], port: int = 443, timeout: float = 2.0, online: bool = True):
        self.host = host
        self.port = port
        self.timeout = timeout
        self._online = online

    def is_online(self) -> bool:
        return self._online

    def probe(self) -> bool:
        if not self.host:
            logger.info("No backend host configured, treating device as offline")
            self._online = False
            return self._online
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout):
                self._online = True
        except OSError as e:
            logger.warning(f"Backend host {self.host}:{self.port} unreachable: {e}")
            self._online = False
        return self._online

    def set_online(self, online: bool) -> bool:
        """Record a connectivity change. Returns True when the state flipped."""
        changed = online != self._online
        self._online = online
        if changed:
            logger.info(f"Connectivity changed: {'online' if online else 'offline'}")
        return changed
