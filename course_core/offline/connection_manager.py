# =============================================================================
# course_core/offline/connection_manager.py
# Reachability of the course backend
# =============================================================================
"""
ConnectionManager - answers "should this operation try the network?".

The sync coordinators call `has_network()` before every read and write.
The probe is a TCP connect to the backend host, falling back to public
DNS resolvers to tell "backend down" (DEGRADED) from "no link" (OFFLINE).
The sidebar "Work offline" toggle maps onto `force_offline()`.
"""

from __future__ import annotations
import os
import socket
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse
import logging

logger = logging.getLogger(__name__)

Endpoint = Tuple[str, int]


class ConnectionStatus(Enum):
    ONLINE = "online"           # Backend accepts connections
    DEGRADED = "degraded"       # Link up, backend refused or timed out
    OFFLINE = "offline"         # No link, or forced offline
    CHECKING = "checking"
    UNKNOWN = "unknown"         # Never probed


@dataclass
class ConnectionState:
    """Result of the most recent probe."""
    status: ConnectionStatus = ConnectionStatus.UNKNOWN
    internet_available: bool = False
    api_available: bool = False
    last_check: Optional[datetime] = None
    last_online: Optional[datetime] = None
    consecutive_failures: int = 0
    error_message: Optional[str] = None


def backend_endpoint(api_url: str) -> Optional[Endpoint]:
    """(host, port) of a base URL such as http://10.0.2.2:5000/, or None."""
    if not api_url:
        return None
    parsed = urlparse(api_url)
    try:
        port = parsed.port or (443 if parsed.scheme == "https" else 80)
    except ValueError:
        return None
    return (parsed.hostname, port) if parsed.hostname else None


class ConnectionManager:
    """
    Process-wide connectivity probe.

    Usage:
        connectivity = ConnectionManager.get_instance(config.base_url).has_network
        coordinator = CourseSyncCoordinator(local_db, connector, connectivity)
    """

    _instance: Optional[ConnectionManager] = None
    _lock = threading.Lock()

    PROBE_TIMEOUT = 3

    # Reached only when the backend probe fails
    FALLBACK_ENDPOINTS: List[Endpoint] = [
        ("8.8.8.8", 53),
        ("1.1.1.1", 53),
        ("208.67.222.222", 53),
    ]

    def __init__(self, api_url: Optional[str] = None):
        self.api_url = api_url or os.getenv("COURSES_API_BASE_URL", "")
        self._endpoint = backend_endpoint(self.api_url)
        self._state = ConnectionState()
        self._callbacks: List[Callable[[ConnectionState], None]] = []
        self._forced_offline = False

        if self.api_url and self._endpoint is None:
            self._state.error_message = f"Cannot probe backend URL {self.api_url!r}"
            logger.warning(self._state.error_message)

    @classmethod
    def get_instance(cls, api_url: Optional[str] = None) -> ConnectionManager:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = ConnectionManager(api_url)
        return cls._instance

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def is_online(self) -> bool:
        return self._state.status == ConnectionStatus.ONLINE

    @property
    def is_offline(self) -> bool:
        return self._state.status == ConnectionStatus.OFFLINE

    @property
    def forced_offline(self) -> bool:
        return self._forced_offline

    def has_network(self) -> bool:
        """
        Probe now and say whether the remote call should be attempted.

        DEGRADED counts as network: the request goes out and its failure is
        handled as a remote error (reads fall back to the local store).
        """
        if self._forced_offline:
            return False
        return self.check_connection().status in (ConnectionStatus.ONLINE, ConnectionStatus.DEGRADED)

    def check_connection(self) -> ConnectionState:
        """Run the probes, update state, notify listeners on a status change."""
        previous = self._state.status
        self._state.status = ConnectionStatus.CHECKING
        self._state.last_check = datetime.now()

        api_ok = self._check_api()
        link_ok = api_ok or self._check_internet()
        self._state.api_available = api_ok
        self._state.internet_available = link_ok

        if api_ok:
            self._state.status = ConnectionStatus.ONLINE
            self._state.last_online = self._state.last_check
            self._state.consecutive_failures = 0
        else:
            self._state.status = ConnectionStatus.DEGRADED if link_ok else ConnectionStatus.OFFLINE
            self._state.consecutive_failures += 1

        if previous not in (self._state.status, ConnectionStatus.CHECKING):
            logger.info(f"Backend reachability: {previous.value} -> {self._state.status.value}")
            self._notify_callbacks()

        return self._state

    def _probe(self, host: str, port: int) -> bool:
        try:
            with socket.create_connection((host, port), timeout=self.PROBE_TIMEOUT):
                return True
        except OSError:
            return False

    def _check_api(self) -> bool:
        return self._endpoint is not None and self._probe(*self._endpoint)

    def _check_internet(self) -> bool:
        return any(self._probe(host, port) for host, port in self.FALLBACK_ENDPOINTS)

    def register_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """Call `callback(state)` whenever the status changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Connectivity listener failed: {e}")

    def force_offline(self, enabled: bool = True) -> None:
        """Skip all probes and report offline until switched back."""
        self._forced_offline = enabled
        if enabled:
            self._state.status = ConnectionStatus.OFFLINE
            self._state.internet_available = False
            self._state.api_available = False
            self._notify_callbacks()
        logger.info(f"Work offline {'enabled' if enabled else 'disabled'}")

    def get_status_display(self) -> dict:
        """Plain dict for the connection sidebar."""
        state = self._state
        return {
            "status": state.status.value,
            "is_online": self.is_online,
            "forced_offline": self._forced_offline,
            "backend": self.api_url,
            "internet": state.internet_available,
            "api": state.api_available,
            "last_check": state.last_check.isoformat() if state.last_check else None,
            "last_online": state.last_online.isoformat() if state.last_online else None,
            "failures": state.consecutive_failures,
            "error": state.error_message,
        }


_connection_manager: Optional[ConnectionManager] = None


def get_connection_manager(api_url: Optional[str] = None) -> ConnectionManager:
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager.get_instance(api_url)
    return _connection_manager


def has_network() -> bool:
    return get_connection_manager().has_network()
