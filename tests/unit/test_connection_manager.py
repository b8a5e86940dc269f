# =============================================================================
# tests/unit/test_connection_manager.py
# Unit Tests for connectivity detection
# =============================================================================

import pytest
from unittest.mock import MagicMock, patch


@pytest.fixture
def manager():
    from course_core.offline.connection_manager import ConnectionManager

    return ConnectionManager(api_url="http://backend.test:8080/")


class TestConnectionManager:
    """Status transitions driven by TCP probes"""

    def test_backend_reachable_is_online(self, manager):
        from course_core.offline.connection_manager import ConnectionStatus

        with patch.object(manager, "_probe", return_value=True) as probe:
            assert manager.has_network() is True

        assert manager.status == ConnectionStatus.ONLINE
        assert manager.state.api_available is True
        probe.assert_called_once_with("backend.test", 8080)

    def test_internet_only_is_degraded_but_usable(self, manager):
        from course_core.offline.connection_manager import ConnectionStatus

        def probe(host, port):
            return host != "backend.test"

        with patch.object(manager, "_probe", side_effect=probe):
            assert manager.has_network() is True

        assert manager.status == ConnectionStatus.DEGRADED
        assert manager.state.consecutive_failures == 1

    def test_no_connectivity_is_offline(self, manager):
        with patch.object(manager, "_probe", return_value=False):
            assert manager.has_network() is False

        assert manager.is_offline
        assert manager.get_status_display()["failures"] == 1

    def test_forced_offline_skips_probe(self, manager):
        with patch.object(manager, "_probe", return_value=True) as probe:
            manager.force_offline(True)
            assert manager.has_network() is False
            probe.assert_not_called()

        assert manager.forced_offline is True

    def test_leaving_forced_offline_probes_again(self, manager):
        manager.force_offline(True)
        manager.force_offline(False)

        with patch.object(manager, "_probe", return_value=True):
            assert manager.has_network() is True

    def test_empty_api_url_never_reaches_backend(self):
        from course_core.offline.connection_manager import ConnectionManager

        with patch.dict("os.environ", {"COURSES_API_BASE_URL": ""}):
            manager = ConnectionManager(api_url="")

        assert manager._check_api() is False

    def test_callbacks_fire_on_status_change(self, manager):
        callback = MagicMock()
        manager.register_callback(callback)

        with patch.object(manager, "_probe", return_value=True):
            manager.check_connection()
            manager.check_connection()

        callback.assert_called_once_with(manager.state)

    def test_failing_callback_is_logged_not_raised(self, manager):
        manager.register_callback(MagicMock(side_effect=RuntimeError("listener broke")))

        with patch.object(manager, "_probe", return_value=False):
            manager.check_connection()

    def test_unregister_callback(self, manager):
        callback = MagicMock()
        manager.register_callback(callback)
        manager.unregister_callback(callback)

        manager.force_offline(True)
        callback.assert_not_called()


@pytest.mark.parametrize("url,expected", [
    ("http://10.0.2.2:5000/", ("10.0.2.2", 5000)),
    ("https://courses.example.com/", ("courses.example.com", 443)),
    ("http://courses.example.com", ("courses.example.com", 80)),
    ("", None),
    ("not a url", None),
])
def test_backend_endpoint(url, expected):
    from course_core.offline.connection_manager import backend_endpoint

    assert backend_endpoint(url) == expected
