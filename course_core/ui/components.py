import streamlit as st

from course_core.api.origin import DataSource
from course_core.offline.sync_coordinator import EntitySyncCoordinator

SOURCE_LABELS = {
    DataSource.NETWORK: ("🌐", "Data loaded from the server"),
    DataSource.CACHE: ("🗂️", "Data loaded from the HTTP cache"),
    DataSource.LOCAL: ("📴", "Offline: showing locally saved data"),
    DataSource.ERROR: ("⚠️", "Server unreachable: showing last saved data"),
    DataSource.UNKNOWN: ("❔", "Data loaded"),
}


def header(title: str, subtitle: str, icon: str = "🎓"):
    st.markdown(f"## {icon} {title}")
    st.caption(subtitle)


def announce_data_source(coordinator: EntitySyncCoordinator):
    """Show where the last read came from, once."""
    source = coordinator.data_source
    if source is None:
        return
    icon, text = SOURCE_LABELS[source]
    st.toast(text, icon=icon)
    coordinator.clear_data_source()


def render_connection_sidebar(service):
    """
    Online/offline badge plus a manual offline switch.

    Shows the result of the last probe made by an operation; rendering the
    sidebar never probes the network.
    """
    manager = service.connection_manager
    with st.sidebar:
        st.markdown("### Connection")
        forced = st.toggle("Work offline", key="force_offline")
        if forced != manager.forced_offline:
            manager.force_offline(forced)
        status = manager.get_status_display()
        if status["is_online"]:
            st.success("Online")
        elif status["status"] == "unknown":
            st.info("Connection not checked yet")
        elif status["status"] == "degraded":
            st.warning("Server unreachable, showing saved data")
        else:
            st.warning("Offline" + (" (manual)" if status["forced_offline"] else ""))
        if status["backend"]:
            st.caption(status["backend"])
        if status["last_check"]:
            st.caption(f"Last checked {status['last_check'][11:19]}")
        stats = service.get_status()
        st.caption(f"{stats['courses_cached']} course(s), {stats['students_cached']} student(s) saved locally")


def show_field_errors(errors: dict):
    for message in errors.values():
        if message:
            st.error(message)
