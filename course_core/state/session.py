import streamlit as st

# Central registry for session-state keys used across the pages.
SESSION_DEFAULTS = {
    "selected_course_id": None,
    "selected_course_name": "",
    "selected_student_id": None,
    "editing_course_id": None,
    "editing_student_id": None,
    "show_course_form": False,
    "show_student_form": False,
    "flash_message": None,
    "flash_level": "info",
    "force_offline": False,
}


def init_state():
    """Initialize session state with defaults."""
    for k, v in SESSION_DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = v


def flash(message: str, level: str = "info"):
    """Queue a message shown once on the next rerun."""
    st.session_state["flash_message"] = message
    st.session_state["flash_level"] = level


def show_flash():
    """Render and clear the queued message, if any."""
    message = st.session_state.get("flash_message")
    if not message:
        return
    level = st.session_state.get("flash_level", "info")
    getattr(st, level, st.info)(message)
    st.session_state["flash_message"] = None
    st.session_state["flash_level"] = "info"


def select_course(course_id, course_name=""):
    st.session_state["selected_course_id"] = course_id
    st.session_state["selected_course_name"] = course_name
    st.session_state["editing_student_id"] = None
    st.session_state["show_student_form"] = False


def select_student(student_id):
    st.session_state["selected_student_id"] = student_id


def reset_forms():
    """Close any open add/edit form."""
    for key in ("editing_course_id", "editing_student_id"):
        st.session_state[key] = None
    for key in ("show_course_form", "show_student_form"):
        st.session_state[key] = False
