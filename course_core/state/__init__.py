# =============================================================================
# course_core/state/__init__.py
# Streamlit session-state helpers
# =============================================================================

from .session import (
    SESSION_DEFAULTS,
    init_state,
    flash,
    show_flash,
    select_course,
    select_student,
    reset_forms,
)

__all__ = [
    "SESSION_DEFAULTS",
    "init_state",
    "flash",
    "show_flash",
    "select_course",
    "select_student",
    "reset_forms",
]
