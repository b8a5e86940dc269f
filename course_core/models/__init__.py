# =============================================================================
# course_core/models/__init__.py
# =============================================================================

from .entities import Course, Student

__all__ = ["Course", "Student"]
