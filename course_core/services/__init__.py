# =============================================================================
# course_core/services/__init__.py
# Service Layer for the Student Course System
# =============================================================================
"""
Service layer shared by the sync coordinators and the pages.

Usage Example:
-------------
    from course_core.services import ServiceResult
    from course_core.services.validation import validate_course_input, is_valid

    errors = validate_course_input(name, description, schedule, professor)
    if not is_valid(errors):
        ...

    result = service.courses.create(name, description, schedule, professor)
    if result:
        print(f"Created course {result.data.id}")
    else:
        print(result.error)
"""

from .base_service import BaseService, ServiceResult
from .validation import (
    validate_course_input,
    validate_student_input,
    is_valid,
    raise_for_errors,
)

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    # Form validation
    "validate_course_input",
    "validate_student_input",
    "is_valid",
    "raise_for_errors",
]
