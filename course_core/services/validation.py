# =============================================================================
# course_core/services/validation.py
# Form validation rules for courses and students
# =============================================================================
"""
Field-level validation for the add/edit forms.

Each validator returns ``{field: message or None}`` so a form can show the
message next to the offending input.
"""

from __future__ import annotations
import re
from typing import Dict, Optional

from course_core.errors import DataValidationError

# Course rules
COURSE_NAME_MIN_LENGTH = 10
COURSE_NAME_MAX_LENGTH = 63
COURSE_DESCRIPTION_MIN_LENGTH = 10
COURSE_DESCRIPTION_MAX_LENGTH = 500
SCHEDULE_MAX_LENGTH = 100
PROFESSOR_NAME_MAX_LENGTH = 255

# Student rules
STUDENT_NAME_MIN_LENGTH = 2
STUDENT_NAME_MAX_LENGTH = 255
PHONE_MIN_LENGTH = 7
PHONE_MAX_LENGTH = 15

# Unicode letters and whitespace only
NAME_PATTERN = re.compile(r"^(?:[^\W\d_]|\s)+$")
PHONE_PATTERN = re.compile(r"^[0-9]+$")
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+._%\-]{1,256}@[A-Za-z0-9][A-Za-z0-9\-]{0,64}(\.[A-Za-z0-9][A-Za-z0-9\-]{0,25})+$")

FieldErrors = Dict[str, Optional[str]]


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_course_input(name: str, description: str, schedule: str, professor: str) -> FieldErrors:
    """Validate the course form; all four fields are required."""
    errors: FieldErrors = {}

    if _blank(name):
        errors["name"] = "Course name is required"
    elif len(name) < COURSE_NAME_MIN_LENGTH:
        errors["name"] = f"Course name must be at least {COURSE_NAME_MIN_LENGTH} characters"
    elif len(name) > COURSE_NAME_MAX_LENGTH:
        errors["name"] = f"Course name must not exceed {COURSE_NAME_MAX_LENGTH} characters"
    else:
        errors["name"] = None

    if _blank(description):
        errors["description"] = "Course description is required"
    elif len(description) < COURSE_DESCRIPTION_MIN_LENGTH:
        errors["description"] = f"Description must be at least {COURSE_DESCRIPTION_MIN_LENGTH} characters"
    elif len(description) > COURSE_DESCRIPTION_MAX_LENGTH:
        errors["description"] = f"Description must not exceed {COURSE_DESCRIPTION_MAX_LENGTH} characters"
    else:
        errors["description"] = None

    if _blank(schedule):
        errors["schedule"] = "Schedule is required"
    elif len(schedule) > SCHEDULE_MAX_LENGTH:
        errors["schedule"] = f"Schedule must not exceed {SCHEDULE_MAX_LENGTH} characters"
    else:
        errors["schedule"] = None

    if _blank(professor):
        errors["professor"] = "Professor name is required"
    elif len(professor) > PROFESSOR_NAME_MAX_LENGTH:
        errors["professor"] = f"Professor name must not exceed {PROFESSOR_NAME_MAX_LENGTH} characters"
    else:
        errors["professor"] = None

    return errors


def validate_student_input(name: str, email: str, phone: str, course_id: Optional[int]) -> FieldErrors:
    """Validate the student form."""
    errors: FieldErrors = {}

    if _blank(name):
        errors["name"] = "Name is required"
    elif not STUDENT_NAME_MIN_LENGTH <= len(name) <= STUDENT_NAME_MAX_LENGTH:
        errors["name"] = (
            f"Name must be between {STUDENT_NAME_MIN_LENGTH} and {STUDENT_NAME_MAX_LENGTH} characters"
        )
    elif not NAME_PATTERN.match(name):
        errors["name"] = "Name can only contain letters and spaces"
    else:
        errors["name"] = None

    if _blank(email):
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.match(email):
        errors["email"] = "Please enter a valid email address"
    else:
        errors["email"] = None

    if _blank(phone):
        errors["phone"] = "Phone is required"
    elif not PHONE_MIN_LENGTH <= len(phone) <= PHONE_MAX_LENGTH:
        errors["phone"] = f"Phone number must be between {PHONE_MIN_LENGTH} and {PHONE_MAX_LENGTH} digits"
    elif not PHONE_PATTERN.match(phone):
        errors["phone"] = "Phone number can only contain digits"
    else:
        errors["phone"] = None

    if course_id is None:
        errors["course_id"] = "Course ID is required"
    elif course_id <= 0:
        errors["course_id"] = "Course ID must be a valid number"
    else:
        errors["course_id"] = None

    return errors


def is_valid(errors: FieldErrors) -> bool:
    return all(message is None for message in errors.values())


def raise_for_errors(errors: FieldErrors) -> None:
    """Raise DataValidationError listing every failing field."""
    failing = {field: message for field, message in errors.items() if message is not None}
    if failing:
        raise DataValidationError(
            "; ".join(failing.values()),
            errors=failing,
        )
