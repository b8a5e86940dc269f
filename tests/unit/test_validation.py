# =============================================================================
# tests/unit/test_validation.py
# Unit Tests for form validation
# =============================================================================

import pytest


class TestCourseValidation:
    """Course form rules"""

    def test_valid_course(self):
        from course_core.services.validation import validate_course_input, is_valid

        errors = validate_course_input("Mobile Development", "Native Android apps", "Mon 18:00", "Ada")
        assert is_valid(errors)
        assert set(errors) == {"name", "description", "schedule", "professor"}

    def test_required_fields(self):
        from course_core.services.validation import validate_course_input

        errors = validate_course_input("", "   ", "", "")
        assert errors["name"] == "Course name is required"
        assert errors["description"] == "Course description is required"
        assert errors["schedule"] == "Schedule is required"
        assert errors["professor"] == "Professor name is required"

    @pytest.mark.parametrize("name,expected", [
        ("Short", "Course name must be at least 10 characters"),
        ("x" * 64, "Course name must not exceed 63 characters"),
        ("x" * 63, None),
    ])
    def test_name_length(self, name, expected):
        from course_core.services.validation import validate_course_input

        assert validate_course_input(name, "Long enough text", "Mon", "Ada")["name"] == expected

    def test_schedule_and_professor_limits(self):
        from course_core.services.validation import validate_course_input

        errors = validate_course_input("Mobile Development", "Native Android apps", "s" * 101, "p" * 256)
        assert errors["schedule"] == "Schedule must not exceed 100 characters"
        assert errors["professor"] == "Professor name must not exceed 255 characters"


class TestStudentValidation:
    """Student form rules"""

    def test_valid_student_with_accents(self):
        from course_core.services.validation import validate_student_input, is_valid

        assert is_valid(validate_student_input("José Núñez", "jose@example.com", "88887777", 1))

    def test_name_rules(self):
        from course_core.services.validation import validate_student_input

        assert validate_student_input("A", "a@b.co", "1234567", 1)["name"] == \
            "Name must be between 2 and 255 characters"
        assert validate_student_input("R2D2", "a@b.co", "1234567", 1)["name"] == \
            "Name can only contain letters and spaces"

    def test_email_rules(self):
        from course_core.services.validation import validate_student_input

        assert validate_student_input("Ana", "not-an-email", "1234567", 1)["email"] == \
            "Please enter a valid email address"

    def test_phone_rules(self):
        from course_core.services.validation import validate_student_input

        assert validate_student_input("Ana", "a@b.co", "123", 1)["phone"] == \
            "Phone number must be between 7 and 15 digits"
        assert validate_student_input("Ana", "a@b.co", "8888-7777", 1)["phone"] == \
            "Phone number can only contain digits"

    def test_course_id_rules(self):
        from course_core.services.validation import validate_student_input

        assert validate_student_input("Ana", "a@b.co", "1234567", None)["course_id"] == "Course ID is required"
        assert validate_student_input("Ana", "a@b.co", "1234567", 0)["course_id"] == \
            "Course ID must be a valid number"

    def test_raise_for_errors(self):
        from course_core.errors import DataValidationError
        from course_core.services.validation import raise_for_errors, validate_student_input

        with pytest.raises(DataValidationError) as exc:
            raise_for_errors(validate_student_input("", "a@b.co", "1234567", 1))

        assert exc.value.code == "DATA_001"
        assert exc.value.details["errors"] == {"name": "Name is required"}
