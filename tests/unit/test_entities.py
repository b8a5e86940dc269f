# =============================================================================
# tests/unit/test_entities.py
# Unit Tests for Course / Student conversions
# =============================================================================

from datetime import datetime


class TestCourse:
    """Course payload and row mapping"""

    def test_from_api_camel_case(self):
        from course_core.models import Course

        course = Course.from_api({
            "id": 3, "name": "Compilers", "description": "Parsing and codegen",
            "imageUrl": "c.png", "schedule": "Fri", "professor": "Aho",
        })

        assert course.id == 3
        assert course.image_url == "c.png"
        assert course.is_persisted

    def test_from_api_pascal_case(self):
        from course_core.models import Course

        course = Course.from_api({"Id": 4, "Name": "Networks", "Description": "TCP/IP",
                                  "Schedule": "Tue", "Professor": "Cerf"})
        assert course.id == 4
        assert course.name == "Networks"
        assert course.image_url is None

    def test_to_api_omits_id_until_assigned(self):
        from course_core.models import Course

        course = Course(name="Compilers", description="d", schedule="s", professor="p")
        assert "id" not in course.to_api()
        course.id = 9
        assert course.to_api()["id"] == 9

    def test_form_fields_use_backend_names(self, sample_courses):
        assert set(sample_courses[0].to_form_fields()) == {"Name", "Description", "Schedule", "Professor"}

    def test_row_round_trip_keeps_metadata(self, sample_courses):
        from course_core.models import Course

        row = dict(sample_courses[0].to_row(), is_from_cache=1,
                   last_sync_timestamp="2024-05-01T10:00:00")
        course = Course.from_row(row)

        assert course == sample_courses[0]
        assert course.is_from_cache is True
        assert course.last_sync_timestamp == datetime(2024, 5, 1, 10, 0)

    def test_equality_ignores_cache_metadata(self, sample_courses):
        from dataclasses import replace

        assert replace(sample_courses[0], is_from_cache=True) == sample_courses[0]

    def test_resolve_image_url(self, sample_courses):
        url = sample_courses[0].resolve_image_url("http://10.0.2.2:5000/uploads")
        assert url == "http://10.0.2.2:5000/uploads/mobile.jpg"
        assert sample_courses[1].resolve_image_url("http://x/uploads/") is None

    def test_absolute_image_url_untouched(self):
        from course_core.models import Course

        course = Course(name="n", description="d", schedule="s", professor="p",
                        image_url="https://cdn.test/a.png")
        assert course.resolve_image_url("http://x/uploads/") == "https://cdn.test/a.png"


class TestStudent:
    """Student payload and row mapping"""

    def test_from_api_uses_course_fallback(self):
        from course_core.models import Student

        student = Student.from_api({"id": 1, "name": "Ana", "email": "a@b.co", "phone": "1234567"},
                                   course_id=5)
        assert student.course_id == 5

    def test_payload_course_wins_over_fallback(self):
        from course_core.models import Student

        student = Student.from_api({"id": 1, "name": "Ana", "email": "a@b.co",
                                    "phone": "1234567", "courseId": 7}, course_id=5)
        assert student.course_id == 7

    def test_to_api_is_camel_case(self, sample_students):
        payload = sample_students[0].to_api()
        assert payload == {"id": 10, "name": "Ana Mora", "email": "ana@example.com",
                           "phone": "88887777", "courseId": 1}
