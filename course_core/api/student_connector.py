"""
Student API Connector
REST access to /api/student, including the per-course listing
"""
from dataclasses import replace
from typing import List

from course_core.api.base_connector import BaseAPIConnector, APIResponse
from course_core.api.origin import origin_of
from course_core.errors import RemoteCallError
from course_core.models import Student


class StudentAPIConnector(BaseAPIConnector):
    """Connector for the student resource. All bodies are JSON."""

    @property
    def resource(self) -> str:
        return "api/student"

    def list_students(self) -> APIResponse:
        """GET /api/student -> list of Student"""
        response = self._make_request()
        students = [Student.from_api(item) for item in self._decode(response) or []]
        return APIResponse(data=students, origin=origin_of(response), status_code=response.status_code)

    def list_students_by_course(self, course_id: int) -> APIResponse:
        """
        GET /api/student/course/{id} -> list of Student scoped to the course

        The path id owns every returned row, whatever courseId the payload
        carries (some server versions send 0 or omit it).
        """
        response = self._make_request(("course", course_id))
        students: List[Student] = [
            replace(Student.from_api(item), course_id=course_id)
            for item in self._decode(response) or []
        ]
        return APIResponse(data=students, origin=origin_of(response), status_code=response.status_code)

    def get_student(self, student_id: int) -> APIResponse:
        """GET /api/student/{id} -> Student"""
        response = self._make_request((student_id,))
        return APIResponse(
            data=self._student_from(response),
            origin=origin_of(response),
            status_code=response.status_code,
        )

    def create_student(self, student: Student) -> APIResponse:
        """POST /api/student (JSON) -> Student with server-assigned id"""
        response = self._make_request(method="POST", json=student.to_api())
        created = self._student_from(response, fallback_course=student.course_id)
        self._invalidate_cache()
        return APIResponse(data=created, origin=origin_of(response), status_code=response.status_code)

    def update_student(self, student: Student) -> APIResponse:
        """PUT /api/student/{id} (JSON) -> Student"""
        response = self._make_request((student.id,), method="PUT", json=student.to_api())
        updated = self._student_from(response, fallback_course=student.course_id)
        self._invalidate_cache()
        return APIResponse(data=updated, origin=origin_of(response), status_code=response.status_code)

    def delete_student(self, student_id: int) -> APIResponse:
        """DELETE /api/student/{id} -> success status only"""
        response = self._make_request((student_id,), method="DELETE")
        self._invalidate_cache()
        return APIResponse(data=None, origin=origin_of(response), status_code=response.status_code)

    def _student_from(self, response, fallback_course=None) -> Student:
        payload = self._decode(response)
        if not payload:
            raise RemoteCallError(
                "Empty student in server response",
                endpoint=response.url,
                status_code=response.status_code,
            )
        return Student.from_api(payload, course_id=fallback_course)
