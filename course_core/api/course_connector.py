"""
Course API Connector
REST access to /api/course (list, create, update, delete)
"""
from pathlib import Path
from typing import List, Optional

from course_core.api.base_connector import BaseAPIConnector, APIResponse
from course_core.api.origin import origin_of
from course_core.errors import RemoteCallError
from course_core.models import Course


class CourseAPIConnector(BaseAPIConnector):
    """
    Connector for the course resource.

    Creates are multipart (text parts plus an optional image file). Updates
    are multipart only when a new image is uploaded, JSON otherwise.
    """

    IMAGE_PART = "file"
    IMAGE_CONTENT_TYPE = "image/*"

    @property
    def resource(self) -> str:
        return "api/course"

    def list_courses(self) -> APIResponse:
        """GET /api/course -> list of Course"""
        response = self._make_request()
        payload = self._decode(response) or []
        courses: List[Course] = [Course.from_api(item) for item in payload]
        return APIResponse(data=courses, origin=origin_of(response), status_code=response.status_code)

    def create_course(self, course: Course, image_path: Optional[Path] = None) -> APIResponse:
        """POST /api/course (multipart) -> Course with server-assigned id"""
        response = self._send_multipart("POST", (), course, image_path)
        created = self._course_from(response)
        self._invalidate_cache()
        return APIResponse(data=created, origin=origin_of(response), status_code=response.status_code)

    def update_course(self, course: Course, image_path: Optional[Path] = None) -> APIResponse:
        """PUT /api/course/{id} -> Course"""
        if image_path is not None:
            response = self._send_multipart("PUT", (course.id,), course, image_path)
        else:
            response = self._make_request((course.id,), method="PUT", json=course.to_api())
        updated = self._course_from(response)
        self._invalidate_cache()
        return APIResponse(data=updated, origin=origin_of(response), status_code=response.status_code)

    def delete_course(self, course_id: int) -> APIResponse:
        """DELETE /api/course/{id} -> success status only"""
        response = self._make_request((course_id,), method="DELETE")
        self._invalidate_cache()
        return APIResponse(data=None, origin=origin_of(response), status_code=response.status_code)

    def _send_multipart(self, method: str, path_parts: tuple, course: Course, image_path: Optional[Path]):
        parts = {name: (None, value) for name, value in course.to_form_fields().items()}
        if image_path is None:
            return self._make_request(path_parts, method=method, files=parts)

        with open(image_path, "rb") as image:
            parts[self.IMAGE_PART] = (Path(image_path).name, image, self.IMAGE_CONTENT_TYPE)
            return self._make_request(path_parts, method=method, files=parts)

    def _course_from(self, response) -> Course:
        payload = self._decode(response)
        if not payload:
            raise RemoteCallError(
                "Empty course in server response",
                endpoint=response.url,
                status_code=response.status_code,
            )
        return Course.from_api(payload)
