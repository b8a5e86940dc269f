# =============================================================================
# course_core/models/entities.py
# Course and Student entities
# =============================================================================
"""
Canonical entity shapes shared by the REST connectors, the local store and
the sync coordinators.

Three representations exist for each entity:
- API payloads (camelCase JSON; the backend also emits PascalCase)
- SQLite rows (snake_case columns plus cache metadata)
- the dataclass itself, which is what the UI consumes
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional


def _pick(payload: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in payload (camelCase / PascalCase tolerant)."""
    for key in keys:
        if key in payload:
            return payload[key]
    return default


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass
class Course:
    """A course; `id` stays None until the server assigns one."""
    name: str
    description: str
    schedule: str
    professor: str
    id: Optional[int] = None
    image_url: Optional[str] = None
    is_from_cache: bool = field(default=False, compare=False)
    last_sync_timestamp: Optional[datetime] = field(default=None, compare=False)

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def resolve_image_url(self, images_base_url: str) -> Optional[str]:
        """Resolve the relative image path against the uploads base URL."""
        if not self.image_url:
            return None
        if self.image_url.startswith(("http://", "https://")):
            return self.image_url
        base = images_base_url if images_base_url.endswith("/") else images_base_url + "/"
        return base + self.image_url.lstrip("/")

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> Course:
        course_id = _pick(payload, "id", "Id")
        return cls(
            id=int(course_id) if course_id is not None else None,
            name=_pick(payload, "name", "Name", default=""),
            description=_pick(payload, "description", "Description", default=""),
            image_url=_pick(payload, "imageUrl", "ImageUrl", "image_url"),
            schedule=_pick(payload, "schedule", "Schedule", default=""),
            professor=_pick(payload, "professor", "Professor", default=""),
        )

    def to_api(self) -> Dict[str, Any]:
        """JSON body for the REST backend (no cache metadata)."""
        payload = {
            "name": self.name,
            "description": self.description,
            "imageUrl": self.image_url,
            "schedule": self.schedule,
            "professor": self.professor,
        }
        if self.id is not None:
            payload["id"] = self.id
        return payload

    def to_form_fields(self) -> Dict[str, str]:
        """Multipart text parts, named the way the backend binds them."""
        return {
            "Name": self.name,
            "Description": self.description,
            "Schedule": self.schedule,
            "Professor": self.professor,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Course:
        return cls(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            image_url=row["image_url"],
            schedule=row["schedule"],
            professor=row["professor"],
            is_from_cache=bool(row["is_from_cache"]),
            last_sync_timestamp=_parse_timestamp(row["last_sync_timestamp"]),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "schedule": self.schedule,
            "professor": self.professor,
        }


@dataclass
class Student:
    """A student enrolled in exactly one course."""
    name: str
    email: str
    phone: str
    course_id: int
    id: Optional[int] = None
    is_from_cache: bool = field(default=False, compare=False)
    last_sync_timestamp: Optional[datetime] = field(default=None, compare=False)

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any], course_id: Optional[int] = None) -> Student:
        """
        Build a Student from an API payload.

        Args:
            payload: JSON object returned by the backend
            course_id: Owning course when the payload omits it (course-scoped lists)
        """
        student_id = _pick(payload, "id", "Id")
        payload_course = _pick(payload, "courseId", "CourseId", "course_id")
        owner = payload_course if payload_course is not None else course_id
        return cls(
            id=int(student_id) if student_id is not None else None,
            name=_pick(payload, "name", "Name", default=""),
            email=_pick(payload, "email", "Email", default=""),
            phone=_pick(payload, "phone", "Phone", default=""),
            course_id=int(owner) if owner is not None else None,
        )

    def to_api(self) -> Dict[str, Any]:
        payload = {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "courseId": self.course_id,
        }
        if self.id is not None:
            payload["id"] = self.id
        return payload

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Student:
        return cls(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            course_id=row["course_id"],
            is_from_cache=bool(row["is_from_cache"]),
            last_sync_timestamp=_parse_timestamp(row["last_sync_timestamp"]),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "course_id": self.course_id,
        }
