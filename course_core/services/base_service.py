# =============================================================================
# course_core/services/base_service.py
# Result type and base class for the sync coordinators
# =============================================================================

from __future__ import annotations
from abc import ABC
from typing import Optional, Dict, Any
from dataclasses import dataclass

from course_core.logging import get_logger, LogContext
from course_core.errors import StudentCourseError


@dataclass
class ServiceResult:
    """
    Outcome of a create, update or delete.

    `data` is the stored entity (or the deleted id). `metadata` marks the
    two successful-but-partial cases: {"skipped": ...} when the entity had
    no id, {"local_only": True} for an offline delete.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def __bool__(self) -> bool:
        return self.success

    @property
    def skipped(self) -> bool:
        return bool((self.metadata or {}).get("skipped"))

    @property
    def local_only(self) -> bool:
        return bool((self.metadata or {}).get("local_only"))

    @classmethod
    def ok(cls, data: Any = None, metadata: Dict[str, Any] = None) -> ServiceResult:
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(
        cls,
        error: str,
        error_code: str = "UNKNOWN",
        metadata: Dict[str, Any] = None
    ) -> ServiceResult:
        return cls(success=False, error=error, error_code=error_code, metadata=metadata)

    @classmethod
    def from_exception(cls, e: Exception) -> ServiceResult:
        """Failed result carrying the code and details of a StudentCourseError."""
        if isinstance(e, StudentCourseError):
            return cls.fail(e.message, error_code=e.code, metadata=e.details)
        return cls.fail(str(e) or e.__class__.__name__, error_code="EXCEPTION")


class BaseService(ABC):
    """Per-class logger plus timed operation logging."""

    def __init__(self):
        self.logger = get_logger(f"course_core.{self.__class__.__name__}")

    def log_operation(self, operation: str) -> LogContext:
        """
        Usage:
            with self.log_operation("read courses") as log:
                log.note(rows=3)
        """
        return LogContext(self.logger, operation)
