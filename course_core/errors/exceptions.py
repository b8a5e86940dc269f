# =============================================================================
# course_core/errors/exceptions.py
# Custom Exception Hierarchy for the Student Course System
# =============================================================================

from typing import Optional, Dict, Any


class StudentCourseError(Exception):
    """
    Base exception for all Student Course System errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "API_001")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "SC_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# NETWORK EXCEPTIONS
# =============================================================================

class ConnectivityError(StudentCourseError):
    """Raised when a write is attempted without network connectivity"""

    def __init__(
        self,
        message: str = "No internet connection",
        operation: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            code="NET_001",
            details=details,
            **kwargs,
        )


class RemoteCallError(StudentCourseError):
    """Raised when the REST backend answers non-2xx or the transport fails"""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if endpoint:
            details["endpoint"] = endpoint
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(
            message=message,
            code="API_001",
            details=details,
            **kwargs,
        )
        self.endpoint = endpoint
        self.status_code = status_code


# =============================================================================
# LOCAL EXCEPTIONS
# =============================================================================

class LocalResourceError(StudentCourseError):
    """Raised when a local resource (e.g. a picked image) cannot be materialized"""

    def __init__(
        self,
        message: str = "Error processing image file",
        resource: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource

        super().__init__(
            message=message,
            code="LOCAL_001",
            details=details,
            **kwargs,
        )


class InvalidIdentifierError(StudentCourseError):
    """Raised when an operation needs an entity id that is missing"""

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if entity:
            details["entity"] = entity

        super().__init__(
            message=message,
            code="ID_001",
            details=details,
            **kwargs,
        )


class DataValidationError(StudentCourseError):
    """Raised when form input fails validation checks"""

    def __init__(
        self,
        message: str,
        errors: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors

        super().__init__(
            message=message,
            code="DATA_001",
            details=details,
            **kwargs,
        )
        self.errors = errors or {}


class OperationCancelled(StudentCourseError):
    """Raised inside an operation whose task was cancelled"""

    def __init__(self, message: str = "Operation cancelled", **kwargs):
        super().__init__(message=message, code="TASK_001", **kwargs)


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(StudentCourseError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
