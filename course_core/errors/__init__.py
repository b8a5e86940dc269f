# =============================================================================
# course_core/errors/__init__.py
# Centralized Error Handling for the Student Course System
# =============================================================================

from .exceptions import (
    StudentCourseError,
    ConnectivityError,
    RemoteCallError,
    LocalResourceError,
    InvalidIdentifierError,
    DataValidationError,
    OperationCancelled,
    ConfigurationError,
)

__all__ = [
    "StudentCourseError",
    "ConnectivityError",
    "RemoteCallError",
    "LocalResourceError",
    "InvalidIdentifierError",
    "DataValidationError",
    "OperationCancelled",
    "ConfigurationError",
]
