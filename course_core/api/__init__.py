"""
API Integration Module for the Student Course System
Provides connectors for the course and student REST resources
"""

from .origin import DataSource, origin_of
from .base_connector import BaseAPIConnector, APIConfig, APIResponse, create_session
from .course_connector import CourseAPIConnector
from .student_connector import StudentAPIConnector

__all__ = [
    # Provenance
    "DataSource",
    "origin_of",
    # Base classes
    "BaseAPIConnector",
    "APIConfig",
    "APIResponse",
    "create_session",
    # Resource connectors
    "CourseAPIConnector",
    "StudentAPIConnector",
]
