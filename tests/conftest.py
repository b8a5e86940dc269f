# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import json

import pytest
import requests
from unittest.mock import MagicMock, patch


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def sample_courses():
    """Two server-side courses (ids assigned)"""
    from course_core.models import Course

    return [
        Course(
            id=1,
            name="Mobile Development",
            description="Native Android apps with Kotlin",
            schedule="Mon 18:00",
            professor="Ada Lovelace",
            image_url="mobile.jpg",
        ),
        Course(
            id=2,
            name="Distributed Systems",
            description="Consensus, replication and clocks",
            schedule="Wed 10:00",
            professor="Leslie Lamport",
        ),
    ]


@pytest.fixture
def sample_students():
    """Students of the sample courses"""
    from course_core.models import Student

    return [
        Student(id=10, name="Ana Mora", email="ana@example.com", phone="88887777", course_id=1),
        Student(id=11, name="Luis Rojas", email="luis@example.com", phone="88886666", course_id=1),
        Student(id=12, name="Carla Vega", email="carla@example.com", phone="88885555", course_id=2),
    ]


# =============================================================================
# INFRASTRUCTURE FIXTURES
# =============================================================================

@pytest.fixture
def local_db(tmp_path):
    """Fresh SQLite store per test"""
    from course_core.offline.local_database import LocalDatabase

    db = LocalDatabase(tmp_path / "test_courses.db").initialize()
    yield db
    db.close()


@pytest.fixture
def seeded_db(local_db, sample_courses, sample_students):
    """Store already holding the sample courses and students"""
    local_db.upsert_many(local_db.COURSES, [c.to_row() for c in sample_courses])
    local_db.upsert_many(local_db.STUDENTS, [s.to_row() for s in sample_students])
    return local_db


@pytest.fixture
def cache_manager(tmp_path):
    from course_core.offline.cache_manager import CacheManager

    return CacheManager(tmp_path / "cache")


class Network:
    """Connectivity probe the tests can flip"""

    def __init__(self, online=True):
        self.online = online
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.online


@pytest.fixture
def network():
    return Network(online=True)


@pytest.fixture
def course_connector():
    """Course connector double; every call answers from the network by default"""
    from course_core.api.course_connector import CourseAPIConnector

    return MagicMock(spec=CourseAPIConnector)


@pytest.fixture
def student_connector():
    from course_core.api.student_connector import StudentAPIConnector

    return MagicMock(spec=StudentAPIConnector)


@pytest.fixture
def course_coordinator(local_db, course_connector, network, cache_manager):
    from course_core.offline.sync_coordinator import CourseSyncCoordinator

    return CourseSyncCoordinator(local_db, course_connector, network, cache_manager=cache_manager)


@pytest.fixture
def student_coordinator(local_db, student_connector, network):
    from course_core.offline.sync_coordinator import StudentSyncCoordinator

    return StudentSyncCoordinator(local_db, student_connector, network)


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_streamlit():
    """Mock Streamlit inside the page-facing error handlers"""
    mock_st = MagicMock()
    mock_st.session_state = {}

    with patch("course_core.errors.handlers.st", mock_st):
        yield mock_st


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def api_response(data, origin=None, status_code=200):
    """Wrap data the way a connector returns it"""
    from course_core.api.base_connector import APIResponse
    from course_core.api.origin import DataSource

    return APIResponse(data=data, origin=origin or DataSource.NETWORK, status_code=status_code)


def http_response(payload=None, status_code=200, from_cache=None, url="http://backend.test/api/course"):
    """Build a real requests.Response carrying a JSON body"""
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(payload).encode("utf-8") if payload is not None else b""
    response.url = url
    response.headers["Content-Type"] = "application/json"
    if from_cache is not None:
        response.from_cache = from_cache
    return response
