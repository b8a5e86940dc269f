# =============================================================================
# course_core/offline/unified_data_service.py
# Unified Data Service - Single API for Online/Offline Operations
# =============================================================================
"""
UnifiedDataService - The primary API the pages talk to.

It wires one LocalDatabase, one CacheManager, one HTTP session (shared by
both connectors, so they share the response cache), the connectivity probe
and the two sync coordinators, plus a SyncTaskRunner for running
coordinator calls off the UI thread.

Usage:
------
from course_core.offline import get_data_service

service = get_data_service()
result = service.courses.read_all()
print(result.origin)        # DataSource.NETWORK / CACHE / LOCAL / ERROR

task = service.submit(service.students.read_by_parent, course_id)
"""

from __future__ import annotations
import threading
from typing import Any, Callable, Dict, Optional
import logging

from course_core.api.config_manager import APIConfigManager
from course_core.offline.cache_manager import CacheManager, get_cache_manager
from course_core.offline.connection_manager import ConnectionManager, get_connection_manager
from course_core.offline.local_database import LocalDatabase, get_local_database
from course_core.offline.sync_coordinator import (
    Connectivity,
    CourseSyncCoordinator,
    StudentSyncCoordinator,
)
from course_core.offline.task_runner import SyncTask, SyncTaskRunner

logger = logging.getLogger(__name__)


class UnifiedDataService:
    """
    Composition root for the sync layer.

    Every collaborator can be injected; anything left out is created lazily
    from the process-wide singletons.
    """

    _instance: Optional[UnifiedDataService] = None
    _lock = threading.Lock()

    def __init__(
        self,
        local_db: Optional[LocalDatabase] = None,
        cache_manager: Optional[CacheManager] = None,
        config_manager: Optional[APIConfigManager] = None,
        connectivity: Optional[Connectivity] = None,
        max_workers: int = 4,
    ):
        self._local_db = local_db
        self._cache_manager = cache_manager
        self._config_manager = config_manager
        self._connectivity = connectivity
        self._connection_manager: Optional[ConnectionManager] = None
        self._last_online: Optional[bool] = None
        self._cache_swept = False
        self._courses: Optional[CourseSyncCoordinator] = None
        self._students: Optional[StudentSyncCoordinator] = None
        self._runner = SyncTaskRunner(max_workers=max_workers)

    @classmethod
    def get_instance(cls) -> UnifiedDataService:
        """Get or create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = UnifiedDataService()
        return cls._instance

    # =========================================================================
    # LAZY LOADING OF DEPENDENCIES
    # =========================================================================

    @property
    def local_db(self) -> LocalDatabase:
        if self._local_db is None:
            self._local_db = get_local_database()
        return self._local_db.initialize()

    @property
    def cache_manager(self) -> CacheManager:
        if self._cache_manager is None:
            self._cache_manager = get_cache_manager()
        if not self._cache_swept:
            self._cache_swept = True
            removed = self._cache_manager.cleanup_expired()
            if removed:
                logger.info(f"Removed {removed} staged image(s) left by interrupted uploads")
        return self._cache_manager

    @property
    def config_manager(self) -> APIConfigManager:
        if self._config_manager is None:
            self._config_manager = APIConfigManager(cache_path=self.cache_manager.http_cache_path)
        return self._config_manager

    @property
    def connection_manager(self) -> ConnectionManager:
        if self._connection_manager is None:
            self._connection_manager = get_connection_manager(self.config_manager.config.base_url)
        return self._connection_manager

    @property
    def connectivity(self) -> Connectivity:
        if self._connectivity is None:
            self._connectivity = self.connection_manager.has_network
        return self._check_connectivity

    def _check_connectivity(self) -> bool:
        self._last_online = bool(self._connectivity())
        return self._last_online

    @property
    def courses(self) -> CourseSyncCoordinator:
        if self._courses is None:
            self._courses = CourseSyncCoordinator(
                self.local_db,
                self.config_manager.get_course_connector(),
                self.connectivity,
                cache_manager=self.cache_manager,
            )
        return self._courses

    @property
    def students(self) -> StudentSyncCoordinator:
        if self._students is None:
            self._students = StudentSyncCoordinator(
                self.local_db,
                self.config_manager.get_student_connector(),
                self.connectivity,
            )
            self.courses.on_course_deleted(self._students.forget_course)
        return self._students

    @property
    def images_base_url(self) -> str:
        return self.config_manager.config.images_base_url

    @property
    def last_known_online(self) -> Optional[bool]:
        """Result of the latest connectivity check made by an operation (None before any)."""
        return self._last_online

    # =========================================================================
    # BACKGROUND EXECUTION
    # =========================================================================

    def submit(self, operation: Callable[..., Any], *args, **kwargs) -> SyncTask:
        """Run a coordinator operation on the task runner (it receives cancel_token)."""
        return self._runner.submit(operation, *args, **kwargs)

    def cancel_pending(self) -> int:
        """Cancel in-flight work, e.g. when the user leaves a page."""
        return self._runner.cancel_all()

    def get_status(self) -> Dict[str, Any]:
        """Status summary for the sidebar. Never probes the network itself."""
        return {
            "online": self._last_online,
            "courses_cached": self.local_db.count(LocalDatabase.COURSES),
            "students_cached": self.local_db.count(LocalDatabase.STUDENTS),
            "pending_tasks": len(self._runner.pending),
            "cache": self.cache_manager.get_cache_stats(),
        }

    def shutdown(self) -> None:
        self._runner.shutdown(wait=False)
        logger.info("Data service shut down")


def get_data_service() -> UnifiedDataService:
    """Get the global UnifiedDataService instance."""
    return UnifiedDataService.get_instance()
