# =============================================================================
# course_core/offline/__init__.py
# Online/Offline Sync Layer for the Student Course System
# =============================================================================
"""
Online/Offline Sync Layer

Reads go to the backend when the device has network and always answer from
the local SQLite store, so the pages keep working offline with the last
data they saw. Writes go to the backend first and are mirrored locally.

Architecture:
------------
┌─────────────────────────────────────────────────────────────────┐
│                      SYNC ARCHITECTURE                           │
├─────────────────────────────────────────────────────────────────┤
│                                                                  │
│   ┌──────────────────────────────────────────────────────────┐  │
│   │                 UnifiedDataService                        │  │
│   │      (courses / students coordinators + task runner)      │  │
│   └──────────────────────────────────────────────────────────┘  │
│                            │                                     │
│              ┌─────────────┴─────────────┐                      │
│              ▼                           ▼                      │
│   ┌──────────────────┐        ┌──────────────────┐             │
│   │  ConnectionMgr   │        │   CacheManager   │             │
│   │  (Online/Offline)│        │ (Images / HTTP)  │             │
│   └──────────────────┘        └──────────────────┘             │
│              │                                                   │
│   ┌──────────┴──────────┐                                       │
│   ▼                     ▼                                       │
│ ┌─────────┐        ┌──────────┐                                 │
│ │REST API │───────►│  SQLite  │                                 │
│ │(cached) │ mirror │ (Local)  │                                 │
│ └─────────┘        └──────────┘                                 │
└─────────────────────────────────────────────────────────────────┘

Usage:
------
from course_core.offline import get_data_service

service = get_data_service()
result = service.courses.read_all()
for course in result.items:
    print(course.name, result.origin)
"""

from course_core.offline.connection_manager import (
    ConnectionManager,
    get_connection_manager,
    ConnectionStatus,
)

from course_core.offline.local_database import (
    LocalDatabase,
    get_local_database,
)

from course_core.offline.cache_manager import (
    CacheManager,
    get_cache_manager,
)

from course_core.offline.task_runner import (
    CancelToken,
    SyncTask,
    SyncTaskRunner,
)

from course_core.offline.sync_coordinator import (
    CoordinatorSnapshot,
    CourseSyncCoordinator,
    OperationState,
    StudentSyncCoordinator,
    SyncResult,
)

from course_core.offline.unified_data_service import (
    UnifiedDataService,
    get_data_service,
)

__all__ = [
    # Connection Management
    "ConnectionManager",
    "get_connection_manager",
    "ConnectionStatus",
    # Local Database
    "LocalDatabase",
    "get_local_database",
    # Cache Management
    "CacheManager",
    "get_cache_manager",
    # Background tasks
    "CancelToken",
    "SyncTask",
    "SyncTaskRunner",
    # Coordinators
    "CoordinatorSnapshot",
    "CourseSyncCoordinator",
    "OperationState",
    "StudentSyncCoordinator",
    "SyncResult",
    # Unified Service (Main API)
    "UnifiedDataService",
    "get_data_service",
]
