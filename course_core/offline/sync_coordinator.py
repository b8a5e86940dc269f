# =============================================================================
# course_core/offline/sync_coordinator.py
# Read-through / write-through coordination between backend and local store
# =============================================================================
"""
Sync coordinators - one per entity type.

Reads prefer the network and always answer from the local store:

    online  -> remote list -> replace store slice -> origin from transport
    offline -> origin LOCAL
    both    -> read store -> expose as in-memory list -> return

Writes go to the network first and are mirrored into the local store only
after the backend accepted them. Creates and updates are refused while
offline; deletes fall back to a local-only delete so the UI stays
responsive until the next online read reconciles.

Every operation passes through IDLE -> IN_FLIGHT -> {SUCCESS, FAILED} and
always ends back in IDLE; observers see `is_loading` flip on and off.
"""

from __future__ import annotations
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from course_core.api.base_connector import APIResponse
from course_core.api.course_connector import CourseAPIConnector
from course_core.api.origin import DataSource
from course_core.api.student_connector import StudentAPIConnector
from course_core.errors import (
    ConnectivityError,
    InvalidIdentifierError,
    OperationCancelled,
    RemoteCallError,
)
from course_core.models import Course, Student
from course_core.offline.cache_manager import CacheManager, ImageSource
from course_core.offline.local_database import LocalDatabase
from course_core.offline.task_runner import CancelToken
from course_core.services.base_service import BaseService, ServiceResult

Connectivity = Callable[[], bool]
SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[str], None]


class OperationState(Enum):
    """Lifecycle of a single coordinator call."""
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class SyncResult:
    """
    Outcome of a read.

    `items` always comes from the local store, never straight from the
    backend response.
    """
    items: List[Any]
    origin: DataSource
    error: Optional[str] = None
    parent_name: Optional[str] = None
    cancelled: bool = False

    @property
    def first(self) -> Optional[Any]:
        return self.items[0] if self.items else None


@dataclass(frozen=True)
class CoordinatorSnapshot:
    """What observers receive on every state change."""
    items: Tuple[Any, ...]
    is_loading: bool
    data_source: Optional[DataSource]
    last_outcome: Optional[OperationState]
    extra: Dict[str, Any] = field(default_factory=dict)


class _Outcome:
    succeeded = False
    log = None


class EntitySyncCoordinator(BaseService):
    """
    Shared read-through / write-through machinery.

    Subclasses set `table`, `entity_cls` and `label`, and supply the
    remote calls.
    """

    table: str = ""
    entity_cls: type = object
    label: str = "entity"

    def __init__(
        self,
        local_db: LocalDatabase,
        connector: Any,
        connectivity: Connectivity,
    ):
        super().__init__()
        self.local_db = local_db
        self.connector = connector
        self._connectivity = connectivity

        self._items: List[Any] = []
        self._state = OperationState.IDLE
        self._last_outcome: Optional[OperationState] = None
        self._data_source: Optional[DataSource] = None
        self._callbacks: List[Callable[[CoordinatorSnapshot], None]] = []
        self._lock = threading.RLock()

    # =========================================================================
    # OBSERVABLE STATE
    # =========================================================================

    @property
    def items(self) -> List[Any]:
        """Current in-memory list exposed to the UI (a copy)."""
        with self._lock:
            return list(self._items)

    @property
    def state(self) -> OperationState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state == OperationState.IN_FLIGHT

    @property
    def last_outcome(self) -> Optional[OperationState]:
        return self._last_outcome

    @property
    def data_source(self) -> Optional[DataSource]:
        """Origin of the most recent read by this coordinator."""
        return self._data_source

    def clear_data_source(self) -> None:
        """Reset the origin once the UI has shown it."""
        self._data_source = None
        self._notify_callbacks()

    def register_callback(self, callback: Callable[[CoordinatorSnapshot], None]) -> None:
        """Register a callback for state changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[CoordinatorSnapshot], None]) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def snapshot(self) -> CoordinatorSnapshot:
        return CoordinatorSnapshot(
            items=tuple(self.items),
            is_loading=self.is_loading,
            data_source=self._data_source,
            last_outcome=self._last_outcome,
            extra=self._snapshot_extra(),
        )

    def _snapshot_extra(self) -> Dict[str, Any]:
        return {}

    def _notify_callbacks(self) -> None:
        """Notify all registered callbacks."""
        snapshot = self.snapshot()
        for callback in list(self._callbacks):
            try:
                callback(snapshot)
            except Exception as e:
                self.logger.error(f"Error in {self.label} callback: {e}")

    @contextmanager
    def _in_flight(self, operation: str):
        """IDLE -> IN_FLIGHT, then back to IDLE recording SUCCESS or FAILED."""
        outcome = _Outcome()
        self._state = OperationState.IN_FLIGHT
        self._notify_callbacks()
        try:
            with self.log_operation(operation) as log:
                outcome.log = log
                yield outcome
        finally:
            self._last_outcome = OperationState.SUCCESS if outcome.succeeded else OperationState.FAILED
            self._state = OperationState.IDLE
            self._notify_callbacks()

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _is_online(self) -> bool:
        try:
            return bool(self._connectivity())
        except Exception as e:
            self.logger.warning(f"Connectivity check failed, treating as offline: {e}")
            return False

    @staticmethod
    def _checkpoint(cancel_token: Optional[CancelToken]) -> None:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

    def _invoke(self, callback: Optional[Callable[[Any], None]], value: Any) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception as e:
            self.logger.error(f"Error in {self.label} result callback: {e}")

    def _set_items(self, items: List[Any]) -> None:
        with self._lock:
            self._items = list(items)

    def _merge_item(self, entity: Any) -> None:
        """Replace the in-memory entry with the same id, or append."""
        with self._lock:
            for index, current in enumerate(self._items):
                if current.id == entity.id:
                    self._items[index] = entity
                    return
            self._items.append(entity)

    def _remove_item(self, entity_id: int) -> None:
        with self._lock:
            self._items = [item for item in self._items if item.id != entity_id]

    def _load(self, entity_id: int) -> Optional[Any]:
        row = self.local_db.get_by_id(self.table, entity_id)
        return self.entity_cls.from_row(row) if row else None

    def _storable(self, entity: Any) -> bool:
        """Whether an entity can be written without breaking store invariants."""
        return True

    def _persist(self, entity: Any, origin: DataSource) -> Any:
        """
        Mirror a server-returned entity into the store and read it back.

        Returns:
            The stored entity, or the server entity when it cannot be stored
        """
        if entity.id is None:
            raise RemoteCallError(f"Server returned a {self.label} without an id")

        if not self._storable(entity):
            self.logger.warning(f"{self.label} {entity.id} not cached: owner missing from local store")
            return entity

        self.local_db.upsert_many(self.table, [entity.to_row()], from_cache=origin == DataSource.CACHE)
        return self._load(entity.id) or entity

    # =========================================================================
    # READ-THROUGH / WRITE-THROUGH
    # =========================================================================

    def _read_through(
        self,
        operation: str,
        fetch: Callable[[], APIResponse],
        write_local: Callable[[APIResponse], None],
        read_local: Callable[[], List[Any]],
        apply: Callable[[List[Any]], None],
        cancel_token: Optional[CancelToken] = None,
    ) -> SyncResult:
        with self._in_flight(operation) as outcome:
            try:
                self._checkpoint(cancel_token)
                origin = DataSource.LOCAL
                error = None

                if self._is_online():
                    try:
                        response = fetch()
                        self._checkpoint(cancel_token)
                        # Last checkpoint: once the store is written the read completes
                        write_local(response)
                        origin = response.origin
                    except OperationCancelled:
                        raise
                    except Exception as e:
                        # Last-known-good: the store keeps its previous contents
                        self.logger.error(f"Error {operation}: {e}")
                        origin, error = DataSource.ERROR, str(e)

                try:
                    items = read_local()
                except Exception as e:
                    self.logger.error(f"Local store read failed while {operation}: {e}")
                    self._data_source = DataSource.ERROR
                    return SyncResult(items=self.items, origin=DataSource.ERROR, error=error or str(e))
            except OperationCancelled:
                self.logger.info(f"{operation} cancelled")
                return SyncResult(items=self.items, origin=self._data_source or DataSource.LOCAL, cancelled=True)

            apply(items)
            self._data_source = origin
            outcome.succeeded = error is None
            outcome.log.note(rows=len(items), origin=origin.value)
            return SyncResult(items=items, origin=origin, error=error)

    def _write_through(
        self,
        operation: str,
        remote_call: Callable[[], APIResponse],
        apply_local: Callable[[APIResponse], Any],
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        cancel_token: Optional[CancelToken] = None,
        prepare: Optional[Callable[[], None]] = None,
        cleanup: Optional[Callable[[], None]] = None,
    ) -> ServiceResult:
        """
        Online-only write: connectivity, optional local preparation, remote
        call, then local mirror. Nothing local changes unless the backend
        accepted the write.
        """
        with self._in_flight(operation) as outcome:
            try:
                self._checkpoint(cancel_token)
                if not self._is_online():
                    raise ConnectivityError(operation=operation)
                if prepare is not None:
                    prepare()
                response = remote_call()
                self._checkpoint(cancel_token)
                entity = apply_local(response)
            except OperationCancelled as e:
                self.logger.info(f"{operation} cancelled")
                return ServiceResult.from_exception(e)
            except Exception as e:
                self.logger.error(f"Error {operation}: {e}")
                result = ServiceResult.from_exception(e)
                self._invoke(on_error, result.error)
                return result
            finally:
                if cleanup is not None:
                    cleanup()

            outcome.succeeded = True
            outcome.log.note(id=entity.id)
            self._invoke(on_success, entity)
            return ServiceResult.ok(entity)

    def _apply_write(self, response: APIResponse) -> Any:
        entity = self._persist(response.data, response.origin)
        self._after_write(entity)
        return entity

    def _after_write(self, entity: Any) -> None:
        self._merge_item(entity)

    def _delete(
        self,
        entity_id: Optional[int],
        remote_delete: Callable[[int], APIResponse],
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> ServiceResult:
        if entity_id is None:
            return self._skip_missing_id("delete")

        with self._in_flight(f"Deleting {self.label} {entity_id}") as outcome:
            try:
                self._checkpoint(cancel_token)
                local_only = not self._is_online()
                if not local_only:
                    remote_delete(entity_id)
                    self._checkpoint(cancel_token)
                self.local_db.delete_by_id(self.table, entity_id)
                self._remove_item(entity_id)
            except OperationCancelled as e:
                self.logger.info(f"Deleting {self.label} {entity_id} cancelled")
                return ServiceResult.from_exception(e)
            except Exception as e:
                self.logger.error(f"Error deleting {self.label} {entity_id}: {e}")
                result = ServiceResult.from_exception(e)
                self._invoke(on_error, result.error)
                return result

            outcome.succeeded = True
            outcome.log.note(id=entity_id, local_only=local_only)
            self._invoke(on_success, entity_id)
            return ServiceResult.ok(entity_id, metadata={"local_only": local_only})

    def _skip_missing_id(self, operation: str) -> ServiceResult:
        error = InvalidIdentifierError(f"Cannot {operation} {self.label}: ID is null", entity=self.label)
        self.logger.error(str(error))
        return ServiceResult.ok(None, metadata={"skipped": "missing id"})


class CourseSyncCoordinator(EntitySyncCoordinator):
    """
    Courses: list, single, create (multipart with image), update, delete.

    Deleting a course from the local store cascades to its students.
    """

    table = LocalDatabase.COURSES
    entity_cls = Course
    label = "course"

    def __init__(
        self,
        local_db: LocalDatabase,
        connector: CourseAPIConnector,
        connectivity: Connectivity,
        cache_manager: Optional[CacheManager] = None,
    ):
        super().__init__(local_db, connector, connectivity)
        self.cache_manager = cache_manager or CacheManager()
        self._delete_listeners: List[Callable[[int], None]] = []

    def on_course_deleted(self, listener: Callable[[int], None]) -> None:
        """Call `listener(course_id)` after a course is deleted from the store."""
        if listener not in self._delete_listeners:
            self._delete_listeners.append(listener)

    def _read_local(self) -> List[Course]:
        return [Course.from_row(row) for row in self.local_db.get_all(self.table)]

    def _replace_local(self, response: APIResponse) -> None:
        rows = [course.to_row() for course in response.data if course.id is not None]
        self.local_db.replace_all(self.table, rows, from_cache=response.origin == DataSource.CACHE)

    def read_all(self, cancel_token: Optional[CancelToken] = None) -> SyncResult:
        """Fetch all courses (network first, local store always answers)."""
        return self._read_through(
            "fetching courses",
            fetch=self.connector.list_courses,
            write_local=self._replace_local,
            read_local=self._read_local,
            apply=self._set_items,
            cancel_token=cancel_token,
        )

    def read_one(self, course_id: int, cancel_token: Optional[CancelToken] = None) -> SyncResult:
        """
        Fetch one course.

        The backend has no single-course endpoint, so the list is refreshed
        and the course is read back from the store.
        """
        listing = self.read_all(cancel_token=cancel_token)
        course = self._load(course_id)
        return SyncResult(
            items=[course] if course else [],
            origin=listing.origin,
            error=listing.error,
            cancelled=listing.cancelled,
        )

    def create(
        self,
        name: str,
        description: str,
        schedule: str,
        professor: str,
        image: Optional[ImageSource] = None,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> ServiceResult:
        """Create a course on the backend, then cache the server's copy."""
        course = Course(name=name, description=description, schedule=schedule, professor=professor)
        staged: Dict[str, Optional[Path]] = {"path": None}

        def stage():
            if image is not None:
                staged["path"] = self.cache_manager.stage_image(image)

        return self._write_through(
            "adding course",
            remote_call=lambda: self.connector.create_course(course, staged["path"]),
            apply_local=self._apply_write,
            on_success=on_success,
            on_error=on_error,
            cancel_token=cancel_token,
            prepare=stage,
            cleanup=lambda: self.cache_manager.release(staged["path"]),
        )

    def update(
        self,
        course: Course,
        image: Optional[ImageSource] = None,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> ServiceResult:
        """Update a course; multipart when a new image is supplied, JSON otherwise."""
        if course.id is None:
            return self._skip_missing_id("update")

        staged: Dict[str, Optional[Path]] = {"path": None}

        def stage():
            if image is not None:
                staged["path"] = self.cache_manager.stage_image(image)

        return self._write_through(
            "updating course",
            remote_call=lambda: self.connector.update_course(course, staged["path"]),
            apply_local=self._apply_write,
            on_success=on_success,
            on_error=on_error,
            cancel_token=cancel_token,
            prepare=stage,
            cleanup=lambda: self.cache_manager.release(staged["path"]),
        )

    def delete(
        self,
        course_id: Optional[int],
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> ServiceResult:
        """Delete a course (its cached students go with it)."""
        result = self._delete(
            course_id,
            remote_delete=self.connector.delete_course,
            on_success=on_success,
            on_error=on_error,
            cancel_token=cancel_token,
        )
        if result.success and not result.skipped:
            for listener in list(self._delete_listeners):
                self._invoke(listener, course_id)
        return result


class StudentSyncCoordinator(EntitySyncCoordinator):
    """
    Students: all, per course, single (with course name), create, update, delete.

    The in-memory list is whatever was last read: all students, or the
    students of `parent_id`.
    """

    table = LocalDatabase.STUDENTS
    entity_cls = Student
    label = "student"

    def __init__(
        self,
        local_db: LocalDatabase,
        connector: StudentAPIConnector,
        connectivity: Connectivity,
    ):
        super().__init__(local_db, connector, connectivity)
        self._parent_id: Optional[int] = None
        self._selected: Optional[Student] = None
        self._parent_name: Optional[str] = None

    @property
    def parent_id(self) -> Optional[int]:
        """Course the in-memory list is scoped to (None for all students)."""
        return self._parent_id

    @property
    def selected(self) -> Optional[Student]:
        return self._selected

    @property
    def parent_name(self) -> Optional[str]:
        """Name of the selected student's course, as cached."""
        return self._parent_name

    def _snapshot_extra(self) -> Dict[str, Any]:
        return {
            "parent_id": self._parent_id,
            "selected": self._selected,
            "parent_name": self._parent_name,
        }

    def forget_course(self, course_id: int) -> None:
        """Drop in-memory students of a course whose rows the store cascaded away."""
        with self._lock:
            self._items = [s for s in self._items if s.course_id != course_id]
            if self._selected is not None and self._selected.course_id == course_id:
                self._selected = None
                self._parent_name = None
        self._notify_callbacks()

    def _storable(self, student: Student) -> bool:
        return (
            student.course_id is not None
            and self.local_db.get_by_id(LocalDatabase.COURSES, student.course_id) is not None
        )

    def _storable_rows(self, students: List[Student]) -> List[Dict[str, Any]]:
        rows = [s.to_row() for s in students if s.id is not None and self._storable(s)]
        skipped = len(students) - len(rows)
        if skipped:
            self.logger.warning(f"Skipped {skipped} student(s) whose course is not cached")
        return rows

    def _apply_scoped(self, parent_id: Optional[int]) -> Callable[[List[Student]], None]:
        def apply(items: List[Student]) -> None:
            self._parent_id = parent_id
            self._set_items(items)
        return apply

    def read_all(self, cancel_token: Optional[CancelToken] = None) -> SyncResult:
        """Fetch every student."""
        def write_local(response: APIResponse) -> None:
            self.local_db.replace_all(
                self.table,
                self._storable_rows(response.data),
                from_cache=response.origin == DataSource.CACHE,
            )

        return self._read_through(
            "fetching students",
            fetch=self.connector.list_students,
            write_local=write_local,
            read_local=lambda: [Student.from_row(r) for r in self.local_db.get_all(self.table)],
            apply=self._apply_scoped(None),
            cancel_token=cancel_token,
        )

    def read_by_parent(self, course_id: int, cancel_token: Optional[CancelToken] = None) -> SyncResult:
        """Fetch the students of one course."""
        def write_local(response: APIResponse) -> None:
            self.local_db.replace_by_foreign_key(
                self.table,
                course_id,
                self._storable_rows(response.data),
                from_cache=response.origin == DataSource.CACHE,
            )

        return self._read_through(
            f"fetching students for course {course_id}",
            fetch=lambda: self.connector.list_students_by_course(course_id),
            write_local=write_local,
            read_local=lambda: [
                Student.from_row(r) for r in self.local_db.get_by_foreign_key(self.table, course_id)
            ],
            apply=self._apply_scoped(course_id),
            cancel_token=cancel_token,
        )

    def read_one(self, student_id: int, cancel_token: Optional[CancelToken] = None) -> SyncResult:
        """Fetch one student plus the cached name of their course."""
        def write_local(response: APIResponse) -> None:
            self._persist(response.data, response.origin)

        def read_local() -> List[Student]:
            student = self._load(student_id)
            return [student] if student else []

        def apply(items: List[Student]) -> None:
            self._selected = items[0] if items else None
            self._parent_name = self._course_name(self._selected)

        result = self._read_through(
            f"fetching student {student_id}",
            fetch=lambda: self.connector.get_student(student_id),
            write_local=write_local,
            read_local=read_local,
            apply=apply,
            cancel_token=cancel_token,
        )
        if not result.cancelled:
            result.parent_name = self._parent_name
        return result

    def _course_name(self, student: Optional[Student]) -> str:
        if student is None:
            return ""
        row = self.local_db.get_by_id(LocalDatabase.COURSES, student.course_id)
        return row["name"] if row else ""

    def _after_write(self, student: Student) -> None:
        if self._parent_id is None or self._parent_id == student.course_id:
            self._merge_item(student)
        else:
            # Moved to another course than the one on screen
            self._remove_item(student.id)
        if self._selected is not None and self._selected.id == student.id:
            self._selected = student
            self._parent_name = self._course_name(student)

    def create(
        self,
        name: str,
        email: str,
        phone: str,
        course_id: int,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> ServiceResult:
        """Create a student on the backend (id assigned by the server)."""
        student = Student(name=name, email=email, phone=phone, course_id=course_id)
        return self._write_through(
            "adding student",
            remote_call=lambda: self.connector.create_student(student),
            apply_local=self._apply_write,
            on_success=on_success,
            on_error=on_error,
            cancel_token=cancel_token,
        )

    def update(
        self,
        student: Student,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> ServiceResult:
        """Update a student; the server's copy overwrites the cached one."""
        if student.id is None:
            return self._skip_missing_id("update")

        return self._write_through(
            "updating student",
            remote_call=lambda: self.connector.update_student(student),
            apply_local=self._apply_write,
            on_success=on_success,
            on_error=on_error,
            cancel_token=cancel_token,
        )

    def delete(
        self,
        student_id: Optional[int],
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> ServiceResult:
        """Delete a student (local-only when offline)."""
        result = self._delete(
            student_id,
            remote_delete=self.connector.delete_student,
            on_success=on_success,
            on_error=on_error,
            cancel_token=cancel_token,
        )
        if result.success and self._selected is not None and self._selected.id == student_id:
            self._selected = None
        return result
