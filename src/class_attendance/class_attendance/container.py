from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.service import AttendanceService
from .attendance.store_attendance_repository import StoreAttendanceRepository
from .catalog.store_catalog_repository import StoreCatalogRepository
from .database.connection import DatabaseConnection, config_from_dict
from .database.memory_store import InMemoryDocumentStore
from .database.mysql_store import MySQLDocumentStore
from .database.store import DocumentStore
from .schedules.conflicts import ConflictDetector
from .schedules.service import ScheduleService
from .schedules.store_slot_repository import StoreRecurringSlotRepository
from .sessions.materializer import SessionMaterializer
from .sessions.service import SessionService
from .sessions.store_session_repository import StoreSessionRepository
from .users.store_user_repository import StoreUserRepository


@dataclass(frozen=True)
class Container:
    store: DocumentStore

    users_repo: StoreUserRepository
    catalog_repo: StoreCatalogRepository
    slots_repo: StoreRecurringSlotRepository
    sessions_repo: StoreSessionRepository
    attendance_repo: StoreAttendanceRepository

    conflict_detector: ConflictDetector
    materializer: SessionMaterializer
    schedule_service: ScheduleService
    session_service: SessionService
    attendance_service: AttendanceService


def build_store(*, backend: str, db_config: Optional[dict] = None) -> DocumentStore:
    if backend == "memory":
        return InMemoryDocumentStore()
    if backend == "mysql":
        return MySQLDocumentStore(DatabaseConnection(config_from_dict(db_config or {})))
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def build_container(*, store: DocumentStore) -> Container:
    users_repo = StoreUserRepository(store)
    catalog_repo = StoreCatalogRepository(store)
    slots_repo = StoreRecurringSlotRepository(store)
    sessions_repo = StoreSessionRepository(store)
    attendance_repo = StoreAttendanceRepository(store)

    conflict_detector = ConflictDetector(slots_repo)
    materializer = SessionMaterializer(slots_repo, sessions_repo)
    schedule_service = ScheduleService(slots_repo, conflict_detector, sessions_repo)
    session_service = SessionService(
        sessions_repo,
        slots_repo,
        materializer,
        conflict_detector,
        users=users_repo,
        catalog=catalog_repo,
    )
    attendance_service = AttendanceService(attendance_repo, session_service, users_repo, sessions_repo)

    return Container(
        store=store,
        users_repo=users_repo,
        catalog_repo=catalog_repo,
        slots_repo=slots_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        conflict_detector=conflict_detector,
        materializer=materializer,
        schedule_service=schedule_service,
        session_service=session_service,
        attendance_service=attendance_service,
    )
