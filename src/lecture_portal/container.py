from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRecordRepository, MySQLAttendanceSessionRepository
from .attendance.repository import AttendanceRecordRepository, AttendanceSessionRepository
from .attendance.service import AttendanceService
from .categories.mysql_category_repository import MySQLCategoryRepository
from .categories.repository import CategoryRepository
from .categories.service import CategoryService
from .database.connection import DBConfig, DatabaseConnection
from .lectures.mysql_lecture_repository import MySQLLectureRepository
from .lectures.repository import LectureRepository
from .lectures.service import LectureService
from .nfc.mysql_nfc_repository import MySQLNFCTagRepository
from .nfc.repository import NFCTagRepository
from .nfc.service import NFCTagService
from .storage.blob_storage import BlobStorage, LocalBlobStorage
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, StudentService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    categories_repo: CategoryRepository
    lectures_repo: LectureRepository
    nfc_repo: NFCTagRepository
    sessions_repo: AttendanceSessionRepository
    records_repo: AttendanceRecordRepository
    storage: BlobStorage

    auth_service: AuthService
    user_service: UserService
    student_service: StudentService
    category_service: CategoryService
    lecture_service: LectureService
    nfc_service: NFCTagService
    attendance_service: AttendanceService


def wire_container(
    *,
    users_repo: UserRepository,
    categories_repo: CategoryRepository,
    lectures_repo: LectureRepository,
    nfc_repo: NFCTagRepository,
    sessions_repo: AttendanceSessionRepository,
    records_repo: AttendanceRecordRepository,
    storage: BlobStorage,
) -> Container:
    """Build services on top of the given repositories (MySQL in the app, fakes in tests)."""
    nfc_service = NFCTagService(nfc_repo, users_repo)
    attendance_service = AttendanceService(sessions_repo, records_repo, users_repo, lectures_repo, nfc_service)

    return Container(
        users_repo=users_repo,
        categories_repo=categories_repo,
        lectures_repo=lectures_repo,
        nfc_repo=nfc_repo,
        sessions_repo=sessions_repo,
        records_repo=records_repo,
        storage=storage,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, on_student_removed=attendance_service.release_student),
        student_service=StudentService(users_repo, on_student_removed=attendance_service.release_student),
        category_service=CategoryService(categories_repo),
        lecture_service=LectureService(lectures_repo, storage),
        nfc_service=nfc_service,
        attendance_service=attendance_service,
    )


def build_container(*, db_config: dict, upload_folder: str) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire_container(
        users_repo=MySQLUserRepository(conn),
        categories_repo=MySQLCategoryRepository(conn),
        lectures_repo=MySQLLectureRepository(conn),
        nfc_repo=MySQLNFCTagRepository(conn),
        sessions_repo=MySQLAttendanceSessionRepository(conn),
        records_repo=MySQLAttendanceRecordRepository(conn),
        storage=LocalBlobStorage(upload_folder),
    )
