from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import NOT_RECORDED, UNKNOWN_LECTURE
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..lectures.repository import LectureRepository
from ..nfc.service import NFCTagService
from ..users.model import User
from ..users.repository import UserRepository
from .model import AttendanceRecord, AttendanceSession, AttendanceSummary, HistoryRow, RosterRow, ScanResult
from .repository import AttendanceRecordRepository, AttendanceSessionRepository

logger = logging.getLogger(__name__)


def attendance_percentage(present: int, total_sessions: int) -> int:
    """Present share of all sessions, rounded half up; 0 when nothing was held."""
    if total_sessions <= 0:
        return 0
    return int(math.floor(present * 100 / total_sessions + 0.5))


class AttendanceService:
    def __init__(
        self,
        sessions: AttendanceSessionRepository,
        records: AttendanceRecordRepository,
        users: UserRepository,
        lectures: LectureRepository,
        nfc: NFCTagService,
    ):
        self._sessions = sessions
        self._records = records
        self._users = users
        self._lectures = lectures
        self._nfc = nfc

    # ---- sessions ----

    def start_session(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        lecture_id: Optional[int] = None,
        now: datetime | None = None,
    ) -> int:
        if current_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can start attendance sessions")

        if lecture_id is not None:
            if not self._lectures.get_by_id(int(lecture_id)):
                raise ValidationError("Lecture not found")
            if self._sessions.find_active_for_lecture(int(lecture_id)):
                raise ValidationError("An active session already exists for this lecture")

        session_id = self._sessions.create(
            lecture_id=int(lecture_id) if lecture_id is not None else None,
            teacher_id=int(current_user_id),
            start_time=now or now_local(),
            total_students=self._users.count_by_role(Role.STUDENT),
        )
        logger.info("Attendance session %s started by %s (lecture=%s)", session_id, current_user_id, lecture_id)
        return session_id

    def _get_session(self, session_id: int) -> AttendanceSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise ValidationError("Attendance session not found")
        return session

    @staticmethod
    def _require_access(session: AttendanceSession, current_role: Role, current_user_id: int) -> None:
        if current_role == Role.ADMIN:
            return
        if current_role == Role.TEACHER and session.teacher_id == int(current_user_id):
            return
        raise AuthorizationError("You do not have permission for this attendance session")

    def _get_active_session(self, session_id: int, current_role: Role, current_user_id: int) -> AttendanceSession:
        session = self._get_session(session_id)
        self._require_access(session, current_role, current_user_id)
        if not session.is_active:
            raise ValidationError("This attendance session is not active")
        return session

    def end_session(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        session_id: int,
        now: datetime | None = None,
    ) -> None:
        session = self._get_active_session(session_id, current_role, current_user_id)
        if not self._sessions.end(session_id=session.session_id, end_time=now or now_local()):
            raise ValidationError("This attendance session is not active")
        logger.info("Attendance session %s ended by %s", session.session_id, current_user_id)

    def list_active_sessions(self, teacher_id: int) -> Sequence[AttendanceSession]:
        return self._sessions.list_for_teacher(int(teacher_id), active_only=True)

    def list_sessions(self, teacher_id: int) -> Sequence[AttendanceSession]:
        return self._sessions.list_for_teacher(int(teacher_id))

    # ---- records ----

    def _write_status(
        self,
        session: AttendanceSession,
        student_id: int,
        status: AttendanceStatus,
        recorded_by: int,
        now: datetime,
    ) -> int:
        existing = self._records.find_for_student(
            student_id=student_id,
            lecture_id=session.lecture_id,
            session_id=session.session_id,
        )
        # a record carried over from an earlier session of the same lecture does not count here
        was_present = (
            existing is not None
            and existing.session_id == session.session_id
            and existing.status == AttendanceStatus.PRESENT
        )

        if existing:
            self._records.update(
                record_id=existing.record_id,
                session_id=session.session_id,
                status=status,
                timestamp=now,
                recorded_by=recorded_by,
            )
            record_id = existing.record_id
        else:
            record_id = self._records.create(
                lecture_id=session.lecture_id,
                session_id=session.session_id,
                student_id=student_id,
                timestamp=now,
                status=status,
                recorded_by=recorded_by,
            )

        is_present = status == AttendanceStatus.PRESENT
        if is_present and not was_present:
            self._sessions.adjust_present_count(session_id=session.session_id, delta=1)
        elif was_present and not is_present:
            self._sessions.adjust_present_count(session_id=session.session_id, delta=-1)
        return record_id

    def _present_record(self, session: AttendanceSession, student_id: int) -> Optional[AttendanceRecord]:
        existing = self._records.find_for_student(
            student_id=student_id,
            lecture_id=session.lecture_id,
            session_id=session.session_id,
        )
        if existing and existing.session_id == session.session_id and existing.status == AttendanceStatus.PRESENT:
            return existing
        return None

    def _require_student(self, student_id: int) -> User:
        student = self._users.get_by_id(int(student_id))
        if not student or not student.is_student:
            raise ValidationError("Student not found")
        return student

    def mark_attendance(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        session_id: int,
        student_id: int,
        status: str,
        now: datetime | None = None,
    ) -> ScanResult:
        session = self._get_active_session(session_id, current_role, current_user_id)
        try:
            new_status = AttendanceStatus(status)
        except ValueError:
            raise ValidationError("Status must be present, absent or late")

        student = self._require_student(student_id)
        record_id = self._write_status(session, student.user_id, new_status, int(current_user_id), now or now_local())
        logger.info("Session %s: student %s marked %s", session.session_id, student.user_id, new_status.value)
        return ScanResult(
            record_id=record_id,
            student_id=student.user_id,
            student_name=student.name,
            status=new_status,
            duplicate=False,
            message=f"{student.name} marked {new_status.value}",
        )

    def record_scan(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        session_id: int,
        serial: str,
        now: datetime | None = None,
    ) -> ScanResult:
        session = self._get_active_session(session_id, current_role, current_user_id)
        tag, student = self._nfc.resolve(serial)
        now = now or now_local()
        self._nfc.mark_used(tag)

        existing = self._present_record(session, student.user_id)
        if existing:
            logger.info("Session %s: repeat scan for student %s ignored", session.session_id, student.user_id)
            return ScanResult(
                record_id=existing.record_id,
                student_id=student.user_id,
                student_name=student.name,
                status=AttendanceStatus.PRESENT,
                duplicate=True,
                message=f"{student.name} already marked present",
            )

        record_id = self._write_status(session, student.user_id, AttendanceStatus.PRESENT, int(current_user_id), now)
        logger.info("Session %s: tag %s scanned for student %s", session.session_id, tag.tag_id, student.user_id)
        return ScanResult(
            record_id=record_id,
            student_id=student.user_id,
            student_name=student.name,
            status=AttendanceStatus.PRESENT,
            duplicate=False,
            message=f"{student.name} marked present",
        )

    def _find_by_ref(self, student_ref: str) -> User:
        ref = (student_ref or "").strip()
        if not ref:
            raise ValidationError("Please enter a student ID")

        student = self._users.get_by_student_number(ref)
        if not student and ref.isdigit():
            student = self._users.get_by_id(int(ref))
        if not student or not student.is_student:
            raise ValidationError("Student not found")
        return student

    def manual_entry(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        session_id: int,
        student_ref: str,
        now: datetime | None = None,
    ) -> ScanResult:
        session = self._get_active_session(session_id, current_role, current_user_id)
        student = self._find_by_ref(student_ref)

        if self._present_record(session, student.user_id):
            raise ValidationError(f"{student.name} already marked present")

        record_id = self._write_status(
            session, student.user_id, AttendanceStatus.PRESENT, int(current_user_id), now or now_local()
        )
        logger.info("Session %s: manual entry for student %s", session.session_id, student.user_id)
        return ScanResult(
            record_id=record_id,
            student_id=student.user_id,
            student_name=student.name,
            status=AttendanceStatus.PRESENT,
            duplicate=False,
            message=f"{student.name} marked present",
        )

    def release_student(self, student_id: int) -> None:
        """Take a student's present marks out of the session counts before the account is deleted.

        Deleting the user cascades to its attendance records.
        """
        for r in self._records.list_for_student(int(student_id)):
            if r.status == AttendanceStatus.PRESENT:
                self._sessions.adjust_present_count(session_id=r.session_id, delta=-1)

    # ---- read models ----

    def session_roster(self, *, current_role: Role, current_user_id: int, session_id: int) -> Sequence[RosterRow]:
        session = self._get_session(session_id)
        self._require_access(session, current_role, current_user_id)

        statuses = {r.student_id: r.status.value for r in self._records.list_for_session(session.session_id)}
        return [
            RosterRow(
                student_id=s.user_id,
                student_name=s.name,
                student_number=s.student_number,
                status=statuses.get(s.user_id, NOT_RECORDED),
            )
            for s in self._users.list_by_role(Role.STUDENT)
        ]

    def student_history(self, student_id: int) -> Sequence[HistoryRow]:
        lectures = {}
        rows = []
        for r in self._records.list_for_student(int(student_id)):
            lecture = None
            if r.lecture_id is not None:
                if r.lecture_id not in lectures:
                    lectures[r.lecture_id] = self._lectures.get_by_id(r.lecture_id)
                lecture = lectures[r.lecture_id]
            rows.append(
                HistoryRow(
                    record_id=r.record_id,
                    lecture_title=lecture.title if lecture else UNKNOWN_LECTURE,
                    lecture_details=lecture.details if lecture else "",
                    timestamp=r.timestamp,
                    status=r.status,
                )
            )
        return rows

    def student_summary(self, student: User) -> AttendanceSummary:
        records = self._records.list_for_student(student.user_id)
        counts = {s: 0 for s in AttendanceStatus}
        for r in records:
            counts[r.status] += 1

        total_sessions = self._sessions.count_all()
        return AttendanceSummary(
            student_id=student.user_id,
            student_name=student.name,
            total_sessions=total_sessions,
            present_count=counts[AttendanceStatus.PRESENT],
            absent_count=counts[AttendanceStatus.ABSENT],
            late_count=counts[AttendanceStatus.LATE],
            attendance_percentage=attendance_percentage(counts[AttendanceStatus.PRESENT], total_sessions),
        )
