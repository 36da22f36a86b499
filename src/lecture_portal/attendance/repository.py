from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceSession


class AttendanceSessionRepository(Protocol):
    def create(
        self,
        *,
        lecture_id: Optional[int],
        teacher_id: int,
        start_time: datetime,
        total_students: int,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def find_active_for_lecture(self, lecture_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int, *, active_only: bool = False) -> Sequence[AttendanceSession]:
        """Newest first."""

        raise NotImplementedError

    def end(self, *, session_id: int, end_time: datetime) -> bool:
        """Close an active session; False when it was not active."""

        raise NotImplementedError

    def adjust_present_count(self, *, session_id: int, delta: int) -> None:
        """Atomically add `delta` to present_count, never going below zero."""

        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError


class AttendanceRecordRepository(Protocol):
    def find_for_student(
        self,
        *,
        student_id: int,
        lecture_id: Optional[int],
        session_id: int,
    ) -> Optional[AttendanceRecord]:
        """The student's record in this session, else one carried over for the same lecture.

        Records keep their lecture id when the lecture is deleted and the session's
        lecture id is nulled, so the session is checked first.
        """

        raise NotImplementedError

    def create(
        self,
        *,
        lecture_id: Optional[int],
        session_id: int,
        student_id: int,
        timestamp: datetime,
        status: AttendanceStatus,
        recorded_by: int,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        record_id: int,
        session_id: int,
        status: AttendanceStatus,
        timestamp: datetime,
        recorded_by: int,
    ) -> None:
        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError
