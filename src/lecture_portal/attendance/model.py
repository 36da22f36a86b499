from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: a window during which attendance is taken.

    `lecture_id` is None when the teacher opened the session without choosing a lecture.
    """

    session_id: int
    lecture_id: Optional[int]
    teacher_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    is_active: bool = True
    total_students: int = 0
    present_count: int = 0


@dataclass(frozen=True)
class AttendanceRecord:
    record_id: int
    lecture_id: Optional[int]
    session_id: int
    student_id: int
    timestamp: datetime
    status: AttendanceStatus
    recorded_by: int


@dataclass(frozen=True)
class AttendanceSummary:
    student_id: int
    student_name: str
    total_sessions: int
    present_count: int
    absent_count: int
    late_count: int
    attendance_percentage: int


@dataclass(frozen=True)
class ScanResult:
    """Outcome of an NFC scan or a manual entry."""

    record_id: int
    student_id: int
    student_name: str
    status: AttendanceStatus
    duplicate: bool
    message: str


@dataclass(frozen=True)
class RosterRow:
    student_id: int
    student_name: str
    student_number: Optional[str]
    status: str


@dataclass(frozen=True)
class HistoryRow:
    record_id: int
    lecture_title: str
    lecture_details: str
    timestamp: datetime
    status: AttendanceStatus
