from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for access control."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class CategoryType(str, Enum):
    """Kind of lecture category: the subject taught or the study stage (year)."""

    SUBJECT = "subject"
    STAGE = "stage"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
