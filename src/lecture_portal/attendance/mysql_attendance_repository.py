from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_optional_int, db_cursor, fetchall, fetchone
from .model import AttendanceRecord, AttendanceSession
from .repository import AttendanceRecordRepository, AttendanceSessionRepository

_SESSION_COLUMNS = (
    "session_id, lecture_id, teacher_id, start_time, end_time, is_active, total_students, present_count"
)
_RECORD_COLUMNS = "record_id, lecture_id, session_id, student_id, `timestamp`, status, recorded_by"


def _row_to_session(r: Dict[str, Any]) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        lecture_id=as_optional_int(r.get("lecture_id")),
        teacher_id=int(r["teacher_id"]),
        start_time=r["start_time"],
        end_time=r.get("end_time"),
        is_active=as_bool(r["is_active"]),
        total_students=int(r.get("total_students") or 0),
        present_count=int(r.get("present_count") or 0),
    )


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        lecture_id=as_optional_int(r.get("lecture_id")),
        session_id=int(r["session_id"]),
        student_id=int(r["student_id"]),
        timestamp=r["timestamp"],
        status=AttendanceStatus(r["status"]),
        recorded_by=int(r["recorded_by"]),
    )


class MySQLAttendanceSessionRepository(AttendanceSessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        lecture_id: Optional[int],
        teacher_id: int,
        start_time: datetime,
        total_students: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(lecture_id, teacher_id, start_time, is_active, total_students, present_count)
                VALUES(%s,%s,%s,1,%s,0)
                """,
                (lecture_id, int(teacher_id), start_time, int(total_students)),
            )
            return int(cur.lastrowid)

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def find_active_for_lecture(self, lecture_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM attendance_sessions
                WHERE lecture_id=%s AND is_active=1
                LIMIT 1
                """,
                (int(lecture_id),),
            )
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def list_for_teacher(self, teacher_id: int, *, active_only: bool = False) -> Sequence[AttendanceSession]:
        sql = f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE teacher_id=%s"
        if active_only:
            sql += " AND is_active=1"
        sql += " ORDER BY start_time DESC, session_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (int(teacher_id),))
            return [_row_to_session(r) for r in fetchall(cur)]

    def end(self, *, session_id: int, end_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_sessions SET is_active=0, end_time=%s WHERE session_id=%s AND is_active=1",
                (end_time, int(session_id)),
            )
            return cur.rowcount > 0

    def adjust_present_count(self, *, session_id: int, delta: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_sessions SET present_count=GREATEST(0, present_count + %s) WHERE session_id=%s",
                (int(delta), int(session_id)),
            )

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_sessions")
            r = fetchone(cur)
            return int(r["n"]) if r else 0


class MySQLAttendanceRecordRepository(AttendanceRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_for_student(
        self,
        *,
        student_id: int,
        lecture_id: Optional[int],
        session_id: int,
    ) -> Optional[AttendanceRecord]:
        sql = f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE {{}} AND student_id=%s ORDER BY record_id LIMIT 1"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql.format("session_id=%s"), (int(session_id), int(student_id)))
            r = fetchone(cur)
            if not r and lecture_id is not None:
                cur.execute(sql.format("lecture_id=%s"), (int(lecture_id), int(student_id)))
                r = fetchone(cur)
            return _row_to_record(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(lecture_id, session_id, student_id, `timestamp`, status, recorded_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (lecture_id, int(session_id), int(student_id), timestamp, status.value, int(recorded_by)),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        record_id: int,
        session_id: int,
        status: AttendanceStatus,
        timestamp: datetime,
        recorded_by: int,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET session_id=%s, status=%s, `timestamp`=%s, recorded_by=%s
                WHERE record_id=%s
                """,
                (int(session_id), status.value, timestamp, int(recorded_by), int(record_id)),
            )

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE session_id=%s ORDER BY `timestamp`",
                (int(session_id),),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s
                ORDER BY `timestamp` DESC, record_id DESC
                """,
                (int(student_id),),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
