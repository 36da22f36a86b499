from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Lecture
from .repository import LectureRepository


def _row_to_lecture(r: Dict[str, Any]) -> Lecture:
    return Lecture(
        lecture_id=int(r["lecture_id"]),
        title=r["title"],
        subject=r["subject"],
        stage=r["stage"],
        pdf_url=r["pdf_url"],
        uploaded_by=int(r["uploaded_by"]),
        upload_date=r["upload_date"],
    )


class MySQLLectureRepository(LectureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Lecture]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT lecture_id, title, subject, stage, pdf_url, uploaded_by, upload_date
                FROM lectures
                ORDER BY upload_date DESC, lecture_id DESC
                """
            )
            return [_row_to_lecture(r) for r in fetchall(cur)]

    def list_by_uploader(self, uploaded_by: int) -> Sequence[Lecture]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT lecture_id, title, subject, stage, pdf_url, uploaded_by, upload_date
                FROM lectures
                WHERE uploaded_by=%s
                ORDER BY upload_date DESC, lecture_id DESC
                """,
                (int(uploaded_by),),
            )
            return [_row_to_lecture(r) for r in fetchall(cur)]

    def get_by_id(self, lecture_id: int) -> Optional[Lecture]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT lecture_id, title, subject, stage, pdf_url, uploaded_by, upload_date
                FROM lectures
                WHERE lecture_id=%s
                """,
                (int(lecture_id),),
            )
            r = fetchone(cur)
            return _row_to_lecture(r) if r else None

    def create(
        self,
        *,
        title: str,
        subject: str,
        stage: str,
        pdf_url: str,
        uploaded_by: int,
        upload_date: date,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO lectures(title, subject, stage, pdf_url, uploaded_by, upload_date)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (title, subject, stage, pdf_url, int(uploaded_by), upload_date),
            )
            return int(cur.lastrowid)

    def delete(self, *, lecture_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM lectures WHERE lecture_id=%s", (int(lecture_id),))
            return cur.rowcount > 0
