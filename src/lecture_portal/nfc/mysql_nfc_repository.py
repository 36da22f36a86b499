from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import NFCTag
from .repository import NFCTagRepository

_COLUMNS = "nfc_tag_id, tag_id, student_id, is_active, assigned_date, last_used"


def _row_to_tag(r: Dict[str, Any]) -> NFCTag:
    return NFCTag(
        nfc_tag_id=int(r["nfc_tag_id"]),
        tag_id=r["tag_id"],
        student_id=int(r["student_id"]),
        is_active=as_bool(r["is_active"]),
        assigned_date=r.get("assigned_date"),
        last_used=r.get("last_used"),
    )


class MySQLNFCTagRepository(NFCTagRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[NFCTag]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM nfc_tags ORDER BY assigned_date DESC, nfc_tag_id DESC")
            return [_row_to_tag(r) for r in fetchall(cur)]

    def get_by_id(self, nfc_tag_id: int) -> Optional[NFCTag]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM nfc_tags WHERE nfc_tag_id=%s", (int(nfc_tag_id),))
            r = fetchone(cur)
            return _row_to_tag(r) if r else None

    def get_by_tag_id(self, tag_id: str) -> Optional[NFCTag]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM nfc_tags WHERE tag_id=%s", (tag_id,))
            r = fetchone(cur)
            return _row_to_tag(r) if r else None

    def create(self, *, tag_id: str, student_id: int) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO nfc_tags(tag_id, student_id, is_active) VALUES(%s,%s,1)",
                    (tag_id, int(student_id)),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            raise ValidationError("This NFC tag ID is already registered") from e

    def set_active(self, *, nfc_tag_id: int, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE nfc_tags SET is_active=%s WHERE nfc_tag_id=%s",
                (1 if is_active else 0, int(nfc_tag_id)),
            )
            return cur.rowcount > 0

    def delete(self, *, nfc_tag_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM nfc_tags WHERE nfc_tag_id=%s", (int(nfc_tag_id),))
            return cur.rowcount > 0

    def touch_last_used(self, *, nfc_tag_id: int, used_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE nfc_tags SET last_used=%s WHERE nfc_tag_id=%s", (used_at, int(nfc_tag_id)))
