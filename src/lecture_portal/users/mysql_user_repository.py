from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, email, name, role, password_hash, created_at,
    student_number, major, study, group_name
"""


def _row_to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        name=row["name"],
        role=Role(row["role"]),
        password_hash=row.get("password_hash"),
        created_at=row.get("created_at"),
        student_number=row.get("student_number"),
        major=row.get("major"),
        study=row.get("study"),
        group=row.get("group_name"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value: Any) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where}=%s", (value,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one("user_id", int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_one("email", email)

    def get_by_student_number(self, student_number: str) -> Optional[User]:
        return self._get_one("student_number", student_number)

    def create_user(
        self,
        *,
        email: str,
        name: str,
        role: Role,
        password_hash: Optional[str],
        student_number: Optional[str] = None,
        major: Optional[str] = None,
        study: Optional[str] = None,
        group: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(email, name, role, password_hash, student_number, major, study, group_name)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (email, name, role.value, password_hash, student_number, major, study, group),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            # Unique keys back up the service-level duplicate checks.
            raise ValidationError("Email or student ID is already registered") from e

    def update_student(
        self,
        *,
        user_id: int,
        email: str,
        name: str,
        student_number: str,
        major: Optional[str],
        study: Optional[str],
        group: Optional[str],
    ) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE users
                    SET email=%s, name=%s, student_number=%s, major=%s, study=%s, group_name=%s
                    WHERE user_id=%s AND role='student'
                    """,
                    (email, name, student_number, major, study, group, int(user_id)),
                )
                return cur.rowcount > 0
        except mysql.connector.IntegrityError as e:
            raise ValidationError("Email or student ID is already registered") from e

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY created_at DESC, user_id DESC")
            return [_row_to_user(r) for r in fetchall(cur)]

    def list_by_role(self, role: Role) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE role=%s ORDER BY name", (role.value,))
            return [_row_to_user(r) for r in fetchall(cur)]

    def count_by_role(self, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users WHERE role=%s", (role.value,))
            row = fetchone(cur)
            return int(row["n"]) if row else 0
