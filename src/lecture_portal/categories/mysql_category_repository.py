from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import CategoryType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Category
from .repository import CategoryRepository


class MySQLCategoryRepository(CategoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Category]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT category_id, name, type, created_at
                FROM categories
                ORDER BY created_at DESC, category_id DESC
                """
            )
            return [
                Category(
                    category_id=int(r["category_id"]),
                    name=r["name"],
                    type=CategoryType(r["type"]),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]

    def get_by_id(self, category_id: int) -> Optional[Category]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT category_id, name, type, created_at FROM categories WHERE category_id=%s",
                (int(category_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Category(
                category_id=int(r["category_id"]),
                name=r["name"],
                type=CategoryType(r["type"]),
                created_at=r.get("created_at"),
            )

    def create(self, *, name: str, type: CategoryType) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO categories(name, type) VALUES(%s,%s)", (name, type.value))
            return int(cur.lastrowid)

    def delete(self, *, category_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM categories WHERE category_id=%s", (int(category_id),))
            return cur.rowcount > 0
