from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from werkzeug.security import generate_password_hash

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

# (name, email, password, role, student_number)
DEMO_USERS = (
    ("Portal Admin", "admin@portal.local", "admin123", "admin", None),
    ("Demo Teacher", "teacher@portal.local", "teacher123", "teacher", None),
    ("Demo Student", "student@portal.local", "student123", "student", "S0001"),
)

DEMO_CATEGORIES = (
    ("Computer Science", "subject"),
    ("Mathematics", "subject"),
    ("First Stage", "stage"),
    ("Second Stage", "stage"),
)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?m)^\s*--.*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Split on ';' outside of quoted strings and backtick identifiers.
    buf: list[str] = []
    quote: Optional[str] = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
            continue
        if ch == "\\" and quote in {"'", '"'}:
            escape = True
            continue
        if quote:
            if ch == quote:
                quote = None
            continue
        if ch in {"'", '"', "`"}:
            quote = ch
            continue
        if ch == ";":
            buf.pop()
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s", schema_path)


def _upsert_demo_user(cur, name: str, email: str, password: str, role: str, student_number: Optional[str]) -> None:
    if student_number:
        cur.execute("SELECT email FROM users WHERE student_number=%s", (student_number,))
        holder = cur.fetchone()
        if holder and holder["email"] != email:
            logger.warning(
                "Student number %s already belongs to %s; seeding %s without it", student_number, holder["email"], email
            )
            student_number = None

    password_hash = generate_password_hash(password)
    cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
    if cur.fetchone():
        cur.execute(
            "UPDATE users SET name=%s, password_hash=%s, role=%s, student_number=%s WHERE email=%s",
            (name, password_hash, role, student_number, email),
        )
    else:
        cur.execute(
            """
            INSERT INTO users (name, email, password_hash, role, student_number)
            VALUES (%s, %s, %s, %s, %s)
            """,
            (name, email, password_hash, role, student_number),
        )


def ensure_demo_users(db_config: dict) -> None:
    """Create (or reset) one account per role plus a few categories."""
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor(dictionary=True, buffered=True)

        for name, email, password, role, student_number in DEMO_USERS:
            _upsert_demo_user(cur, name, email, password, role, student_number)

        for name, category_type in DEMO_CATEGORIES:
            cur.execute("SELECT category_id FROM categories WHERE name=%s AND type=%s", (name, category_type))
            if not cur.fetchone():
                cur.execute("INSERT INTO categories (name, type) VALUES (%s, %s)", (name, category_type))

        conn.commit()
    finally:
        conn.close()
    logger.info("Demo accounts ready (%d users)", len(DEMO_USERS))


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
