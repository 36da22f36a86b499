from __future__ import annotations

from lecture_portal.database.bootstrap import (
    SCHEMA_PATH,
    _iter_sql_statements,
    _strip_create_db_and_use,
    _upsert_demo_user,
)


def test_split_ignores_semicolons_in_quotes():
    sql = "INSERT INTO t VALUES ('a;b'); SELECT `odd;name` FROM t;\n  SELECT 1"
    assert list(_iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        "SELECT `odd;name` FROM t",
        "SELECT 1",
    ]


def test_strip_database_statements_and_comments():
    sql = "CREATE DATABASE foo;\nUSE foo;\n-- note; with semicolon\nCREATE TABLE x (id INT);"
    assert list(_iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE x (id INT)"]


def test_bundled_schema_creates_every_table():
    statements = list(_iter_sql_statements(_strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8"))))
    created = [s.split()[5] for s in statements if s.upper().startswith("CREATE TABLE IF NOT EXISTS")]
    assert created == [
        "users",
        "categories",
        "lectures",
        "nfc_tags",
        "attendance_sessions",
        "attendance_records",
    ]


class ScriptedCursor:
    """Answers each SELECT with the next queued row and records every statement."""

    def __init__(self, rows):
        self._rows = list(rows)
        self.executed = []

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self._rows.pop(0)


def test_demo_student_skips_student_number_held_by_someone_else():
    cur = ScriptedCursor([{"email": "real.student@uni.edu"}, None])

    _upsert_demo_user(cur, "Demo Student", "student@portal.local", "student123", "student", "S0001")

    sql, params = cur.executed[-1]
    assert sql.startswith("INSERT INTO users")
    assert params[1] == "student@portal.local"
    assert params[4] is None


def test_demo_student_keeps_own_student_number():
    cur = ScriptedCursor([{"email": "student@portal.local"}, {"user_id": 3}])

    _upsert_demo_user(cur, "Demo Student", "student@portal.local", "student123", "student", "S0001")

    sql, params = cur.executed[-1]
    assert sql.startswith("UPDATE users")
    assert params[3] == "S0001"
