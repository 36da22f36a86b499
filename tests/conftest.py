from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from types import SimpleNamespace
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from lecture_portal.attendance.model import AttendanceRecord, AttendanceSession
from lecture_portal.categories.model import Category
from lecture_portal.container import wire_container
from lecture_portal.core.enums import Role
from lecture_portal.lectures.model import Lecture
from lecture_portal.main import create_app
from lecture_portal.nfc.model import NFCTag
from lecture_portal.storage.blob_storage import LocalBlobStorage
from lecture_portal.users.model import User


class InMemoryUsers:
    def __init__(self):
        self._by_id: dict[int, User] = {}
        self._next_id = 1

    def add(self, **fields) -> User:
        user = User(user_id=self._next_id, **fields)
        self._by_id[user.user_id] = user
        self._next_id += 1
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._by_id.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.email == email), None)

    def get_by_student_number(self, student_number: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.student_number == student_number), None)

    def create_user(self, *, email, name, role, password_hash, student_number=None, major=None, study=None, group=None):
        return self.add(
            email=email,
            name=name,
            role=role,
            password_hash=password_hash,
            student_number=student_number,
            major=major,
            study=study,
            group=group,
        ).user_id

    def update_student(self, *, user_id, email, name, student_number, major, study, group):
        user = self._by_id.get(int(user_id))
        if not user:
            return False
        self._by_id[user.user_id] = replace(
            user, email=email, name=name, student_number=student_number, major=major, study=study, group=group
        )
        return True

    def delete_by_id(self, user_id: int) -> bool:
        return self._by_id.pop(int(user_id), None) is not None

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda u: u.user_id, reverse=True)

    def list_by_role(self, role: Role):
        return sorted((u for u in self._by_id.values() if u.role == role), key=lambda u: u.name)

    def count_by_role(self, role: Role) -> int:
        return len(self.list_by_role(role))


class InMemoryCategories:
    def __init__(self):
        self._items: dict[int, Category] = {}
        self._next_id = 1

    def list_all(self):
        return sorted(self._items.values(), key=lambda c: c.category_id, reverse=True)

    def get_by_id(self, category_id):
        return self._items.get(int(category_id))

    def create(self, *, name, type):
        cid = self._next_id
        self._next_id += 1
        self._items[cid] = Category(category_id=cid, name=name, type=type, created_at=datetime(2026, 3, 1, 9, 0))
        return cid

    def delete(self, *, category_id):
        return self._items.pop(int(category_id), None) is not None


class InMemoryLectures:
    def __init__(self):
        self._items: dict[int, Lecture] = {}
        self._next_id = 1
        self.fail_next_create = False

    def add(self, **fields) -> Lecture:
        fields.setdefault("upload_date", date(2026, 3, 1))
        lecture = Lecture(lecture_id=self._next_id, **fields)
        self._items[lecture.lecture_id] = lecture
        self._next_id += 1
        return lecture

    def list_all(self):
        return sorted(self._items.values(), key=lambda l: (l.upload_date, l.lecture_id), reverse=True)

    def list_by_uploader(self, uploaded_by):
        return [l for l in self.list_all() if l.uploaded_by == int(uploaded_by)]

    def get_by_id(self, lecture_id):
        return self._items.get(int(lecture_id))

    def create(self, *, title, subject, stage, pdf_url, uploaded_by, upload_date):
        if self.fail_next_create:
            self.fail_next_create = False
            raise RuntimeError("database unavailable")
        return self.add(
            title=title, subject=subject, stage=stage, pdf_url=pdf_url, uploaded_by=uploaded_by, upload_date=upload_date
        ).lecture_id

    def delete(self, *, lecture_id):
        return self._items.pop(int(lecture_id), None) is not None


class InMemoryNFCTags:
    def __init__(self):
        self._items: dict[int, NFCTag] = {}
        self._next_id = 1

    def list_all(self):
        return sorted(self._items.values(), key=lambda t: t.nfc_tag_id, reverse=True)

    def get_by_id(self, nfc_tag_id):
        return self._items.get(int(nfc_tag_id))

    def get_by_tag_id(self, tag_id):
        return next((t for t in self._items.values() if t.tag_id == tag_id), None)

    def create(self, *, tag_id, student_id):
        tid = self._next_id
        self._next_id += 1
        self._items[tid] = NFCTag(
            nfc_tag_id=tid, tag_id=tag_id, student_id=int(student_id), assigned_date=datetime(2026, 3, 1, 9, 0)
        )
        return tid

    def set_active(self, *, nfc_tag_id, is_active):
        tag = self._items.get(int(nfc_tag_id))
        if not tag:
            return False
        self._items[tag.nfc_tag_id] = replace(tag, is_active=is_active)
        return True

    def delete(self, *, nfc_tag_id):
        return self._items.pop(int(nfc_tag_id), None) is not None

    def touch_last_used(self, *, nfc_tag_id, used_at):
        tag = self._items[int(nfc_tag_id)]
        self._items[tag.nfc_tag_id] = replace(tag, last_used=used_at)


class InMemorySessions:
    def __init__(self):
        self._items: dict[int, AttendanceSession] = {}
        self._next_id = 1

    def create(self, *, lecture_id, teacher_id, start_time, total_students):
        sid = self._next_id
        self._next_id += 1
        self._items[sid] = AttendanceSession(
            session_id=sid,
            lecture_id=lecture_id,
            teacher_id=int(teacher_id),
            start_time=start_time,
            total_students=total_students,
        )
        return sid

    def get_by_id(self, session_id):
        return self._items.get(int(session_id))

    def find_active_for_lecture(self, lecture_id):
        return next((s for s in self._items.values() if s.lecture_id == lecture_id and s.is_active), None)

    def list_for_teacher(self, teacher_id, *, active_only=False):
        items = [
            s for s in self._items.values() if s.teacher_id == int(teacher_id) and (s.is_active or not active_only)
        ]
        return sorted(items, key=lambda s: (s.start_time, s.session_id), reverse=True)

    def end(self, *, session_id, end_time):
        s = self._items.get(int(session_id))
        if not s or not s.is_active:
            return False
        self._items[s.session_id] = replace(s, is_active=False, end_time=end_time)
        return True

    def adjust_present_count(self, *, session_id, delta):
        s = self._items[int(session_id)]
        self._items[s.session_id] = replace(s, present_count=max(0, s.present_count + delta))

    def count_all(self):
        return len(self._items)

    def detach_lecture(self, lecture_id):
        # what ON DELETE SET NULL does to sessions of a deleted lecture
        for s in list(self._items.values()):
            if s.lecture_id == lecture_id:
                self._items[s.session_id] = replace(s, lecture_id=None)


class InMemoryRecords:
    def __init__(self):
        self._items: dict[int, AttendanceRecord] = {}
        self._next_id = 1

    def find_for_student(self, *, student_id, lecture_id, session_id):
        ordered = sorted(self._items.values(), key=lambda r: r.record_id)
        for r in ordered:
            if r.student_id == student_id and r.session_id == session_id:
                return r
        if lecture_id is None:
            return None
        return next((r for r in ordered if r.student_id == student_id and r.lecture_id == lecture_id), None)

    def create(self, *, lecture_id, session_id, student_id, timestamp, status, recorded_by):
        rid = self._next_id
        self._next_id += 1
        self._items[rid] = AttendanceRecord(
            record_id=rid,
            lecture_id=lecture_id,
            session_id=session_id,
            student_id=student_id,
            timestamp=timestamp,
            status=status,
            recorded_by=recorded_by,
        )
        return rid

    def update(self, *, record_id, session_id, status, timestamp, recorded_by):
        r = self._items[int(record_id)]
        self._items[r.record_id] = replace(
            r, session_id=session_id, status=status, timestamp=timestamp, recorded_by=recorded_by
        )

    def list_for_session(self, session_id):
        return [r for r in self._items.values() if r.session_id == int(session_id)]

    def list_for_student(self, student_id):
        items = [r for r in self._items.values() if r.student_id == int(student_id)]
        return sorted(items, key=lambda r: (r.timestamp, r.record_id), reverse=True)

    def all(self):
        return list(self._items.values())


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 30, 0)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    repo = InMemoryUsers()
    repo.add(email="admin@portal.local", name="Admin", role=Role.ADMIN, password_hash=generate_password_hash("admin123"))
    repo.add(
        email="teacher@portal.local", name="Teacher", role=Role.TEACHER, password_hash=generate_password_hash("teacher123")
    )
    repo.add(
        email="alice@uni.edu",
        name="Alice",
        role=Role.STUDENT,
        password_hash=generate_password_hash("alice123"),
        student_number="S1001",
        major="Computer Science",
        study="Morning",
        group="A",
    )
    repo.add(email="bob@uni.edu", name="Bob", role=Role.STUDENT, student_number="S1002", major="Mathematics", group="B")
    return repo


# ids of the accounts seeded above
ADMIN_ID, TEACHER_ID, ALICE_ID, BOB_ID = 1, 2, 3, 4


@pytest.fixture
def ids() -> SimpleNamespace:
    return SimpleNamespace(admin=ADMIN_ID, teacher=TEACHER_ID, alice=ALICE_ID, bob=BOB_ID)


@pytest.fixture
def categories_repo() -> InMemoryCategories:
    return InMemoryCategories()


@pytest.fixture
def lectures_repo() -> InMemoryLectures:
    repo = InMemoryLectures()
    repo.add(
        title="Intro to Algorithms",
        subject="Computer Science",
        stage="First Stage",
        pdf_url="https://example.edu/algo.pdf",
        uploaded_by=TEACHER_ID,
    )
    return repo


@pytest.fixture
def nfc_repo() -> InMemoryNFCTags:
    return InMemoryNFCTags()


@pytest.fixture
def sessions_repo() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def records_repo() -> InMemoryRecords:
    return InMemoryRecords()


@pytest.fixture
def storage(tmp_path) -> LocalBlobStorage:
    return LocalBlobStorage(tmp_path / "uploads")


@pytest.fixture
def container(users_repo, categories_repo, lectures_repo, nfc_repo, sessions_repo, records_repo, storage):
    return wire_container(
        users_repo=users_repo,
        categories_repo=categories_repo,
        lectures_repo=lectures_repo,
        nfc_repo=nfc_repo,
        sessions_repo=sessions_repo,
        records_repo=records_repo,
        storage=storage,
    )


@pytest.fixture
def app(container):
    return create_app(container=container, settings_module="lecture_portal.config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(email: str, password: str):
        return client.post("/api/auth/login", json={"email": email, "password": password})

    return _login
