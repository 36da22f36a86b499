from __future__ import annotations

from datetime import timedelta

import pytest

from lecture_portal.core.enums import Role
from lecture_portal.core.exceptions import AuthorizationError, ValidationError


@pytest.fixture
def svc(container):
    return container.attendance_service


def test_start_session_counts_students(svc, sessions_repo, ids, fixed_now):
    session_id = svc.start_session(current_role=Role.TEACHER, current_user_id=ids.teacher, lecture_id=1, now=fixed_now)

    session = sessions_repo.get_by_id(session_id)
    assert session.is_active
    assert session.lecture_id == 1
    assert session.start_time == fixed_now
    assert session.total_students == 2
    assert session.present_count == 0


def test_one_active_session_per_lecture(svc, ids):
    svc.start_session(current_role=Role.TEACHER, current_user_id=ids.teacher, lecture_id=1)

    with pytest.raises(ValidationError, match="An active session already exists for this lecture"):
        svc.start_session(current_role=Role.TEACHER, current_user_id=ids.teacher, lecture_id=1)

    # sessions without a lecture never conflict
    svc.start_session(current_role=Role.TEACHER, current_user_id=ids.teacher)
    svc.start_session(current_role=Role.TEACHER, current_user_id=ids.teacher)


def test_start_session_validation(svc, ids):
    with pytest.raises(ValidationError, match="Lecture not found"):
        svc.start_session(current_role=Role.TEACHER, current_user_id=ids.teacher, lecture_id=42)
    with pytest.raises(AuthorizationError):
        svc.start_session(current_role=Role.STUDENT, current_user_id=ids.alice)


def test_end_session(svc, sessions_repo, ids, fixed_now):
    session_id = svc.start_session(current_role=Role.TEACHER, current_user_id=ids.teacher, lecture_id=1, now=fixed_now)
    later = fixed_now + timedelta(hours=1)

    svc.end_session(current_role=Role.TEACHER, current_user_id=ids.teacher, session_id=session_id, now=later)

    session = sessions_repo.get_by_id(session_id)
    assert not session.is_active
    assert session.end_time == later

    with pytest.raises(ValidationError, match="This attendance session is not active"):
        svc.end_session(current_role=Role.TEACHER, current_user_id=ids.teacher, session_id=session_id)

    # the lecture is free for a new session once the old one ended
    svc.start_session(current_role=Role.TEACHER, current_user_id=ids.teacher, lecture_id=1)


def test_end_session_permissions(svc, users_repo, ids):
    other = users_repo.add(email="t2@portal.local", name="Other", role=Role.TEACHER)
    session_id = svc.start_session(current_role=Role.TEACHER, current_user_id=ids.teacher)

    with pytest.raises(AuthorizationError):
        svc.end_session(current_role=Role.TEACHER, current_user_id=other.user_id, session_id=session_id)

    svc.end_session(current_role=Role.ADMIN, current_user_id=ids.admin, session_id=session_id)

    with pytest.raises(ValidationError, match="Attendance session not found"):
        svc.end_session(current_role=Role.ADMIN, current_user_id=ids.admin, session_id=999)


def test_list_sessions(svc, ids, fixed_now):
    first = svc.start_session(current_role=Role.TEACHER, current_user_id=ids.teacher, now=fixed_now)
    second = svc.start_session(
        current_role=Role.TEACHER, current_user_id=ids.teacher, lecture_id=1, now=fixed_now + timedelta(minutes=5)
    )
    svc.end_session(current_role=Role.TEACHER, current_user_id=ids.teacher, session_id=first)

    assert [s.session_id for s in svc.list_active_sessions(ids.teacher)] == [second]
    assert [s.session_id for s in svc.list_sessions(ids.teacher)] == [second, first]
    assert svc.list_sessions(ids.admin) == []
