from __future__ import annotations

import pytest

from lecture_portal.attendance.service import attendance_percentage
from lecture_portal.core.enums import Role


@pytest.mark.parametrize(
    "present,total,expected",
    [
        (0, 0, 0),
        (3, 0, 0),
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),
        (1, 200, 1),
        (4, 4, 100),
    ],
)
def test_attendance_percentage_rounds_half_up(present, total, expected):
    assert attendance_percentage(present, total) == expected


def test_student_summary_counts_all_sessions(container, users_repo, ids):
    svc = container.attendance_service
    sessions = [svc.start_session(current_role=Role.TEACHER, current_user_id=ids.teacher) for _ in range(3)]

    statuses = ["present", "late", "present"]
    for sid, status in zip(sessions, statuses):
        svc.mark_attendance(
            current_role=Role.TEACHER, current_user_id=ids.teacher, session_id=sid, student_id=ids.alice, status=status
        )

    summary = svc.student_summary(users_repo.get_by_id(ids.alice))
    assert summary.student_name == "Alice"
    assert summary.total_sessions == 3
    assert (summary.present_count, summary.absent_count, summary.late_count) == (2, 0, 1)
    assert summary.attendance_percentage == 67

    bob = svc.student_summary(users_repo.get_by_id(ids.bob))
    assert bob.attendance_percentage == 0
