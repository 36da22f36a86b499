from __future__ import annotations

import io
from datetime import date

import pytest

from lecture_portal.core.enums import Role
from lecture_portal.core.exceptions import AuthorizationError, ValidationError
from lecture_portal.lectures.service import LectureService

PDF_BYTES = b"%PDF-1.7\n%%EOF\n"


@pytest.fixture
def svc(lectures_repo, storage):
    return LectureService(lectures_repo, storage)


def test_upload_with_url(svc, lectures_repo, ids):
    lecture_id = svc.upload(
        current_role=Role.TEACHER,
        current_user_id=ids.teacher,
        title=" Graphs ",
        subject="Mathematics",
        stage="Second Stage",
        pdf_url="https://example.edu/graphs.pdf",
    )

    lecture = lectures_repo.get_by_id(lecture_id)
    assert lecture.title == "Graphs"
    assert lecture.uploaded_by == ids.teacher
    assert isinstance(lecture.upload_date, date)


def test_upload_with_file_stores_blob(svc, lectures_repo, storage, ids):
    lecture_id = svc.upload(
        current_role=Role.TEACHER,
        current_user_id=ids.teacher,
        title="Graphs",
        subject="Mathematics",
        stage="Second Stage",
        pdf_stream=io.BytesIO(PDF_BYTES),
        pdf_filename="graphs.pdf",
    )

    name = storage.name_from_url(lectures_repo.get_by_id(lecture_id).pdf_url)
    assert storage.path_for(name).read_bytes() == PDF_BYTES


def test_upload_requires_pdf_source_and_fields(svc, ids):
    with pytest.raises(ValidationError, match="PDF file or a PDF URL"):
        svc.upload(current_role=Role.TEACHER, current_user_id=ids.teacher, title="T", subject="S", stage="St")
    with pytest.raises(ValidationError, match="Title is required"):
        svc.upload(
            current_role=Role.TEACHER,
            current_user_id=ids.teacher,
            title="",
            subject="S",
            stage="St",
            pdf_url="https://example.edu/x.pdf",
        )
    with pytest.raises(ValidationError, match="http"):
        svc.upload(
            current_role=Role.TEACHER,
            current_user_id=ids.teacher,
            title="T",
            subject="S",
            stage="St",
            pdf_url="javascript:alert(1)",
        )


def test_only_teachers_upload(svc, ids):
    with pytest.raises(AuthorizationError):
        svc.upload(
            current_role=Role.ADMIN,
            current_user_id=ids.admin,
            title="T",
            subject="S",
            stage="St",
            pdf_url="https://example.edu/x.pdf",
        )


def test_failed_insert_removes_stored_blob(svc, lectures_repo, storage, ids):
    lectures_repo.fail_next_create = True

    with pytest.raises(RuntimeError):
        svc.upload(
            current_role=Role.TEACHER,
            current_user_id=ids.teacher,
            title="T",
            subject="S",
            stage="St",
            pdf_stream=io.BytesIO(PDF_BYTES),
            pdf_filename="x.pdf",
        )

    assert list(storage.root.iterdir()) == []


def test_delete_permissions(svc, lectures_repo, users_repo, ids):
    other_teacher = users_repo.add(email="t2@portal.local", name="Other", role=Role.TEACHER)

    with pytest.raises(AuthorizationError, match="do not have permission to delete this lecture"):
        svc.delete(current_role=Role.TEACHER, current_user_id=other_teacher.user_id, lecture_id=1)

    svc.delete(current_role=Role.TEACHER, current_user_id=ids.teacher, lecture_id=1)
    assert lectures_repo.get_by_id(1) is None

    with pytest.raises(ValidationError, match="Lecture not found"):
        svc.delete(current_role=Role.ADMIN, current_user_id=ids.admin, lecture_id=1)


def test_admin_delete_removes_owned_blob(svc, storage, ids):
    lecture_id = svc.upload(
        current_role=Role.TEACHER,
        current_user_id=ids.teacher,
        title="Graphs",
        subject="Mathematics",
        stage="Second Stage",
        pdf_stream=io.BytesIO(PDF_BYTES),
        pdf_filename="graphs.pdf",
    )

    svc.delete(current_role=Role.ADMIN, current_user_id=ids.admin, lecture_id=lecture_id)
    assert list(storage.root.iterdir()) == []


def test_list_for_teacher_and_search(svc, lectures_repo, ids):
    lectures_repo.add(title="Other", subject="Art", stage="First Stage", pdf_url="https://x/y.pdf", uploaded_by=99)

    assert [l.title for l in svc.list_for_teacher(ids.teacher)] == ["Intro to Algorithms"]
    assert [l.title for l in svc.search(search="algo", subject="computer science")] == ["Intro to Algorithms"]
    assert len(svc.list_all()) == 2
