from __future__ import annotations

import logging
from typing import BinaryIO, Optional, Sequence
from urllib.parse import urlparse

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..storage.blob_storage import BlobStorage
from .filters import filter_lectures
from .model import Lecture
from .repository import LectureRepository

logger = logging.getLogger(__name__)


class LectureService:
    def __init__(self, lectures: LectureRepository, storage: BlobStorage):
        self._lectures = lectures
        self._storage = storage

    @staticmethod
    def _check_url(value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValidationError("PDF URL must be an http(s) link")
        return value

    def list_all(self) -> Sequence[Lecture]:
        return self._lectures.list_all()

    def list_for_teacher(self, teacher_id: int) -> Sequence[Lecture]:
        return self._lectures.list_by_uploader(int(teacher_id))

    def search(self, *, search: str = "", subject: str = "all", stage: str = "all") -> Sequence[Lecture]:
        return filter_lectures(self.list_all(), search=search, subject=subject, stage=stage)

    def upload(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        title: str,
        subject: str,
        stage: str,
        pdf_url: str = "",
        pdf_stream: Optional[BinaryIO] = None,
        pdf_filename: str = "",
    ) -> int:
        if current_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can upload lectures")

        title = require_non_empty(title, "Title")
        subject = require_non_empty(subject, "Subject")
        stage = require_non_empty(stage, "Stage")

        pdf_url = (pdf_url or "").strip()
        blob = None
        if pdf_stream is not None and pdf_filename:
            blob = self._storage.save_pdf(pdf_stream, pdf_filename)
            pdf_url = blob.url
        elif pdf_url:
            pdf_url = self._check_url(pdf_url)
        else:
            raise ValidationError("Please provide a PDF file or a PDF URL")

        try:
            lecture_id = self._lectures.create(
                title=title,
                subject=subject,
                stage=stage,
                pdf_url=pdf_url,
                uploaded_by=int(current_user_id),
                upload_date=now_local().date(),
            )
        except Exception:
            if blob:
                self._storage.delete(blob.name)
            raise

        logger.info("Lecture %s uploaded by %s", lecture_id, current_user_id)
        return lecture_id

    def delete(self, *, current_role: Role, current_user_id: int, lecture_id: int) -> None:
        lecture = self._lectures.get_by_id(int(lecture_id))
        if not lecture:
            raise ValidationError("Lecture not found")

        if current_role != Role.ADMIN and int(current_user_id) != lecture.uploaded_by:
            raise AuthorizationError("You do not have permission to delete this lecture")

        if not self._lectures.delete(lecture_id=lecture.lecture_id):
            raise ValidationError("Failed to delete lecture")

        blob_name = self._storage.name_from_url(lecture.pdf_url)
        if blob_name:
            self._storage.delete(blob_name)
        logger.info("Lecture %s deleted by %s", lecture.lecture_id, current_user_id)
