from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Lecture


class LectureRepository(Protocol):
    def list_all(self) -> Sequence[Lecture]:
        """Newest upload first."""

        raise NotImplementedError

    def list_by_uploader(self, uploaded_by: int) -> Sequence[Lecture]:
        raise NotImplementedError

    def get_by_id(self, lecture_id: int) -> Optional[Lecture]:
        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        subject: str,
        stage: str,
        pdf_url: str,
        uploaded_by: int,
        upload_date: date,
    ) -> int:
        raise NotImplementedError

    def delete(self, *, lecture_id: int) -> bool:
        raise NotImplementedError
