from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Lecture:
    """Domain entity: uploaded lecture material."""

    lecture_id: int
    title: str
    subject: str
    stage: str
    pdf_url: str
    uploaded_by: int
    upload_date: date

    @property
    def details(self) -> str:
        return f"{self.subject} - {self.stage}"
