from __future__ import annotations

from typing import Iterable, List, Optional

from ..core.constants import FILTER_ALL
from .model import Lecture


def _is_unfiltered(value: Optional[str]) -> bool:
    return not value or value.strip().lower() == FILTER_ALL


def filter_lectures(
    lectures: Iterable[Lecture],
    *,
    search: str = "",
    subject: Optional[str] = FILTER_ALL,
    stage: Optional[str] = FILTER_ALL,
) -> List[Lecture]:
    """Apply the lecture list filters, keeping the input order.

    The search term matches title or subject as a case-insensitive substring;
    subject and stage match exactly, ignoring case, unless set to "all".
    """
    out = list(lectures)

    term = (search or "").strip().lower()
    if term:
        out = [l for l in out if term in l.title.lower() or term in l.subject.lower()]

    if not _is_unfiltered(subject):
        wanted = subject.strip().lower()
        out = [l for l in out if l.subject.lower() == wanted]

    if not _is_unfiltered(stage):
        wanted = stage.strip().lower()
        out = [l for l in out if l.stage.lower() == wanted]

    return out
