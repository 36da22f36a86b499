from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CategoryType


@dataclass(frozen=True)
class Category:
    """Lecture vocabulary entry: a subject name or a stage (academic year)."""

    category_id: int
    name: str
    type: CategoryType
    created_at: Optional[datetime] = None
