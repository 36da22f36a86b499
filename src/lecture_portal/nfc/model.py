from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


def normalize_serial(serial: Optional[str]) -> str:
    """Tag serials are compared trimmed and lower-cased."""
    return (serial or "").strip().lower()


@dataclass(frozen=True)
class NFCTag:
    nfc_tag_id: int
    tag_id: str
    student_id: int
    is_active: bool = True
    assigned_date: Optional[datetime] = None
    last_used: Optional[datetime] = None


@dataclass(frozen=True)
class TagRow:
    """Tag joined with the owning student's name for the admin list."""

    tag: NFCTag
    student_name: str
