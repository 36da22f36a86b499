from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account of any role.

    Note: plain data object, no DB access code. Student accounts also carry the
    university student number and enrolment details.
    """

    user_id: int
    email: str
    name: str
    role: Role
    password_hash: Optional[str] = None
    created_at: Optional[datetime] = None
    student_number: Optional[str] = None
    major: Optional[str] = None
    study: Optional[str] = None
    group: Optional[str] = None

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    @property
    def can_login(self) -> bool:
        return bool(self.password_hash)
