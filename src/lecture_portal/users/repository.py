from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note: services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_student_number(self, student_number: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        email: str,
        name: str,
        role: Role,
        password_hash: Optional[str],
        student_number: Optional[str] = None,
        major: Optional[str] = None,
        study: Optional[str] = None,
        group: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_student(
        self,
        *,
        user_id: int,
        email: str,
        name: str,
        student_number: str,
        major: Optional[str],
        study: Optional[str],
        group: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        """All accounts, newest first."""

        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[User]:
        """Accounts of one role ordered by name."""

        raise NotImplementedError

    def count_by_role(self, role: Role) -> int:
        raise NotImplementedError
