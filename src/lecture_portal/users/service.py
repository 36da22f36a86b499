from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import contains_ci, optional_text, require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    name: str
    email: str
    role: Role


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.can_login:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hash values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        logger.info("User %s signed in as %s", user.user_id, user.role.value)
        return SessionUser(user_id=user.user_id, name=user.name, email=user.email, role=user.role)

    def current_user(self, user_id: Optional[int]) -> Optional[User]:
        """Re-load the signed-in account; None when it has been deleted meanwhile."""
        if not user_id:
            return None
        return self._users.get_by_id(int(user_id))


class UserService:
    """Use case: manage accounts (admin)."""

    def __init__(self, users: UserRepository, *, on_student_removed: Optional[Callable[[int], None]] = None):
        self._users = users
        self._on_student_removed = on_student_removed

    def create_account(self, *, current_role: Role, name: str, email: str, password: str, role: Role) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_email(email):
            raise ValidationError("Email is already in use")

        user_id = self._users.create_user(
            email=email,
            name=name,
            role=role,
            password_hash=generate_password_hash(password),
        )
        logger.info("Account %s created (%s)", user_id, role.value)
        return user_id

    def list_users(self) -> Sequence[User]:
        return self._users.list_all()

    def delete_user(self, *, current_role: Role, current_user_id: int, user_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")
        if int(current_user_id) == int(user_id):
            raise ValidationError("You cannot delete your own account!")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise ValidationError("User not found")
        if user.is_student and self._on_student_removed:
            self._on_student_removed(user.user_id)
        if not self._users.delete_by_id(int(user_id)):
            raise ValidationError("Failed to delete user")
        logger.info("Account %s deleted", user_id)


class StudentService:
    """Use case: maintain student records (admin)."""

    def __init__(self, users: UserRepository, *, on_student_removed: Optional[Callable[[int], None]] = None):
        self._users = users
        self._on_student_removed = on_student_removed

    def list_students(self) -> Sequence[User]:
        return self._users.list_by_role(Role.STUDENT)

    def search_students(self, term: str) -> Sequence[User]:
        students = self.list_students()
        term = (term or "").strip()
        if not term:
            return students
        return [
            s
            for s in students
            if contains_ci(s.name, term)
            or contains_ci(s.email, term)
            or contains_ci(s.student_number, term)
            or contains_ci(s.major, term)
            or contains_ci(s.study, term)
            or contains_ci(s.group, term)
        ]

    def add_student(
        self,
        *,
        current_role: Role,
        name: str,
        email: str,
        student_number: str,
        major: str = "",
        study: str = "",
        group: str = "",
        password: str = "",
    ) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

        try:
            name = require_non_empty(name, "Name")
            email = require_email(email)
            student_number = require_non_empty(student_number, "Student ID")
        except ValidationError:
            raise ValidationError("Please fill in all required fields")

        if self._users.get_by_student_number(student_number):
            raise ValidationError("This student ID is already registered")
        if self._users.get_by_email(email):
            raise ValidationError("Email is already in use")

        password_hash = None
        if password:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
            password_hash = generate_password_hash(password)

        user_id = self._users.create_user(
            email=email,
            name=name,
            role=Role.STUDENT,
            password_hash=password_hash,
            student_number=student_number,
            major=optional_text(major),
            study=optional_text(study),
            group=optional_text(group),
        )
        logger.info("Student %s added (student id %s)", user_id, student_number)
        return user_id

    def update_student(
        self,
        *,
        current_role: Role,
        user_id: int,
        name: str,
        email: str,
        student_number: str,
        major: str = "",
        study: str = "",
        group: str = "",
    ) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

        student = self._users.get_by_id(int(user_id))
        if not student or not student.is_student:
            raise ValidationError("Student not found")

        name = require_non_empty(name, "Name")
        email = require_email(email)
        student_number = require_non_empty(student_number, "Student ID")

        other = self._users.get_by_student_number(student_number)
        if other and other.user_id != student.user_id:
            raise ValidationError("This student ID is already registered")
        other = self._users.get_by_email(email)
        if other and other.user_id != student.user_id:
            raise ValidationError("Email is already in use")

        ok = self._users.update_student(
            user_id=student.user_id,
            email=email,
            name=name,
            student_number=student_number,
            major=optional_text(major),
            study=optional_text(study),
            group=optional_text(group),
        )
        if not ok:
            raise ValidationError("Failed to update student")

    def delete_student(self, *, current_role: Role, user_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

        student = self._users.get_by_id(int(user_id))
        if not student or not student.is_student:
            raise ValidationError("Student not found")
        if self._on_student_removed:
            self._on_student_removed(student.user_id)
        if not self._users.delete_by_id(student.user_id):
            raise ValidationError("Failed to delete student")
        logger.info("Student %s deleted", student.user_id)
