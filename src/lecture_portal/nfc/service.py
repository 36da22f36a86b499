from __future__ import annotations

import logging
from typing import Sequence, Tuple

from ..common.datetime_utils import now_local
from ..common.validators import contains_ci
from ..core.constants import UNKNOWN_STUDENT
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import NFCTag, TagRow, normalize_serial
from .repository import NFCTagRepository

logger = logging.getLogger(__name__)


class NFCTagService:
    """Use cases: assign NFC tags to students and resolve scanned serials."""

    def __init__(self, tags: NFCTagRepository, users: UserRepository):
        self._tags = tags
        self._users = users

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

    def list_tags(self) -> Sequence[TagRow]:
        rows = []
        for tag in self._tags.list_all():
            student = self._users.get_by_id(tag.student_id)
            rows.append(TagRow(tag=tag, student_name=student.name if student else UNKNOWN_STUDENT))
        return rows

    def search_students(self, term: str) -> Sequence[User]:
        students = self._users.list_by_role(Role.STUDENT)
        term = (term or "").strip()
        if not term:
            return students
        return [s for s in students if contains_ci(s.name, term) or contains_ci(s.email, term)]

    def assign(self, *, current_role: Role, tag_id: str, student_id) -> int:
        self._require_admin(current_role)

        serial = normalize_serial(tag_id)
        if not serial or not student_id:
            raise ValidationError("Please enter tag ID and select a student")

        try:
            student = self._users.get_by_id(int(student_id))
        except (TypeError, ValueError):
            raise ValidationError("Please enter tag ID and select a student")
        if not student or not student.is_student:
            raise ValidationError("Student not found")

        if self._tags.get_by_tag_id(serial):
            raise ValidationError("This NFC tag ID is already registered")

        nfc_tag_id = self._tags.create(tag_id=serial, student_id=student.user_id)
        logger.info("NFC tag %s assigned to student %s", serial, student.user_id)
        return nfc_tag_id

    def _set_active(self, current_role: Role, nfc_tag_id: int, is_active: bool) -> None:
        self._require_admin(current_role)
        if not self._tags.set_active(nfc_tag_id=int(nfc_tag_id), is_active=is_active):
            raise ValidationError("NFC tag not found")
        logger.info("NFC tag %s %s", nfc_tag_id, "activated" if is_active else "deactivated")

    def activate(self, *, current_role: Role, nfc_tag_id: int) -> None:
        self._set_active(current_role, nfc_tag_id, True)

    def deactivate(self, *, current_role: Role, nfc_tag_id: int) -> None:
        self._set_active(current_role, nfc_tag_id, False)

    def delete(self, *, current_role: Role, nfc_tag_id: int) -> None:
        self._require_admin(current_role)
        if not self._tags.delete(nfc_tag_id=int(nfc_tag_id)):
            raise ValidationError("NFC tag not found")
        logger.info("NFC tag %s deleted", nfc_tag_id)

    def resolve(self, serial: str) -> Tuple[NFCTag, User]:
        tag = self._tags.get_by_tag_id(normalize_serial(serial))
        if not tag:
            raise ValidationError("Unknown NFC tag")
        if not tag.is_active:
            raise ValidationError("This NFC tag is inactive")

        student = self._users.get_by_id(tag.student_id)
        if not student:
            raise ValidationError("Student not found")
        return tag, student

    def mark_used(self, tag: NFCTag) -> None:
        self._tags.touch_last_used(nfc_tag_id=tag.nfc_tag_id, used_at=now_local())
