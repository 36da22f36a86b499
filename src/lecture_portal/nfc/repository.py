from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import NFCTag


class NFCTagRepository(Protocol):
    def list_all(self) -> Sequence[NFCTag]:
        """Newest assignment first."""

        raise NotImplementedError

    def get_by_id(self, nfc_tag_id: int) -> Optional[NFCTag]:
        raise NotImplementedError

    def get_by_tag_id(self, tag_id: str) -> Optional[NFCTag]:
        raise NotImplementedError

    def create(self, *, tag_id: str, student_id: int) -> int:
        raise NotImplementedError

    def set_active(self, *, nfc_tag_id: int, is_active: bool) -> bool:
        raise NotImplementedError

    def delete(self, *, nfc_tag_id: int) -> bool:
        raise NotImplementedError

    def touch_last_used(self, *, nfc_tag_id: int, used_at: datetime) -> None:
        raise NotImplementedError
