from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import CategoryType
from .model import Category


class CategoryRepository(Protocol):
    def list_all(self) -> Sequence[Category]:
        """Newest first."""

        raise NotImplementedError

    def get_by_id(self, category_id: int) -> Optional[Category]:
        raise NotImplementedError

    def create(self, *, name: str, type: CategoryType) -> int:
        raise NotImplementedError

    def delete(self, *, category_id: int) -> bool:
        raise NotImplementedError
