from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..common.validators import require_non_empty
from ..core.enums import CategoryType, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import Category
from .repository import CategoryRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vocabulary:
    """Option lists for the lecture upload form and filters."""

    subjects: Sequence[Category]
    stages: Sequence[Category]


class CategoryService:
    def __init__(self, categories: CategoryRepository):
        self._categories = categories

    def list_all(self) -> Sequence[Category]:
        return self._categories.list_all()

    def vocabulary(self) -> Vocabulary:
        items = self.list_all()
        return Vocabulary(
            subjects=[c for c in items if c.type == CategoryType.SUBJECT],
            stages=[c for c in items if c.type == CategoryType.STAGE],
        )

    def add(self, *, current_role: Role, name: str, type: str) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

        name = require_non_empty(name, "Category name")
        try:
            category_type = CategoryType(type)
        except ValueError:
            raise ValidationError("Category type must be 'subject' or 'stage'")

        category_id = self._categories.create(name=name, type=category_type)
        logger.info("Category %s added: %s (%s)", category_id, name, category_type.value)
        return category_id

    def delete(self, *, current_role: Role, category_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

        if not self._categories.delete(category_id=int(category_id)):
            raise ValidationError("Category not found")
        logger.info("Category %s deleted", category_id)
