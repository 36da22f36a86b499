from __future__ import annotations

from flask import Flask

from ..common.http import current_role, handle_errors, login_required, ok, payload, roles_required
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/categories", methods=["GET"], endpoint="list_categories")
    @login_required
    def list_categories():
        vocab = container.category_service.vocabulary()
        return ok(
            categories=container.category_service.list_all(),
            subjects=vocab.subjects,
            stages=vocab.stages,
        )

    @app.route("/api/categories", methods=["POST"], endpoint="add_category")
    @roles_required(Role.ADMIN)
    @handle_errors("adding category")
    def add_category():
        data = payload()
        category_id = container.category_service.add(
            current_role=current_role(),
            name=data.get("name", ""),
            type=data.get("type", ""),
        )
        return ok("Category added successfully", 201, category_id=category_id)

    @app.route("/api/categories/<int:category_id>", methods=["DELETE"], endpoint="delete_category")
    @roles_required(Role.ADMIN)
    @handle_errors("deleting category")
    def delete_category(category_id: int):
        container.category_service.delete(current_role=current_role(), category_id=category_id)
        return ok("Category deleted successfully")
