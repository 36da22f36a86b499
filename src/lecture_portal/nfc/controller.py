from __future__ import annotations

from flask import Flask, request

from ..common.http import current_role, handle_errors, ok, payload, roles_required
from ..common.serialization import to_jsonable
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/nfc-tags", methods=["GET"], endpoint="list_nfc_tags")
    @roles_required(Role.ADMIN)
    def list_nfc_tags():
        rows = [
            dict(to_jsonable(row.tag), student_name=row.student_name)
            for row in container.nfc_service.list_tags()
        ]
        return ok(tags=rows)

    @app.route("/api/nfc-tags/students", methods=["GET"], endpoint="nfc_student_search")
    @roles_required(Role.ADMIN)
    def nfc_student_search():
        students = container.nfc_service.search_students(request.args.get("q", ""))
        return ok(students=[{"user_id": s.user_id, "name": s.name, "email": s.email} for s in students])

    @app.route("/api/nfc-tags", methods=["POST"], endpoint="assign_nfc_tag")
    @roles_required(Role.ADMIN)
    @handle_errors("assigning NFC tag")
    def assign_nfc_tag():
        data = payload()
        nfc_tag_id = container.nfc_service.assign(
            current_role=current_role(),
            tag_id=data.get("tag_id", ""),
            student_id=data.get("student_id"),
        )
        return ok("NFC tag assigned successfully", 201, nfc_tag_id=nfc_tag_id)

    @app.route("/api/nfc-tags/<int:nfc_tag_id>/activate", methods=["POST"], endpoint="activate_nfc_tag")
    @roles_required(Role.ADMIN)
    @handle_errors("activating NFC tag")
    def activate_nfc_tag(nfc_tag_id: int):
        container.nfc_service.activate(current_role=current_role(), nfc_tag_id=nfc_tag_id)
        return ok("NFC tag activated")

    @app.route("/api/nfc-tags/<int:nfc_tag_id>/deactivate", methods=["POST"], endpoint="deactivate_nfc_tag")
    @roles_required(Role.ADMIN)
    @handle_errors("deactivating NFC tag")
    def deactivate_nfc_tag(nfc_tag_id: int):
        container.nfc_service.deactivate(current_role=current_role(), nfc_tag_id=nfc_tag_id)
        return ok("NFC tag deactivated")

    @app.route("/api/nfc-tags/<int:nfc_tag_id>", methods=["DELETE"], endpoint="delete_nfc_tag")
    @roles_required(Role.ADMIN)
    @handle_errors("deleting NFC tag")
    def delete_nfc_tag(nfc_tag_id: int):
        container.nfc_service.delete(current_role=current_role(), nfc_tag_id=nfc_tag_id)
        return ok("NFC tag deleted")
