from __future__ import annotations

from flask import Flask, abort, request, send_from_directory

from ..common.http import current_role, current_user_id, handle_errors, login_required, ok, payload, roles_required
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/lectures", methods=["GET"], endpoint="list_lectures")
    @login_required
    def list_lectures():
        lectures = container.lecture_service.search(
            search=request.args.get("q", ""),
            subject=request.args.get("subject", "all"),
            stage=request.args.get("stage", "all"),
        )
        return ok(lectures=lectures)

    @app.route("/api/lectures/mine", methods=["GET"], endpoint="my_lectures")
    @roles_required(Role.TEACHER)
    def my_lectures():
        return ok(lectures=container.lecture_service.list_for_teacher(current_user_id()))

    @app.route("/api/lectures", methods=["POST"], endpoint="upload_lecture")
    @roles_required(Role.TEACHER)
    @handle_errors("uploading lecture")
    def upload_lecture():
        data = payload()
        pdf = request.files.get("pdf")
        lecture_id = container.lecture_service.upload(
            current_role=current_role(),
            current_user_id=current_user_id(),
            title=data.get("title", ""),
            subject=data.get("subject", ""),
            stage=data.get("stage", ""),
            pdf_url=data.get("pdf_url", ""),
            pdf_stream=pdf.stream if pdf else None,
            pdf_filename=pdf.filename if pdf else "",
        )
        return ok("Lecture uploaded successfully!", 201, lecture_id=lecture_id)

    @app.route("/api/lectures/<int:lecture_id>", methods=["DELETE"], endpoint="delete_lecture")
    @roles_required(Role.ADMIN, Role.TEACHER)
    @handle_errors("deleting lecture")
    def delete_lecture(lecture_id: int):
        container.lecture_service.delete(
            current_role=current_role(),
            current_user_id=current_user_id(),
            lecture_id=lecture_id,
        )
        return ok("Lecture deleted successfully")

    @app.route("/api/files/<path:name>", methods=["GET"], endpoint="download_file")
    @login_required
    def download_file(name: str):
        try:
            path = container.storage.path_for(name)
        except ValidationError:
            abort(404)
        return send_from_directory(path.parent.resolve(), path.name, mimetype="application/pdf")
