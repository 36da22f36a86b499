from __future__ import annotations

from flask import Flask

from ..common.http import (
    current_role,
    current_user_id,
    fail,
    handle_errors,
    ok,
    payload,
    require_int,
    roles_required,
)
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions", methods=["POST"], endpoint="start_session")
    @roles_required(Role.TEACHER)
    @handle_errors("creating attendance session")
    def start_session():
        data = payload()
        lecture_id = data.get("lecture_id")
        session_id = container.attendance_service.start_session(
            current_role=current_role(),
            current_user_id=current_user_id(),
            lecture_id=require_int(lecture_id, "Lecture") if lecture_id not in (None, "") else None,
        )
        return ok("Attendance session started successfully", 201, session_id=session_id)

    @app.route("/api/sessions/<int:session_id>/end", methods=["POST"], endpoint="end_session")
    @roles_required(Role.ADMIN, Role.TEACHER)
    @handle_errors("ending attendance session")
    def end_session(session_id: int):
        container.attendance_service.end_session(
            current_role=current_role(),
            current_user_id=current_user_id(),
            session_id=session_id,
        )
        return ok("Attendance session ended")

    @app.route("/api/sessions/active", methods=["GET"], endpoint="active_sessions")
    @roles_required(Role.TEACHER)
    def active_sessions():
        return ok(sessions=container.attendance_service.list_active_sessions(current_user_id()))

    @app.route("/api/sessions", methods=["GET"], endpoint="list_sessions")
    @roles_required(Role.TEACHER)
    def list_sessions():
        return ok(sessions=container.attendance_service.list_sessions(current_user_id()))

    @app.route("/api/sessions/<int:session_id>/roster", methods=["GET"], endpoint="session_roster")
    @roles_required(Role.ADMIN, Role.TEACHER)
    @handle_errors("loading attendance roster")
    def session_roster(session_id: int):
        roster = container.attendance_service.session_roster(
            current_role=current_role(),
            current_user_id=current_user_id(),
            session_id=session_id,
        )
        return ok(roster=roster)

    @app.route("/api/sessions/<int:session_id>/mark", methods=["POST"], endpoint="mark_attendance")
    @roles_required(Role.ADMIN, Role.TEACHER)
    @handle_errors("marking attendance")
    def mark_attendance(session_id: int):
        data = payload()
        result = container.attendance_service.mark_attendance(
            current_role=current_role(),
            current_user_id=current_user_id(),
            session_id=session_id,
            student_id=require_int(data.get("student_id"), "Student"),
            status=data.get("status", ""),
        )
        return ok(result.message, result=result)

    @app.route("/api/sessions/<int:session_id>/scan", methods=["POST"], endpoint="record_scan")
    @roles_required(Role.ADMIN, Role.TEACHER)
    @handle_errors("recording NFC scan")
    def record_scan(session_id: int):
        data = payload()
        result = container.attendance_service.record_scan(
            current_role=current_role(),
            current_user_id=current_user_id(),
            session_id=session_id,
            serial=data.get("serial", ""),
        )
        return ok(result.message, result=result)

    @app.route("/api/sessions/<int:session_id>/manual", methods=["POST"], endpoint="manual_entry")
    @roles_required(Role.ADMIN, Role.TEACHER)
    @handle_errors("recording attendance")
    def manual_entry(session_id: int):
        data = payload()
        result = container.attendance_service.manual_entry(
            current_role=current_role(),
            current_user_id=current_user_id(),
            session_id=session_id,
            student_ref=str(data.get("student_ref", "")),
        )
        return ok(result.message, result=result)

    @app.route("/api/me/attendance", methods=["GET"], endpoint="my_attendance")
    @roles_required(Role.STUDENT)
    @handle_errors("loading attendance data")
    def my_attendance():
        user = container.auth_service.current_user(current_user_id())
        if not user:
            return fail("Please log in to continue", 401)
        return ok(
            summary=container.attendance_service.student_summary(user),
            records=container.attendance_service.student_history(user.user_id),
        )
