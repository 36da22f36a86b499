from __future__ import annotations

from flask import Flask, request, session

from ..common.http import (
    current_role,
    current_user_id,
    fail,
    handle_errors,
    login_required,
    ok,
    payload,
    roles_required,
)
from ..common.serialization import to_jsonable
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from ..container import Container

_USER_PRIVATE = ("password_hash",)


def _public(user):
    return to_jsonable(user, exclude=_USER_PRIVATE)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    @handle_errors("signing in")
    def login():
        data = payload()
        try:
            s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        except AuthenticationError as e:
            session.clear()
            return fail(str(e), 401)

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

        landing = "users" if s_user.role == Role.ADMIN else "lectures"
        return ok("Signed in", user=s_user, landing=landing)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok("Signed out")

    @app.route("/api/auth/me", endpoint="me")
    @login_required
    def me():
        user = container.auth_service.current_user(session.get("user_id"))
        if not user:
            # Account removed while signed in
            session.clear()
            return fail("Please log in to continue", 401)
        return ok(user=_public(user))

    @app.route("/api/users", methods=["GET"], endpoint="admin_users")
    @roles_required(Role.ADMIN)
    def admin_users():
        users = container.user_service.list_users()
        return ok(users=[_public(u) for u in users])

    @app.route("/api/users", methods=["POST"], endpoint="add_user")
    @roles_required(Role.ADMIN)
    @handle_errors("creating user")
    def add_user():
        data = payload()
        try:
            role = Role(data.get("role") or Role.STUDENT.value)
        except ValueError:
            raise ValidationError("Invalid account role")

        user_id = container.user_service.create_account(
            current_role=current_role(),
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=role,
        )
        return ok("User created successfully", 201, user_id=user_id)

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="delete_user")
    @roles_required(Role.ADMIN)
    @handle_errors("deleting user")
    def delete_user(user_id: int):
        container.user_service.delete_user(
            current_role=current_role(),
            current_user_id=current_user_id(),
            user_id=user_id,
        )
        return ok("User deleted successfully")

    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def list_students():
        students = container.student_service.search_students(request.args.get("q", ""))
        return ok(students=[_public(s) for s in students])

    @app.route("/api/students", methods=["POST"], endpoint="add_student")
    @roles_required(Role.ADMIN)
    @handle_errors("adding student")
    def add_student():
        data = payload()
        user_id = container.student_service.add_student(
            current_role=current_role(),
            name=data.get("name", ""),
            email=data.get("email", ""),
            student_number=data.get("student_number", ""),
            major=data.get("major", ""),
            study=data.get("study", ""),
            group=data.get("group", ""),
            password=data.get("password", ""),
        )
        return ok("Student added successfully", 201, user_id=user_id)

    @app.route("/api/students/<int:user_id>", methods=["PUT"], endpoint="update_student")
    @roles_required(Role.ADMIN)
    @handle_errors("updating student")
    def update_student(user_id: int):
        data = payload()
        container.student_service.update_student(
            current_role=current_role(),
            user_id=user_id,
            name=data.get("name", ""),
            email=data.get("email", ""),
            student_number=data.get("student_number", ""),
            major=data.get("major", ""),
            study=data.get("study", ""),
            group=data.get("group", ""),
        )
        return ok("Student updated successfully")

    @app.route("/api/students/<int:user_id>", methods=["DELETE"], endpoint="delete_student")
    @roles_required(Role.ADMIN)
    @handle_errors("deleting student")
    def delete_student(user_id: int):
        container.student_service.delete_student(current_role=current_role(), user_id=user_id)
        return ok("Student deleted successfully")
