"""Shared helpers for the JSON controllers: auth decorators and response shapes."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError, ValidationError
from .serialization import to_jsonable

logger = logging.getLogger(__name__)


def ok(message: str = "", status: int = 200, **payload: Any):
    body = {"success": True, "message": message}
    body.update({k: to_jsonable(v) for k, v in payload.items()})
    return jsonify(body), status


def fail(message: str, status: int = 400, **payload: Any):
    body = {"success": False, "message": message}
    body.update({k: to_jsonable(v) for k, v in payload.items()})
    return jsonify(body), status


def domain_error_response(e: DomainError):
    if isinstance(e, AuthenticationError):
        return fail(str(e), 401)
    if isinstance(e, AuthorizationError):
        return fail(str(e), 403)
    return fail(str(e), 400)


def handle_errors(action: str) -> Callable:
    """Map domain errors to 4xx and log anything unexpected as a 500.

    `action` names the operation in the generic error message, e.g. "adding category".
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                return domain_error_response(e)
            except Exception:
                logger.exception("Unexpected error while %s", action)
                return fail(f"System error while {action}", 500)

        return wrapper

    return decorator


def register_error_handlers(app: Flask) -> None:
    """JSON envelopes for errors that escape a route without its own `handle_errors`."""

    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        return domain_error_response(e)

    @app.errorhandler(Exception)
    def _unexpected_error(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unexpected error on %s %s", request.method, request.path)
        return fail("System error", 500)


def current_role() -> Role:
    return Role(session["role"])


def current_user_id() -> int:
    return int(session["user_id"])


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return fail("Please log in to continue", 401)
            if session.get("role") not in allowed:
                return fail("You do not have permission", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def payload() -> dict:
    """Request body as a dict: JSON when sent as JSON, otherwise form fields."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


def require_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")
