from __future__ import annotations

import logging
from decimal import Decimal
from functools import wraps
from typing import Optional

from flask import jsonify, session

from ..access.model import Caller
from ..access.policy import caller_from_session
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DeadlinePassedError,
    DomainError,
    NotFoundError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (DeadlinePassedError, 400),
    (ConflictError, 409),
)


def current_caller() -> Optional[Caller]:
    return caller_from_session(session.get("user_id"), session.get("role"))


def api_login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Not authenticated"}), 401
        return view(*args, **kwargs)

    return wrapper


def error_response(exc: DomainError):
    status = 400
    for exc_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, exc_type):
            status = code
            break
    return jsonify({"success": False, "error": type(exc).__name__, "message": str(exc)}), status


def server_error(logger: logging.Logger, where: str):
    logger.exception("Unexpected error in %s", where)
    return jsonify({"success": False, "message": "Server error"}), 500


def money(value: Decimal) -> float:
    return float(value)


def parse_bool_arg(value: Optional[str]) -> Optional[bool]:
    if value is None or value == "":
        return None
    return value.strip().lower() == "true"
