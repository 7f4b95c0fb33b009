from __future__ import annotations

import logging
from typing import Any, Optional

from flask import jsonify, request

from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def admin_password_from_request(body: Optional[dict] = None) -> str:
    """Body field first, then X-Admin-Password header, then query string."""
    body = json_body() if body is None else body
    return str(
        body.get("adminPassword")
        or request.headers.get("X-Admin-Password")
        or request.args.get("adminPassword")
        or ""
    ).strip()


def status_for(exc: DomainError) -> int:
    if isinstance(exc, AuthorizationError):
        return 401
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ValidationError):
        return 400
    return 400


def error_response(exc: DomainError, **extra: Any):
    return jsonify({"success": False, "message": str(exc), **extra}), status_for(exc)


def server_error(message: str, **extra: Any):
    logger.exception(message)
    return jsonify({"success": False, "message": message, **extra}), 500
