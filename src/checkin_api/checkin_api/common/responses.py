from __future__ import annotations

from functools import wraps
from typing import Any

from flask import jsonify, request

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateError,
    NotFoundError,
    StateConflictError,
    StoreError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateError, 409),
    (StateConflictError, 409),
    (StoreError, 500),
)


def status_for(exc: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def ok(data: Any = None, status: int = 200, message: str = "success"):
    return jsonify({"message": message, "data": data}), status


def error_response(exc: DomainError):
    status = status_for(exc)
    message = exc.message
    if isinstance(exc, StoreError):
        message = "internal server error"
    body: dict[str, Any] = {"message": message}
    if isinstance(exc, ValidationError) and exc.errors:
        body["errors"] = exc.errors
    return jsonify(body), status


def json_body() -> dict:
    """Request JSON object; a missing or non-object body counts as empty."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("missing bearer token")
    return token.strip()


def auth_required(auth_service):
    """Decorator factory: verifies the access token and passes ``caller_id`` to the view."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            caller_id = auth_service.authenticate(bearer_token())
            return view(*args, caller_id=caller_id, **kwargs)

        return wrapper

    return decorator
