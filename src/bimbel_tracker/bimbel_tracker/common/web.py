from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask import Flask, jsonify, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, SubmissionError, ValidationError


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity put into the Flask session by the external auth layer."""

    name: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def current_user() -> CurrentUser:
    try:
        role = Role(session.get("role", Role.TUTOR.value))
    except ValueError:
        raise AuthorizationError("Peran pengguna tidak dikenal")
    return CurrentUser(name=str(session.get("name") or ""), role=role)


def _unauthenticated():
    return jsonify({"success": False, "message": "Silakan login terlebih dahulu"}), 401


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get("name"):
            return _unauthenticated()
        # Rejects sessions carrying an unknown role.
        current_user()
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get("name"):
            return _unauthenticated()
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "message": "Anda tidak memiliki akses"}), 403
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return jsonify({"success": False, "message": str(e), "field": e.field}), 400

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return jsonify({"success": False, "message": str(e)}), 404

    @app.errorhandler(AuthorizationError)
    def _forbidden(e: AuthorizationError):
        return jsonify({"success": False, "message": str(e)}), 403

    @app.errorhandler(SubmissionError)
    def _submission(e: SubmissionError):
        return (
            jsonify({"success": False, "message": str(e), "results": [r.to_dict() for r in e.results]}),
            502,
        )
