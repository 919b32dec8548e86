"""Error types raised by the scoring core and their JSON rendering."""

from typing import Any, Dict, Optional

from flask import current_app, jsonify
from pydantic import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """An error with an HTTP status and optional structured details."""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload = {'error': self.message}
        payload.update(self.details)
        return payload


class ValidationError(ApiError):
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class BusinessRuleError(ApiError):
    """A well-formed request that breaks a rule, e.g. a round maximum.

    ``details`` names the offending field and limit so a client can
    highlight it.
    """

    status_code = 400


def format_schema_error(exc: SchemaValidationError) -> str:
    messages = []
    for err in exc.errors():
        ctx_error = (err.get('ctx') or {}).get('error')
        if ctx_error is not None:
            messages.append(str(ctx_error))
            continue
        field = '.'.join(str(p) for p in err.get('loc', ()))
        messages.append(f"{field}: {err.get('msg')}" if field else err.get('msg', 'invalid input'))
    return '; '.join(messages) or 'Invalid payload'


def register_error_handlers(flask_app) -> None:
    from quizboard import db

    @flask_app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError):
        db.session.rollback()
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(SchemaValidationError)
    def handle_schema_error(exc: SchemaValidationError):
        return jsonify({'error': format_schema_error(exc)}), 400

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({'error': exc.description or exc.name}), exc.code

    @flask_app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        db.session.rollback()
        current_app.logger.exception(f"[unhandled] {type(exc).__name__}: {exc}")
        return jsonify({'error': 'Internal server error'}), 500
