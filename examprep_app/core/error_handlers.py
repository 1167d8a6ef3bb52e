"""
Errors and JSON envelopes for the ExamPrep API.

Every failure a module raises on purpose is an ``ExamPrepError``. The
handler registered here turns it into
``{"success": false, "message", "code", "details"}`` with its HTTP status.
Successful responses use ``success_response`` so both shapes share the
``success`` flag.
"""

from flask import jsonify, request, current_app
from typing import Optional, Dict, Any


class ExamPrepError(Exception):
    """A failure with a stable machine-readable ``code`` and an HTTP status."""

    def __init__(
        self,
        message: str,
        code: str = 'UNKNOWN_ERROR',
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'details': self.details
        }


class NotFoundError(ExamPrepError):
    """Unknown section, question or profile."""

    def __init__(self, message: str = 'Resource not found', resource: str = None):
        super().__init__(
            message=message,
            code='NOT_FOUND',
            status_code=404,
            details={'resource': resource} if resource else None
        )


class ValidationError(ExamPrepError):
    """A request body or backup that does not match its schema."""

    def __init__(self, message: str = 'Validation failed', errors: Any = None):
        super().__init__(
            message=message,
            code='VALIDATION_ERROR',
            status_code=400,
            details={'errors': errors} if errors else None
        )


def format_validation_errors(exc) -> list:
    """Flatten a pydantic ValidationError into JSON-safe ``{field, message}`` pairs."""
    return [
        {'field': '.'.join(str(part) for part in err.get('loc', ())), 'message': err.get('msg', '')}
        for err in exc.errors()
    ]


def error_response(
    message: str,
    code: str = 'ERROR',
    status_code: int = 400,
    details: Dict = None
) -> tuple:
    """Failure envelope for errors raised outside ``ExamPrepError`` (404/500 from Flask)."""
    response = {
        'success': False,
        'message': message,
        'code': code
    }
    if details:
        response['details'] = details

    return jsonify(response), status_code


def success_response(data: Any = None, message: str = None) -> dict:
    """``{"success": true}`` plus ``data`` and ``message`` when given."""
    response = {'success': True}
    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message
    return response


def register_error_handlers(app):
    """JSON errors for ``/api/`` paths; everything else keeps Flask's default pages."""

    @app.errorhandler(ExamPrepError)
    def handle_examprep_error(error):
        # client errors log at WARNING, server errors at ERROR
        log = current_app.logger.error if error.status_code >= 500 else current_app.logger.warning
        log("%s %s: %s", request.path, error.code, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        if request.path.startswith('/api/'):
            return error_response('Endpoint not found', 'NOT_FOUND', 404)
        return error

    @app.errorhandler(500)
    def handle_internal_error(error):
        current_app.logger.exception('Unhandled error on %s', request.path)
        if request.path.startswith('/api/'):
            return error_response('Internal server error', 'SERVER_ERROR', 500)
        return error
