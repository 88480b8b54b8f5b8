"""
Error taxonomy and Flask error handlers
"""

from flask import jsonify
from werkzeug.exceptions import HTTPException
from extensions import db, jwt


class ComplaintDeskError(Exception):
    """Base class for every error the service reports to callers"""

    kind = 'Internal'
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self):
        return {'error': self.kind, 'message': self.message}


class NotFound(ComplaintDeskError):
    kind = 'NotFound'
    status_code = 404


class Unauthorized(ComplaintDeskError):
    kind = 'Unauthorized'
    status_code = 401


class Forbidden(ComplaintDeskError):
    kind = 'Forbidden'
    status_code = 403


class InvalidTransition(ComplaintDeskError):
    kind = 'InvalidTransition'
    status_code = 409


class ValidationError(ComplaintDeskError):
    kind = 'ValidationError'
    status_code = 400


class Conflict(ComplaintDeskError):
    kind = 'Conflict'
    status_code = 409


class CascadeDeleteFailed(ComplaintDeskError):
    """User deletion and its complaint cleanup did not complete together"""
    kind = 'Internal'
    status_code = 500


def validation_error_from_schema(error):
    """Flatten a pydantic error into a single readable message"""
    parts = []
    for item in error.errors():
        field = '.'.join(str(loc) for loc in item.get('loc', ())) or 'body'
        parts.append(f"{field}: {item.get('msg')}")
    return ValidationError('; '.join(parts) or 'Invalid request body')


def register_error_handlers(app):
    """Register error handlers"""

    @app.errorhandler(ComplaintDeskError)
    def handle_domain_error(error):
        if error.status_code >= 500:
            db.session.rollback()
            app.logger.error(f'{error.kind}: {error.message}')
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({'error': 'ValidationError', 'message': 'Malformed request'}), 400

    @app.errorhandler(401)
    def unauthorized(error):
        return jsonify({'error': 'Unauthorized', 'message': 'Authentication required'}), 401

    @app.errorhandler(403)
    def forbidden(error):
        return jsonify({'error': 'Forbidden', 'message': 'Insufficient permissions'}), 403

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'NotFound', 'message': 'Resource not found'}), 404

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify({'error': 'TooManyRequests', 'message': str(error.description)}), 429

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({'error': 'Internal', 'message': 'An unexpected error occurred'}), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        if isinstance(error, HTTPException):
            return error
        db.session.rollback()
        app.logger.exception(f'Unhandled exception: {str(error)}')
        return jsonify({'error': 'Internal', 'message': 'An unexpected error occurred'}), 500


def register_jwt_callbacks():
    """Give token failures the same body shape as every other error"""

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify(Unauthorized(reason).to_dict()), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify(Unauthorized(f'Invalid token: {reason}').to_dict()), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify(Unauthorized('Token has expired').to_dict()), 401
