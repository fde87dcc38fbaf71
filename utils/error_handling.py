"""
Error handling utilities
Application error taxonomy and JSON error handlers
"""

import logging
from flask import request, jsonify
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

# Configure logging
logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors surfaced to API clients"""
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or {}


class Unauthorized(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class Conflict(AppError):
    status_code = 409


class UnsupportedFormat(AppError):
    status_code = 415


class MalformedPayload(AppError):
    status_code = 400


class BatchDeleteFailed(AppError):
    status_code = 500

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class InternalError(AppError):
    status_code = 500


class ErrorHandler:
    """Centralized error handling class"""

    @staticmethod
    def handle_database_error(error, context="Database operation"):
        """Map a database error to a user-facing message"""
        if isinstance(error, IntegrityError):
            logger.warning(f"{context} - Integrity constraint violation: {str(error)}")
            return "Data integrity error. Please check your input and try again."
        elif isinstance(error, OperationalError):
            logger.error(f"{context} - Database connection error: {str(error)}")
            return "Database connection error. Please try again in a moment."
        elif isinstance(error, SQLAlchemyError):
            logger.error(f"{context} - Database error: {str(error)}")
            return "Database error occurred. Please try again."
        else:
            logger.error(f"{context} - Unknown database error: {str(error)}")
            return "An unexpected database error occurred."


def error_response(message, status_code, **extra):
    body = {'success': False, 'message': message}
    body.update(extra)
    return jsonify(body), status_code


def _rollback():
    try:
        from models import db
        db.session.rollback()
    except SQLAlchemyError as db_error:
        logger.error(f"Database rollback failed: {str(db_error)}")


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(error):
        if error.status_code >= 500:
            logger.error(f"{type(error).__name__} on {request.method} {request.path}: {error.message}",
                         exc_info=getattr(error, 'cause', None) or True)
            _rollback()
        else:
            logger.info(f"{type(error).__name__} on {request.method} {request.path}: {error.message}")
        extra = {}
        if isinstance(error, ValidationError) and error.errors:
            extra['errors'] = error.errors
        return error_response(error.message, error.status_code, **extra)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        if error.code == 413:
            logger.warning(f"File too large: {request.url}")
            return error_response('File is too large. Maximum size is 16MB.', 413)
        if error.code == 404:
            logger.warning(f"404 error: {request.url}")
        return error_response(error.description or error.name, error.code)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_exception(error):
        _rollback()
        message = ErrorHandler.handle_database_error(error, f"{request.method} {request.path}")
        return error_response(message, 500)

    @app.errorhandler(Exception)
    def handle_exception(error):
        logger.error(f"Unhandled exception: {str(error)}", exc_info=True)
        _rollback()
        return error_response('An unexpected error occurred', 500)
