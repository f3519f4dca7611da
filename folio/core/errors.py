"""
API Errors
==========

Error taxonomy shared by every blueprint. Handlers raise these and the
app-level error handlers render them as ``{success: false, message}``.
"""

from flask import jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge


class APIError(Exception):
    """Base class for errors that map to an HTTP response"""
    status_code = 500

    def __init__(self, message='Internal Server Error', status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_response(self):
        return jsonify({'success': False, 'message': self.message}), self.status_code


class ValidationError(APIError):
    status_code = 400


class AuthenticationError(APIError):
    status_code = 401


class ForbiddenError(APIError):
    status_code = 403


class NotFoundError(APIError):
    status_code = 404


def success(data=None, message=None, status=200, **extra):
    """Build the standard success envelope"""
    body = {'success': True}
    if message is not None:
        body['message'] = message
    body.update(extra)
    if data is not None:
        body['data'] = data
    return jsonify(body), status


def json_body():
    """Parsed JSON request body; an empty dict when there is none"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def register_error_handlers(app):
    """Render APIError, unknown routes and oversized bodies as JSON"""

    @app.errorhandler(APIError)
    def handle_api_error(error):
        return error.to_response()

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(error):
        return jsonify({
            'success': False,
            'message': 'File too large. Maximum size is 10MB'
        }), 400

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({'success': False, 'message': 'Route not found'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({'success': False, 'message': 'Method not allowed'}), 405

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        if isinstance(error, HTTPException):
            return jsonify({'success': False, 'message': error.description}), error.code

        from .logging_service import LoggingService
        LoggingService.log_error_with_traceback('system', error)
        body = {'success': False, 'message': 'Internal Server Error'}
        if app.config.get('ENVIRONMENT') == 'development' and app.debug:
            body['error'] = str(error)
        return jsonify(body), 500


def handles_errors(source, message):
    """Decorator: let APIError through, log anything else and answer 500 with ``message``"""
    from functools import wraps

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except APIError:
                raise
            except Exception as e:
                from .logging_service import LoggingService
                LoggingService.log_error_with_traceback(source, e, {'endpoint': f.__name__})
                return jsonify({'success': False, 'message': message}), 500
        return decorated_function
    return decorator
