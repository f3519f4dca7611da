from functools import wraps

from flask import request, g

from ...core.errors import AuthenticationError, ForbiddenError
from ...core.logging_service import LoggingService
from .database import UserDatabase
from .tokens import decode_token

# Capabilities granted to each role
ROLE_CAPABILITIES = {
    'admin': frozenset({'admin'}),
}


def authorize(principal, capability):
    """True when the principal (a user dict or None) holds the capability"""
    if not principal:
        return False
    return capability in ROLE_CAPABILITIES.get(principal.get('role'), frozenset())


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[7:].strip() or None
    return None


def _load_principal(token):
    payload = decode_token(token)
    user = UserDatabase.get_user_by_id(payload.get('sub'))
    if not user:
        raise AuthenticationError('User no longer exists')
    return user


def current_user():
    return g.get('user')


def admin_required(f):
    """Decorator to require an admin token"""
    return capability_required('admin')(f)


def capability_required(capability):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            token = _bearer_token()
            if not token:
                raise AuthenticationError('Access denied. No token provided.')
            try:
                g.user = _load_principal(token)
            except AuthenticationError as e:
                LoggingService.log_security_event('Rejected token', {'reason': e.message, 'path': request.path})
                raise
            if not authorize(g.user, capability):
                raise ForbiddenError(f"User role '{g.user.get('role')}' is not authorized to access this route")
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def auth_optional(f):
    """Decorator that sets g.user when a valid token is present and never rejects"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.user = None
        token = _bearer_token()
        if token:
            try:
                g.user = _load_principal(token)
            except AuthenticationError:
                g.user = None
        return f(*args, **kwargs)
    return decorated_function
