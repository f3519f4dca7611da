"""
Auth API Routes
===============

POST /api/auth/login   exchange credentials for a token
GET  /api/auth/verify  check a token
GET  /api/auth/me      current admin user
"""

from . import auth_bp
from ...core.errors import ValidationError, AuthenticationError, success, json_body
from ...core.logging_service import LoggingService
from .database import UserDatabase
from .tokens import issue_token
from .utils import admin_required, current_user


@auth_bp.route('/login', methods=['POST'])
def login():
    """Authenticate an admin with username (or email) and password"""
    data = json_body()
    login_name = (data.get('username') or data.get('email') or '').strip()
    password = data.get('password') or ''

    if not login_name or not password:
        raise ValidationError('Please provide username and password')

    user = UserDatabase.get_user_by_login(login_name)
    if not user or not UserDatabase.verify_password(password, user['passwordHash']):
        LoggingService.log_security_event('Failed admin login', {'login': login_name})
        raise AuthenticationError('Invalid credentials')

    user.pop('passwordHash')
    user['lastLogin'] = UserDatabase.record_login(user['id'])
    token = issue_token(user)

    LoggingService.log_user_action('auth', 'login', user_id=user['id'])
    return success(token=token, user=user)


@auth_bp.route('/verify', methods=['GET'])
@admin_required
def verify():
    return success(valid=True, user=current_user())


@auth_bp.route('/me', methods=['GET'])
@admin_required
def me():
    return success(data=current_user())
