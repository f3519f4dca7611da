"""
Folio Auth Module
=================

Admin authentication for the API:
- Username/email + password login returning a JWT
- Token verification and current-user lookup
- Capability check run before protected handlers
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

from . import routes
from .database import UserDatabase
from .tokens import issue_token, decode_token
from .utils import authorize, admin_required, auth_optional, current_user

__all__ = [
    'auth_bp', 'UserDatabase', 'issue_token', 'decode_token',
    'authorize', 'admin_required', 'auth_optional', 'current_user',
]
