from datetime import datetime, timedelta, timezone

import jwt

from ...core.config import get_config_value
from ...core.errors import AuthenticationError


def issue_token(user):
    """Sign a token for an admin user record"""
    now = datetime.now(timezone.utc)
    days = int(get_config_value('JWT_EXPIRES_DAYS', 7))
    payload = {
        'sub': user['id'],
        'username': user['username'],
        'role': user['role'],
        'iat': now,
        'exp': now + timedelta(days=days),
    }
    return jwt.encode(
        payload,
        get_config_value('JWT_SECRET'),
        algorithm=get_config_value('JWT_ALGORITHM', 'HS256'),
    )


def decode_token(token):
    """Verify a token and return its payload; raises AuthenticationError"""
    try:
        return jwt.decode(
            token,
            get_config_value('JWT_SECRET'),
            algorithms=[get_config_value('JWT_ALGORITHM', 'HS256')],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError('Token expired')
    except jwt.InvalidTokenError:
        raise AuthenticationError('Invalid token')
