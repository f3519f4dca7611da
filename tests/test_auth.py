"""
Auth tests: login, token checks and the capability gate.
"""

from datetime import datetime, timedelta, timezone

import jwt

from folio.modules.auth.utils import authorize

from conftest import ADMIN_USERNAME, ADMIN_PASSWORD


def test_login_with_username(client, admin_user):
    response = client.post('/api/auth/login', json={'username': ADMIN_USERNAME, 'password': ADMIN_PASSWORD})
    body = response.get_json()

    assert response.status_code == 200
    assert body['success'] is True
    assert body['token']
    assert body['user']['username'] == ADMIN_USERNAME
    assert body['user']['lastLogin']
    assert 'passwordHash' not in body['user']


def test_login_with_email(client, admin_user):
    response = client.post('/api/auth/login', json={'email': 'OWNER@example.com', 'password': ADMIN_PASSWORD})
    assert response.status_code == 200


def test_login_wrong_password(client, admin_user):
    response = client.post('/api/auth/login', json={'username': ADMIN_USERNAME, 'password': 'nope-nope'})
    assert response.status_code == 401
    assert response.get_json() == {'success': False, 'message': 'Invalid credentials'}


def test_login_missing_fields(client):
    response = client.post('/api/auth/login', json={'username': ADMIN_USERNAME})
    assert response.status_code == 400


def test_verify_and_me(client, auth_headers):
    verify = client.get('/api/auth/verify', headers=auth_headers)
    assert verify.status_code == 200
    assert verify.get_json()['valid'] is True

    me = client.get('/api/auth/me', headers=auth_headers)
    assert me.status_code == 200
    assert me.get_json()['data']['username'] == ADMIN_USERNAME


def test_garbage_token_rejected(client):
    response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-token'})
    assert response.status_code == 401
    assert response.get_json()['message'] == 'Invalid token'


def test_expired_token_rejected(app, client, admin_user):
    expired = jwt.encode(
        {'sub': admin_user['id'], 'role': 'admin',
         'exp': datetime.now(timezone.utc) - timedelta(minutes=1)},
        app.config['JWT_SECRET'], algorithm='HS256',
    )
    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {expired}'})
    assert response.status_code == 401
    assert response.get_json()['message'] == 'Token expired'


def test_token_for_non_admin_is_forbidden(app, client):
    from folio.modules.auth.database import UserDatabase
    from folio.modules.auth.tokens import issue_token

    with app.app_context():
        user_id = UserDatabase.create_user('viewer', 'viewer-password', role='viewer')
        token = issue_token(UserDatabase.get_user_by_id(user_id))

    response = client.get('/api/contact/messages', headers={'Authorization': f'Bearer {token}'})
    assert response.status_code == 403


def test_failed_login_is_logged(app, client, admin_user):
    from folio.core.logging_service import LoggingService

    client.post('/api/auth/login', json={'username': ADMIN_USERNAME, 'password': 'wrong-one'})
    with app.app_context():
        logs = LoggingService.get_recent_logs(level='WARNING')
    assert any(log['source'] == 'security' for log in logs)


def test_authorize_is_a_pure_check():
    assert authorize({'role': 'admin'}, 'admin')
    assert not authorize({'role': 'viewer'}, 'admin')
    assert not authorize(None, 'admin')


def test_login_rejects_non_object_body(client):
    response = client.post('/api/auth/login', json=['admin', 'secret'])
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Request body must be a JSON object'
