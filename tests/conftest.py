"""
Shared fixtures: a Folio app on a throwaway directory, an admin account and
helpers that fabricate uploads in memory.
"""

import io
import shutil
import tempfile

import pytest
from flask import Flask
from PIL import Image

from folio import Folio
from folio.modules.auth.database import UserDatabase

ADMIN_USERNAME = 'admin'
ADMIN_PASSWORD = 'correct-horse-battery'


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="folio-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


def make_app(db_dir, features=None):
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["JWT_SECRET"] = "test-jwt-secret-with-enough-length-for-hs256"
    app.config["DB_DIR"] = db_dir
    app.config["STORAGE_BACKEND"] = "local"
    app.config["EMAIL_PROVIDER"] = "smtp"
    app.config["EMAIL_PASSWORD"] = ""
    app.config["CORS_ORIGIN"] = "https://example.com"
    Folio(app, {'features': features or {}})
    return app


@pytest.fixture
def app(tmp_db_dir):
    """Fully initialised Flask app with every Folio module registered."""
    return make_app(tmp_db_dir)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_user(app):
    with app.app_context():
        user_id = UserDatabase.create_user(ADMIN_USERNAME, ADMIN_PASSWORD, email='owner@example.com')
        return UserDatabase.get_user_by_id(user_id)


@pytest.fixture
def admin_token(client, admin_user):
    response = client.post('/api/auth/login', json={
        'username': ADMIN_USERNAME,
        'password': ADMIN_PASSWORD,
    })
    assert response.status_code == 200
    return response.get_json()['token']


@pytest.fixture
def auth_headers(admin_token):
    return {'Authorization': f'Bearer {admin_token}'}


def image_bytes(fmt='PNG', size=(640, 480), color=(200, 40, 40)):
    buf = io.BytesIO()
    mode = 'RGBA' if fmt == 'PNG' else 'RGB'
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


def pdf_bytes(label='resume'):
    return (
        b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n"
        + f"% {label}\n".encode()
        + b"trailer << /Root 1 0 R >>\n%%EOF\n"
    )


@pytest.fixture
def upload_image(client, auth_headers):
    """Upload an in-memory image and return the response JSON data"""
    def _upload(name='photo.png', fmt='PNG', size=(640, 480), mimetype='image/png', **form):
        data = {'image': (io.BytesIO(image_bytes(fmt, size)), name, mimetype)}
        data.update(form)
        response = client.post('/api/images/upload', data=data, headers=auth_headers,
                               content_type='multipart/form-data')
        assert response.status_code == 201, response.get_json()
        return response.get_json()['data']
    return _upload
