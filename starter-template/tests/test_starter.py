"""
Critical tests for the Folio starter template.
Run with: pytest tests/test_starter.py -v
"""

import os
import sys
import pytest

# Add parent directory to path so we can import main
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


@pytest.fixture
def app():
    """Create application for testing."""
    from main import app
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def test_app_starts(app):
    """App should start without errors."""
    assert 'folio' in app.extensions


def test_health_endpoint(client):
    """Health endpoint should return 200."""
    response = client.get('/api/health')
    assert response.status_code == 200
    assert response.get_json()['message'] == 'Server is running'


def test_public_projects(client):
    """Project listing should be public."""
    response = client.get('/api/projects')
    assert response.status_code == 200
    assert response.get_json()['success'] is True


def test_admin_routes_need_token(client):
    """Admin routes should reject anonymous callers."""
    assert client.get('/api/contact/messages').status_code == 401
