"""
Resume version history: one active version, five retained, activation.
"""

import io

import pytest

from folio.core.errors import ValidationError, NotFoundError
from folio.modules.resume.versioning import ResumeVersions

from conftest import pdf_bytes


def upload(client, headers, label, filename=None, mimetype='application/pdf'):
    return client.post(
        '/api/resume/upload',
        data={'resume': (io.BytesIO(pdf_bytes(label)), filename or f'{label}.pdf', mimetype)},
        headers=headers,
        content_type='multipart/form-data',
    )


def active_versions(versions):
    return [v for v in versions if v['active']]


def test_upload_creates_active_version(client, auth_headers):
    response = upload(client, auth_headers, 'R1')
    body = response.get_json()

    assert response.status_code == 201
    assert body['data']['version'] == 1
    assert body['data']['url'] == '/api/resume'
    assert body['data']['filename'] == 'R1.pdf'


def test_six_uploads_keep_latest_five(client, auth_headers):
    for n in range(1, 7):
        assert upload(client, auth_headers, f'R{n}').status_code == 201

    body = client.get('/api/resume/versions', headers=auth_headers).get_json()
    names = [v['filename'] for v in body['data']]

    assert body['count'] == 5
    assert names == ['R6.pdf', 'R5.pdf', 'R4.pdf', 'R3.pdf', 'R2.pdf']
    assert [v['filename'] for v in active_versions(body['data'])] == ['R6.pdf']
    assert body['data'][0]['version'] == 6


def test_each_upload_leaves_exactly_one_active(client, auth_headers):
    for n in range(1, 4):
        upload(client, auth_headers, f'R{n}')
        versions = client.get('/api/resume/versions', headers=auth_headers).get_json()['data']
        assert len(active_versions(versions)) == 1


def test_activate_older_version(client, auth_headers):
    first = upload(client, auth_headers, 'R1').get_json()['data']
    upload(client, auth_headers, 'R2')

    response = client.patch(f"/api/resume/activate/{first['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.get_json()['data']['version'] == 1

    versions = client.get('/api/resume/versions', headers=auth_headers).get_json()['data']
    assert [v['id'] for v in active_versions(versions)] == [first['id']]

    served = client.get('/api/resume')
    assert b'R1' in served.data


def test_activate_invalid_and_unknown_ids(client, auth_headers):
    assert client.patch('/api/resume/activate/not-an-id', headers=auth_headers).status_code == 400
    assert client.patch('/api/resume/activate/' + 'a' * 32, headers=auth_headers).status_code == 404


def test_public_get_streams_active_pdf(client, auth_headers):
    upload(client, auth_headers, 'R1')

    response = client.get('/api/resume')
    assert response.status_code == 200
    assert response.mimetype == 'application/pdf'
    assert response.data.startswith(b'%PDF')
    assert response.headers['Cache-Control'] == 'public, max-age=3600'
    assert 'inline; filename="R1.pdf"' == response.headers['Content-Disposition']

    csp = response.headers['Content-Security-Policy']
    assert csp.startswith("frame-ancestors 'self'")
    for origin in ('https://example.com', 'https://www.example.com', 'http://localhost:5173'):
        assert origin in csp


def test_public_get_without_resume(client):
    response = client.get('/api/resume')
    assert response.status_code == 404
    assert response.get_json()['message'] == 'No resume found'


def test_rejects_non_pdf(client, auth_headers):
    response = upload(client, auth_headers, 'R1', filename='resume.docx', mimetype='application/msword')
    assert response.status_code == 400
    assert client.get('/api/resume/versions', headers=auth_headers).get_json()['count'] == 0


def test_rejects_missing_file(client, auth_headers):
    response = client.post('/api/resume/upload', data={}, headers=auth_headers,
                           content_type='multipart/form-data')
    assert response.status_code == 400


def test_rejects_oversized_pdf(app, client, auth_headers):
    big = b'%PDF-1.4\n' + b'0' * (10 * 1024 * 1024 + 1)
    response = client.post(
        '/api/resume/upload',
        data={'resume': (io.BytesIO(big), 'big.pdf', 'application/pdf')},
        headers=auth_headers,
        content_type='multipart/form-data',
    )
    assert response.status_code == 400
    assert client.get('/api/resume/versions', headers=auth_headers).get_json()['count'] == 0


def test_info_and_delete_active(client, auth_headers):
    upload(client, auth_headers, 'R1')
    upload(client, auth_headers, 'R2')

    info = client.get('/api/resume/info', headers=auth_headers).get_json()['data']
    assert info['filename'] == 'R2.pdf'
    assert info['metadata']['active'] is True

    assert client.delete('/api/resume', headers=auth_headers).status_code == 200

    versions = client.get('/api/resume/versions', headers=auth_headers).get_json()['data']
    assert [v['filename'] for v in versions] == ['R1.pdf']
    assert active_versions(versions) == []
    assert client.get('/api/resume').status_code == 404
    assert client.delete('/api/resume', headers=auth_headers).status_code == 404


def test_admin_endpoints_require_token(client):
    assert client.get('/api/resume/versions').status_code == 401
    assert client.get('/api/resume/info').status_code == 401


# ---------------------------------------------------------------------------
# ResumeVersions used directly
# ---------------------------------------------------------------------------

def test_versions_object_validation(app):
    with app.app_context():
        versions = ResumeVersions(app.extensions['folio'].blobs)
        with pytest.raises(ValidationError):
            versions.upload(pdf_bytes(), 'cv.txt', 'text/plain')
        with pytest.raises(NotFoundError):
            versions.delete_active()
        assert versions.active() is None


def test_versions_object_custom_retention(app):
    with app.app_context():
        versions = ResumeVersions(app.extensions['folio'].blobs, retention=2)
        for n in range(4):
            versions.upload(pdf_bytes(str(n)), f'v{n}.pdf', 'application/pdf', uploaded_by='tester')

        history = versions.versions()
        assert [v['version'] for v in history] == [4, 3]
        assert versions.active()['filename'] == 'v3.pdf'
