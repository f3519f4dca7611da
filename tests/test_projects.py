"""
Projects API: public visibility, admin management and ordering.
"""

import pytest

from folio.core.errors import ValidationError
from folio.modules.projects.validation import clean_project

THUMB_ID = 'a' * 32


def project_payload(**overrides):
    payload = {
        'title': 'Sea Ice Modelling',
        'shortDescription': 'Thesis project',
        'fullDescription': 'A longer write-up of the thesis.',
        'thumbnailImageId': THUMB_ID,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_project(client, auth_headers):
    def _create(**overrides):
        response = client.post('/api/projects', json=project_payload(**overrides), headers=auth_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()['data']
    return _create


def test_create_project_defaults(create_project):
    project = create_project(tags=[' Python ', 'ML'])

    assert project['category'] == 'other'
    assert project['published'] is False
    assert project['featured'] is False
    assert project['order'] == 0
    assert project['tags'] == ['python', 'ml']
    assert project['thumbnailUrl'] == f'/api/images/{THUMB_ID}'
    assert project['createdAt'].endswith('Z')


def test_create_requires_core_fields(client, auth_headers):
    response = client.post('/api/projects', json={'title': 'Only a title'}, headers=auth_headers)
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Please provide title, short description, and full description'

    response = client.post('/api/projects', json=project_payload(thumbnailImageId=None), headers=auth_headers)
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Please provide a thumbnail image'


def test_create_rejects_bad_fields(client, auth_headers):
    assert client.post('/api/projects', json=project_payload(title='x' * 201),
                       headers=auth_headers).status_code == 400
    assert client.post('/api/projects', json=project_payload(category='poetry'),
                       headers=auth_headers).status_code == 400
    assert client.post('/api/projects', json=project_payload(thumbnailImageId='nope'),
                       headers=auth_headers).status_code == 400


def test_create_requires_admin(client):
    assert client.post('/api/projects', json=project_payload()).status_code == 401


def test_public_listing_shows_published_only(client, create_project):
    create_project(title='Draft')
    published = create_project(title='Live', published=True)

    body = client.get('/api/projects').get_json()
    assert body['count'] == 1
    assert body['data'][0]['id'] == published['id']

    # A visitor cannot opt into drafts
    body = client.get('/api/projects?published=false').get_json()
    assert [p['title'] for p in body['data']] == ['Live']


def test_admin_listing_sees_drafts(client, auth_headers, create_project):
    create_project(title='Draft')
    create_project(title='Live', published=True)

    body = client.get('/api/projects', headers=auth_headers).get_json()
    assert body['total'] == 2

    body = client.get('/api/projects?published=false', headers=auth_headers).get_json()
    assert [p['title'] for p in body['data']] == ['Draft']


def test_listing_filters_and_pagination(client, create_project):
    create_project(title='A', category='research', featured=True, published=True, order=2)
    create_project(title='B', category='code', published=True, order=1)
    create_project(title='C', category='research', published=True, order=3)

    body = client.get('/api/projects?category=Research').get_json()
    assert [p['title'] for p in body['data']] == ['A', 'C']

    body = client.get('/api/projects?featured=true').get_json()
    assert [p['title'] for p in body['data']] == ['A']

    body = client.get('/api/projects?limit=1&skip=1').get_json()
    assert body['count'] == 1
    assert body['total'] == 3
    assert body['data'][0]['title'] == 'A'


def test_get_project_visibility(client, auth_headers, create_project):
    draft = create_project()

    assert client.get(f"/api/projects/{draft['id']}").status_code == 404
    assert client.get(f"/api/projects/{draft['id']}", headers=auth_headers).status_code == 200
    assert client.get('/api/projects/not-an-id').status_code == 400


def test_update_project(client, auth_headers, create_project):
    project = create_project()

    response = client.put(f"/api/projects/{project['id']}", json={
        'title': 'Renamed',
        'externalLinks': [{'type': 'github', 'url': 'https://github.com/x/y'}],
        'metadata': {'organization': 'Uni', 'ignored': 'yes'},
    }, headers=auth_headers)
    data = response.get_json()['data']

    assert response.status_code == 200
    assert data['title'] == 'Renamed'
    assert data['shortDescription'] == 'Thesis project'
    assert data['externalLinks'][0]['type'] == 'github'
    assert data['metadata'] == {'organization': 'Uni'}


def test_update_rejects_bad_link_and_unknown_project(client, auth_headers, create_project):
    project = create_project()
    response = client.put(f"/api/projects/{project['id']}",
                          json={'externalLinks': [{'type': 'blog', 'url': 'https://x'}]},
                          headers=auth_headers)
    assert response.status_code == 400

    assert client.put('/api/projects/' + 'f' * 32, json={'title': 'x'},
                      headers=auth_headers).status_code == 404


def test_delete_project(client, auth_headers, create_project):
    project = create_project()

    response = client.delete(f"/api/projects/{project['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.get_json()['message'] == 'Project deleted successfully'
    assert client.delete(f"/api/projects/{project['id']}", headers=auth_headers).status_code == 404


def test_reorder_projects(client, auth_headers, create_project):
    first = create_project(title='First', published=True)
    second = create_project(title='Second', published=True)

    response = client.patch('/api/projects/reorder', json={'projects': [
        {'id': first['id'], 'order': 5},
        {'id': second['id'], 'order': 1},
        {'id': 'bogus', 'order': 0},
    ]}, headers=auth_headers)
    assert response.status_code == 200

    body = client.get('/api/projects?sort=order').get_json()
    assert [p['title'] for p in body['data']] == ['Second', 'First']


def test_reorder_requires_array(client, auth_headers):
    response = client.patch('/api/projects/reorder', json={'projects': 'nope'}, headers=auth_headers)
    assert response.status_code == 400


def test_toggle_publish_flips(client, auth_headers, create_project):
    project = create_project()
    url = f"/api/projects/{project['id']}/toggle-publish"

    assert client.patch(url, headers=auth_headers).get_json()['data']['published'] is True
    assert client.patch(url, headers=auth_headers).get_json()['data']['published'] is False
    assert client.patch('/api/projects/' + 'e' * 32 + '/toggle-publish',
                        headers=auth_headers).status_code == 404


def test_toggle_publish_leaves_other_fields(client, auth_headers, create_project):
    project = create_project(
        category='research', tags=['ice'], featured=True, order=4,
        detailImageIds=['b' * 32], pdfFileId='c' * 32,
        externalLinks=[{'type': 'paper', 'url': 'https://example.com/paper', 'label': 'Paper'}],
        metadata={'date': '2024', 'organization': 'Uni', 'location': 'Oslo'},
    )

    toggled = client.patch(f"/api/projects/{project['id']}/toggle-publish",
                           headers=auth_headers).get_json()['data']

    assert toggled['published'] is True
    for field in ('title', 'shortDescription', 'fullDescription', 'thumbnailImageId',
                  'detailImageIds', 'pdfFileId', 'category', 'tags', 'featured', 'order',
                  'externalLinks', 'metadata', 'createdAt'):
        assert toggled[field] == project[field], field


def test_non_object_body_rejected(client, auth_headers, create_project):
    project = create_project()

    assert client.post('/api/projects', json=[1], headers=auth_headers).status_code == 400
    response = client.put(f"/api/projects/{project['id']}", json=['title'], headers=auth_headers)
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Request body must be a JSON object'
    assert client.patch('/api/projects/reorder', json=[], headers=auth_headers).status_code == 400


def test_limit_zero_returns_everything(client, create_project):
    for title in ('A', 'B', 'C'):
        create_project(title=title, published=True)

    body = client.get('/api/projects?limit=0').get_json()
    assert body['count'] == 3
    assert body['total'] == 3


def test_clean_project_partial_only_touches_given_fields():
    assert clean_project({'featured': 'true'}, partial=True) == {'featured': True}


def test_clean_project_rejects_bad_detail_ids():
    with pytest.raises(ValidationError):
        clean_project(dict(project_payload(), detailImageIds=['nope']))
