"""
Visitor event ingestion and the admin statistics views.
"""

from unittest.mock import patch

import pytest

from folio.core.errors import ValidationError
from folio.modules.analytics import Analytics
from folio.modules.analytics.analytics import parse_date

CHROME_DESKTOP = ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
                  '(KHTML, like Gecko) Chrome/120.0 Safari/537.36')
SAFARI_IPHONE = ('Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 '
                 '(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1')


def track(client, ua=CHROME_DESKTOP, **payload):
    body = {'type': 'pageview', 'page': '/', 'sessionId': 's1'}
    body.update(payload)
    return client.post('/api/analytics/track', json=body, headers={'User-Agent': ua})


def test_track_event(client, auth_headers):
    response = track(client, page='/projects', elementId=' cta ', duration=3.5)
    assert response.status_code == 201
    assert response.get_json()['message'] == 'Event tracked'

    event = client.get('/api/analytics/events', headers=auth_headers).get_json()['data'][0]
    assert event['page'] == '/projects'
    assert event['elementId'] == 'cta'
    assert event['duration'] == 3.5
    assert event['visitorInfo']['browser'] == 'Chrome'
    assert event['visitorInfo']['os'] == 'Windows'
    assert event['visitorInfo']['device'] == 'desktop'
    assert event['visitorInfo']['referrer'] == 'direct'
    assert len(event['visitorInfo']['ipHash']) == 64


def test_track_requires_fields(client):
    response = client.post('/api/analytics/track', json={'type': 'pageview', 'page': '/'})
    assert response.status_code == 400


def test_track_swallows_failures(client):
    response = track(client, type='hover')
    assert response.status_code == 200
    assert response.get_json() == {'success': True, 'message': 'Event received'}

    with patch.object(Analytics, 'track', side_effect=RuntimeError('disk full')):
        response = track(client)
    assert response.status_code == 200


def test_stats(client, auth_headers):
    track(client, page='/', sessionId='a')
    track(client, page='/', sessionId='b', ua=SAFARI_IPHONE)
    track(client, page='/about', sessionId='a')
    track(client, type='click', page='/', sessionId='a')

    stats = client.get('/api/analytics/stats', headers=auth_headers).get_json()['data']

    assert stats['totalPageViews'] == 3
    assert stats['uniqueVisitors'] == 2
    assert stats['popularPages'][0] == {'page': '/', 'views': 2, 'uniqueVisitors': 2}
    assert {d['device']: d['count'] for d in stats['deviceBreakdown']} == {'desktop': 2, 'mobile': 1}
    assert {b['browser']: b['count'] for b in stats['browserBreakdown']} == {'Chrome': 2, 'Safari': 1}
    assert len(stats['dailyViews']) == 1
    assert stats['dailyViews'][0]['views'] == 3


def test_stats_filters(client, auth_headers):
    track(client, page='/')
    track(client, page='/about')

    stats = client.get('/api/analytics/stats?page=/about', headers=auth_headers).get_json()['data']
    assert stats['totalPageViews'] == 1

    stats = client.get('/api/analytics/stats?startDate=2999-01-01', headers=auth_headers).get_json()['data']
    assert stats['totalPageViews'] == 0

    response = client.get('/api/analytics/stats?endDate=yesterday', headers=auth_headers)
    assert response.status_code == 400


def test_recent_events_limit_and_type(client, auth_headers):
    for n in range(3):
        track(client, page=f'/p{n}')
    track(client, type='download', page='/cv')

    body = client.get('/api/analytics/events?limit=2', headers=auth_headers).get_json()
    assert body['count'] == 2
    assert body['data'][0]['type'] == 'download'

    body = client.get('/api/analytics/events?type=pageview', headers=auth_headers).get_json()
    assert [e['page'] for e in body['data']] == ['/p2', '/p1', '/p0']


def test_clear_events(client, auth_headers):
    track(client)
    track(client)

    response = client.delete('/api/analytics/clear', headers=auth_headers)
    assert response.get_json()['deletedCount'] == 2
    assert client.get('/api/analytics/events', headers=auth_headers).get_json()['count'] == 0


def test_admin_endpoints_require_token(client):
    assert client.get('/api/analytics/stats').status_code == 401
    assert client.get('/api/analytics/events').status_code == 401
    assert client.delete('/api/analytics/clear').status_code == 401


def test_purge_expired(app):
    with app.app_context():
        db = app.extensions['folio'].db
        with db.connect() as conn:
            conn.execute('''
                INSERT INTO analytics_events (id, type, page, session_id, ip_hash, timestamp)
                VALUES ('old', 'pageview', '/', 's', 'h', '2000-01-01T00:00:00.000000Z')
            ''')
        assert Analytics.purge_expired() == 1


def test_hash_ip_is_salted(app):
    with app.app_context():
        first = Analytics.hash_ip('1.2.3.4')
        assert first == Analytics.hash_ip('1.2.3.4')
        assert first != Analytics.hash_ip('1.2.3.5')
        app.config['ANALYTICS_SALT'] = 'other-salt'
        assert Analytics.hash_ip('1.2.3.4') != first


@pytest.mark.parametrize('ua, device, browser, os_name', [
    (CHROME_DESKTOP, 'desktop', 'Chrome', 'Windows'),
    (SAFARI_IPHONE, 'mobile', 'Safari', 'macOS'),
    (None, 'unknown', 'unknown', 'unknown'),
])
def test_user_agent_detection(ua, device, browser, os_name):
    assert Analytics.detect_device(ua) == device
    assert Analytics.detect_browser(ua) == browser
    assert Analytics.detect_os(ua) == os_name


def test_parse_date():
    assert parse_date('2024-05-01', 'startDate') == '2024-05-01T00:00:00.000000Z'
    with pytest.raises(ValidationError):
        parse_date('soon', 'startDate')


def test_track_rejects_non_object_body(client):
    response = client.post('/api/analytics/track', json=[1])
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Request body must be a JSON object'


def test_events_limit_zero_returns_everything(client, auth_headers):
    for n in range(3):
        track(client, page=f'/p{n}')

    body = client.get('/api/analytics/events?limit=0', headers=auth_headers).get_json()
    assert body['count'] == 3
