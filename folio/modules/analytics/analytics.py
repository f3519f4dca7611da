import hashlib
import re
from datetime import datetime, timedelta, timezone

from ...core.config import get_config_value
from ...core.database import get_db, new_id, utcnow
from ...core.errors import ValidationError

EVENT_TYPES = ('pageview', 'click', 'download', 'form_submit')


def _iso(dt):
    return dt.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


def parse_date(value, label):
    """Parse an ISO date/datetime query value into the stored timestamp format"""
    try:
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except (AttributeError, ValueError):
        raise ValidationError(f'Invalid {label}')
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return _iso(parsed)


def _row_to_event(row):
    return {
        'id': row['id'],
        'type': row['type'],
        'page': row['page'],
        'elementId': row['element_id'],
        'sessionId': row['session_id'],
        'visitorInfo': {
            'ipHash': row['ip_hash'],
            'userAgent': row['user_agent'],
            'browser': row['browser'],
            'os': row['os'],
            'device': row['device'],
            'referrer': row['referrer'],
        },
        'timestamp': row['timestamp'],
        'duration': row['duration'],
    }


class Analytics:

    @staticmethod
    def get_client_ip(request):
        """Extract client IP from request, handling proxies"""
        forwarded_ip = request.headers.get('X-Forwarded-For')
        if forwarded_ip:
            return forwarded_ip.split(',')[0].strip()

        real_ip = request.headers.get('X-Real-IP')
        if real_ip:
            return real_ip

        return request.remote_addr or 'unknown'

    @staticmethod
    def hash_ip(ip):
        salt = get_config_value('ANALYTICS_SALT') or get_config_value('JWT_SECRET') or ''
        return hashlib.sha256(f"{ip}{salt}".encode()).hexdigest()

    @staticmethod
    def detect_device(user_agent):
        if not user_agent:
            return 'unknown'
        if re.search(r'mobile', user_agent, re.I):
            return 'mobile'
        if re.search(r'tablet|ipad', user_agent, re.I):
            return 'tablet'
        return 'desktop'

    @staticmethod
    def detect_browser(user_agent):
        if not user_agent:
            return 'unknown'
        if re.search(r'chrome', user_agent, re.I) and not re.search(r'edge|edg', user_agent, re.I):
            return 'Chrome'
        if re.search(r'safari', user_agent, re.I) and not re.search(r'chrome', user_agent, re.I):
            return 'Safari'
        if re.search(r'firefox', user_agent, re.I):
            return 'Firefox'
        if re.search(r'edge|edg', user_agent, re.I):
            return 'Edge'
        return 'Other'

    @staticmethod
    def detect_os(user_agent):
        if not user_agent:
            return 'unknown'
        if re.search(r'windows', user_agent, re.I):
            return 'Windows'
        if re.search(r'mac', user_agent, re.I):
            return 'macOS'
        if re.search(r'linux', user_agent, re.I):
            return 'Linux'
        if re.search(r'android', user_agent, re.I):
            return 'Android'
        if re.search(r'ios|iphone|ipad', user_agent, re.I):
            return 'iOS'
        return 'Other'

    @staticmethod
    def purge_expired(retention_days=None):
        """Delete events older than the retention window; returns the count removed"""
        if retention_days is None:
            retention_days = int(get_config_value('ANALYTICS_RETENTION_DAYS', 365))
        cutoff = _iso(datetime.now(timezone.utc) - timedelta(days=retention_days))
        with get_db().connect() as conn:
            cursor = conn.execute('DELETE FROM analytics_events WHERE timestamp < ?', (cutoff,))
            return cursor.rowcount

    @staticmethod
    def track(event_type, page, session_id, ip_address, user_agent=None, referrer=None,
              element_id=None, duration=None):
        """Record one visitor event; raises ValidationError on bad field values"""
        if event_type not in EVENT_TYPES:
            raise ValidationError(f"Event type must be one of: {', '.join(EVENT_TYPES)}")
        if duration is not None:
            if isinstance(duration, bool) or not isinstance(duration, (int, float)) or duration < 0:
                raise ValidationError('Duration must be a non-negative number')

        event_id = new_id()
        with get_db().connect() as conn:
            conn.execute('''
                INSERT INTO analytics_events
                (id, type, page, element_id, session_id, ip_hash, user_agent, browser, os, device,
                 referrer, timestamp, duration)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                event_id, event_type, str(page).strip(),
                element_id.strip() if isinstance(element_id, str) else element_id,
                str(session_id), Analytics.hash_ip(ip_address), user_agent,
                Analytics.detect_browser(user_agent), Analytics.detect_os(user_agent),
                Analytics.detect_device(user_agent), referrer or 'direct', utcnow(), duration,
            ))
        Analytics.purge_expired()
        return event_id

    @staticmethod
    def get_stats(event_type='pageview', start_date=None, end_date=None, page=None):
        conditions = ['type = ?']
        params = [event_type]
        if start_date:
            conditions.append('timestamp >= ?')
            params.append(start_date)
        if end_date:
            conditions.append('timestamp <= ?')
            params.append(end_date)
        if page:
            conditions.append('page = ?')
            params.append(page)
        where = 'WHERE ' + ' AND '.join(conditions)

        with get_db().connect() as conn:
            cursor = conn.cursor()

            cursor.execute(f'SELECT COUNT(*), COUNT(DISTINCT session_id) FROM analytics_events {where}', params)
            total_views, unique_visitors = cursor.fetchone()

            cursor.execute(f'''
                SELECT page, COUNT(*) AS views, COUNT(DISTINCT session_id) AS unique_visitors
                FROM analytics_events {where}
                GROUP BY page ORDER BY views DESC LIMIT 10
            ''', params)
            popular_pages = [
                {'page': row['page'], 'views': row['views'], 'uniqueVisitors': row['unique_visitors']}
                for row in cursor.fetchall()
            ]

            cursor.execute(f'''
                SELECT device, COUNT(*) AS count FROM analytics_events {where}
                GROUP BY device ORDER BY count DESC
            ''', params)
            device_breakdown = [{'device': row['device'], 'count': row['count']} for row in cursor.fetchall()]

            cursor.execute(f'''
                SELECT substr(timestamp, 1, 10) AS day, COUNT(*) AS views FROM analytics_events {where}
                GROUP BY day ORDER BY day ASC LIMIT 90
            ''', params)
            daily_views = [{'date': row['day'], 'views': row['views']} for row in cursor.fetchall()]

            cursor.execute(f'''
                SELECT browser, COUNT(*) AS count FROM analytics_events {where}
                GROUP BY browser ORDER BY count DESC
            ''', params)
            browser_breakdown = [{'browser': row['browser'], 'count': row['count']} for row in cursor.fetchall()]

        return {
            'totalPageViews': total_views,
            'uniqueVisitors': unique_visitors,
            'popularPages': popular_pages,
            'deviceBreakdown': device_breakdown,
            'dailyViews': daily_views,
            'browserBreakdown': browser_breakdown,
        }

    @staticmethod
    def get_recent_events(limit=50, event_type=None):
        """Newest events first; ``limit=0`` returns every event"""
        query = 'SELECT * FROM analytics_events'
        params = []
        if event_type:
            query += ' WHERE type = ?'
            params.append(event_type)
        query += ' ORDER BY timestamp DESC LIMIT ?'
        params.append(limit or -1)
        with get_db().connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_event(row) for row in rows]

    @staticmethod
    def clear_events():
        with get_db().connect() as conn:
            cursor = conn.execute('DELETE FROM analytics_events')
            return cursor.rowcount
