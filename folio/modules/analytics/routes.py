"""
Analytics API Routes
====================

POST   /api/analytics/track    record a visitor event (public)
GET    /api/analytics/stats    aggregated statistics
GET    /api/analytics/events   most recent events
DELETE /api/analytics/clear    delete every event
"""

import logging

from flask import request

from . import analytics_bp
from ...core.errors import ValidationError, success, handles_errors, json_body
from ...core.logging_service import LoggingService
from ..auth.utils import admin_required, current_user
from .analytics import Analytics, parse_date

logger = logging.getLogger(__name__)


@analytics_bp.route('/track', methods=['POST'])
def track_event():
    """Track visitor action. Storage failures are reported as received, never as errors."""
    data = json_body()
    event_type = data.get('type')
    page = data.get('page')
    session_id = data.get('sessionId')

    if not event_type or not page or not session_id:
        raise ValidationError('Missing required fields: type, page, sessionId')

    try:
        Analytics.track(
            event_type, page, session_id,
            ip_address=Analytics.get_client_ip(request),
            user_agent=request.headers.get('User-Agent'),
            referrer=request.headers.get('Referer') or request.headers.get('Referrer'),
            element_id=data.get('elementId'),
            duration=data.get('duration'),
        )
    except Exception as e:
        logger.warning(f"Track event error: {e}")
        return success(message='Event received')

    return success(message='Event tracked', status=201)


@analytics_bp.route('/stats', methods=['GET'])
@admin_required
@handles_errors('analytics', 'Failed to fetch analytics')
def get_stats():
    start_date = request.args.get('startDate')
    end_date = request.args.get('endDate')
    stats = Analytics.get_stats(
        event_type=request.args.get('type', 'pageview'),
        start_date=parse_date(start_date, 'startDate') if start_date else None,
        end_date=parse_date(end_date, 'endDate') if end_date else None,
        page=request.args.get('page'),
    )
    return success(data=stats)


@analytics_bp.route('/events', methods=['GET'])
@admin_required
@handles_errors('analytics', 'Failed to fetch events')
def get_recent_events():
    try:
        limit = max(int(request.args.get('limit', 50)), 0)
    except (TypeError, ValueError):
        limit = 50
    events = Analytics.get_recent_events(limit=limit, event_type=request.args.get('type'))
    return success(data=events, count=len(events))


@analytics_bp.route('/clear', methods=['DELETE'])
@admin_required
@handles_errors('analytics', 'Failed to clear analytics')
def clear_analytics():
    deleted = Analytics.clear_events()
    LoggingService.log_user_action('analytics', f"cleared {deleted} events", user_id=current_user()['id'])
    return success(message=f'Deleted {deleted} analytics events', deletedCount=deleted)
