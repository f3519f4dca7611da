"""
Application log for the Folio backend.

Every entry goes to the ``folio`` console logger. Inside an app context it is
also written to the ``app_logs`` table together with the caller's IP, user
agent and request path, so admins can review what happened after the fact.
"""

import json
import logging
import traceback
from datetime import datetime, timedelta, timezone

from flask import request, has_request_context, has_app_context, current_app

console = logging.getLogger('folio')

LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _timestamp(delta=None):
    moment = datetime.now(timezone.utc)
    if delta is not None:
        moment -= delta
    return moment.strftime('%Y-%m-%dT%H:%M:%S.%fZ')


def _store():
    if not has_app_context():
        return None
    folio = current_app.extensions.get('folio')
    return folio.db if folio else None


def _request_info():
    """(ip, user agent, path) of the current request, or Nones"""
    if not has_request_context():
        return None, None, None
    forwarded = request.headers.get('X-Forwarded-For', '')
    ip = forwarded.split(',')[0].strip() if forwarded else request.remote_addr
    return ip, request.headers.get('User-Agent', ''), request.path


class LoggingService:
    """Console plus ``app_logs`` logging, addressed by source component"""

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Record one entry.

        Args:
            level (str): one of LEVELS, case-insensitive
            source (str): component name (auth, images, resume, security, ...)
            message (str): one-line summary
            details (str/dict): extra context; dicts are stored as JSON
            user_id (str): acting admin, when known
        """
        level = level.upper() if level.upper() in LEVELS else 'INFO'
        console.log(getattr(logging, level), f"[{source}] {message}")

        db = _store()
        if db is None:
            return

        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)
        ip, user_agent, path = _request_info()
        try:
            with db.connect() as conn:
                conn.execute(
                    'INSERT INTO app_logs (timestamp, level, source, message, details, '
                    'ip_address, user_agent, request_path, user_id) '
                    'VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)',
                    (_timestamp(), level, source, message, details, ip, user_agent, path, user_id)
                )
        except Exception as e:
            console.error(f"Could not write app log entry: {e}")

    @staticmethod
    def debug(source, message, details=None, user_id=None):
        LoggingService.log('DEBUG', source, message, details, user_id)

    @staticmethod
    def info(source, message, details=None, user_id=None):
        LoggingService.log('INFO', source, message, details, user_id)

    @staticmethod
    def warning(source, message, details=None, user_id=None):
        LoggingService.log('WARNING', source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def log_user_action(source, action, user_id=None, details=None):
        """Admin mutations: uploads, activations, deletions"""
        LoggingService.info(source, f"Admin action: {action}", details, user_id)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        payload = {
            'type': type(error).__name__,
            'message': str(error),
            'traceback': traceback.format_exc(),
        }
        if details:
            payload['context'] = details
        LoggingService.error(source, f"Unhandled {type(error).__name__}: {error}", payload)

    @staticmethod
    def log_security_event(message, details=None):
        """Failed logins and rejected tokens"""
        LoggingService.warning('security', message, details)

    @staticmethod
    def get_recent_logs(limit=100, level=None):
        db = _store()
        if db is None:
            return []
        query = 'SELECT * FROM app_logs'
        params = []
        if level:
            query += ' WHERE level = ?'
            params.append(level.upper())
        query += ' ORDER BY id DESC LIMIT ?'
        params.append(limit)
        with db.connect() as conn:
            return [dict(row) for row in conn.execute(query, params).fetchall()]

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Drop entries older than ``days_to_keep``; returns how many went"""
        db = _store()
        if db is None:
            return 0
        with db.connect() as conn:
            removed = conn.execute(
                'DELETE FROM app_logs WHERE timestamp < ?', (_timestamp(timedelta(days=days_to_keep)),)
            ).rowcount
        LoggingService.info('system', f"Removed {removed} log entries older than {days_to_keep} days")
        return removed


logger = LoggingService()
