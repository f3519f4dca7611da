import json
import os
import re
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

_ID_PATTERN = re.compile(r'^[0-9a-f]{32}$')


def new_id():
    """Generate a document / blob identifier"""
    return uuid.uuid4().hex


def is_valid_id(value):
    return isinstance(value, str) and bool(_ID_PATTERN.match(value))


def utcnow():
    """Current UTC time as a sortable ISO-8601 string (always with microseconds)"""
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


def to_json(value):
    return json.dumps(value) if value is not None else None


def from_json(value, default=None):
    if value is None or value == '':
        return default
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return default


class Database:
    """
    Document store handle.

    One instance is owned by the Folio extension and reached through
    ``current_app.extensions['folio'].db``. Each collection is a table;
    nested fields are stored as JSON text columns.
    """

    def __init__(self, path):
        self.path = path

    def ensure_directory(self):
        db_dir = os.path.dirname(self.path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    @contextmanager
    def connect(self):
        """Open a connection, commit on success, roll back on error"""
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_schema(self):
        """Create every collection table the API uses"""
        self.ensure_directory()
        with self.connect() as conn:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    username TEXT UNIQUE NOT NULL,
                    email TEXT,
                    password_hash TEXT NOT NULL,
                    role TEXT NOT NULL DEFAULT 'admin',
                    last_login TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS projects (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    short_description TEXT NOT NULL,
                    full_description TEXT NOT NULL,
                    thumbnail_image_id TEXT NOT NULL,
                    detail_image_ids TEXT,
                    pdf_file_id TEXT,
                    category TEXT NOT NULL DEFAULT 'other',
                    tags TEXT,
                    featured INTEGER NOT NULL DEFAULT 0,
                    sort_order INTEGER NOT NULL DEFAULT 0,
                    external_links TEXT,
                    metadata TEXT,
                    published INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_projects_order ON projects(sort_order)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_projects_published ON projects(published, featured)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_projects_category ON projects(category)')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS galleries (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL UNIQUE,
                    display_name TEXT NOT NULL,
                    description TEXT,
                    images TEXT NOT NULL DEFAULT '[]',
                    settings TEXT NOT NULL,
                    active INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_galleries_active ON galleries(active)')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS contacts (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL,
                    subject TEXT,
                    message TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'new',
                    ip_address TEXT NOT NULL,
                    user_agent TEXT,
                    sent_at TEXT NOT NULL,
                    read_at TEXT,
                    replied_at TEXT,
                    notes TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            ''')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_contacts_sent ON contacts(sent_at DESC)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_contacts_status ON contacts(status, sent_at DESC)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_contacts_email ON contacts(email)')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS analytics_events (
                    id TEXT PRIMARY KEY,
                    type TEXT NOT NULL,
                    page TEXT NOT NULL,
                    element_id TEXT,
                    session_id TEXT NOT NULL,
                    ip_hash TEXT NOT NULL,
                    user_agent TEXT,
                    browser TEXT,
                    os TEXT,
                    device TEXT DEFAULT 'unknown',
                    referrer TEXT,
                    timestamp TEXT NOT NULL,
                    duration REAL
                )
            ''')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_analytics_timestamp ON analytics_events(timestamp DESC)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_analytics_page ON analytics_events(page, timestamp DESC)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_analytics_session ON analytics_events(session_id)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_analytics_type ON analytics_events(type, timestamp DESC)')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS blob_files (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    bucket TEXT NOT NULL,
                    filename TEXT NOT NULL,
                    content_type TEXT NOT NULL,
                    length INTEGER NOT NULL,
                    upload_date TEXT NOT NULL,
                    metadata TEXT
                )
            ''')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_blobs_bucket ON blob_files(bucket, upload_date DESC)')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS app_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    level TEXT NOT NULL,
                    source TEXT NOT NULL,
                    message TEXT NOT NULL,
                    details TEXT,
                    ip_address TEXT,
                    user_agent TEXT,
                    request_path TEXT,
                    user_id TEXT
                )
            ''')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_logs_timestamp ON app_logs(timestamp DESC)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_logs_level ON app_logs(level)')


def get_db():
    """Document store of the current app"""
    from flask import current_app
    return current_app.extensions['folio'].db


def get_blobs():
    """Blob store of the current app"""
    from flask import current_app
    return current_app.extensions['folio'].blobs
