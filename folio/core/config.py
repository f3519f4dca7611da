import os
from dotenv import load_dotenv

load_dotenv(override=True)


class Config:
    """
    Base configuration for the Folio backend.
    Host apps can override any of these through Flask's app.config.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')
    ENVIRONMENT = os.getenv('ENVIRONMENT', os.getenv('FLASK_ENV', 'development'))

    # Uploads are buffered in memory; per-file limits are enforced by the handlers
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', str(210 * 1024 * 1024)))
    MAX_UPLOAD_SIZE = 10 * 1024 * 1024

    # Auth
    JWT_SECRET = os.getenv('JWT_SECRET', 'dev-jwt-secret-change-in-production')
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES_DAYS = int(os.getenv('JWT_EXPIRES_DAYS', '7'))

    # Seed admin (used by `flask folio seed`)
    ADMIN_USERNAME = os.getenv('ADMIN_USERNAME')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD')
    ADMIN_EMAIL = os.getenv('ADMIN_EMAIL')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))
    FOLIO_DB = os.getenv('FOLIO_DB', os.path.join(DB_DIR, 'folio.db'))

    # Blob storage: 'local' keeps bytes under BLOB_DIR, 'spaces' uses DigitalOcean Spaces
    STORAGE_BACKEND = os.getenv('STORAGE_BACKEND', 'local')
    BLOB_DIR = os.getenv('BLOB_DIR', os.path.join(DB_DIR, 'blobs'))
    SPACES_FOLDER = os.getenv('SPACES_FOLDER', 'folio')
    DO_SPACES_REGION = os.getenv('DO_SPACES_REGION')
    DO_SPACES_NAME = os.getenv('DO_SPACES_NAME')
    DO_SPACES_KEY = os.getenv('DO_SPACES_KEY')
    DO_SPACES_SECRET = os.getenv('DO_SPACES_SECRET')

    # Frontend origins (comma separated) for CORS and resume iframe embedding
    CORS_ORIGIN = os.getenv('CORS_ORIGIN', 'http://localhost:5173')

    # Analytics
    ANALYTICS_RETENTION_DAYS = int(os.getenv('ANALYTICS_RETENTION_DAYS', '365'))
    ANALYTICS_SALT = os.getenv('ANALYTICS_SALT') or JWT_SECRET

    # Email settings
    # 'smtp' (Gmail by default) or 'resend'
    EMAIL_PROVIDER = os.getenv('EMAIL_PROVIDER', 'smtp')
    EMAIL_ADDRESS = os.getenv('EMAIL_ADDRESS') or os.getenv('SMTP_USER')
    EMAIL_PASSWORD = os.getenv('EMAIL_PASSWORD') or os.getenv('SMTP_PASS')
    EMAIL_HOST = os.getenv('EMAIL_HOST', 'smtp.gmail.com')
    EMAIL_PORT = int(os.getenv('EMAIL_PORT', '587'))
    RESEND_API_KEY = os.getenv('RESEND_API_KEY') or os.getenv('RESEND')
    EMAIL_ADMIN_EMAIL = os.getenv('EMAIL_ADMIN_EMAIL') or ADMIN_EMAIL
    EMAIL_ADMIN_URL = os.getenv('EMAIL_ADMIN_URL', CORS_ORIGIN.split(',')[0].strip() + '/admin/contacts')

    # Port for local server
    port = int(os.getenv('PORT', '5000'))


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val is not None:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val is not None:
        return val
    return os.getenv(key, default)


def get_allowed_origins():
    """Configured frontend origins as a list"""
    raw = get_config_value('CORS_ORIGIN', 'http://localhost:5173')
    if isinstance(raw, (list, tuple)):
        return [o.strip() for o in raw if o and o.strip()]
    return [o.strip() for o in raw.split(',') if o.strip()]
