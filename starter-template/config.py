import os
from dotenv import load_dotenv

load_dotenv()

IS_PRODUCTION = (
    os.getenv('ENVIRONMENT') == 'production' or
    os.getenv('FLASK_ENV') == 'production' or
    os.getenv('PRODUCTION') == '1'
)

DB_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'databases')


class Config:
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')
    ENVIRONMENT = 'production' if IS_PRODUCTION else 'development'

    # Storage
    DB_DIR = DB_DIR
    FOLIO_DB = os.path.join(DB_DIR, 'folio.db')
    STORAGE_BACKEND = os.getenv('STORAGE_BACKEND', 'local')

    # Auth
    JWT_SECRET = os.getenv('JWT_SECRET', 'dev-jwt-secret-change-in-production')
    ADMIN_USERNAME = os.getenv('ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD', '')
    ADMIN_EMAIL = os.getenv('ADMIN_EMAIL', '')

    # Frontend
    CORS_ORIGIN = os.getenv('CORS_ORIGIN', 'http://localhost:5173')

    # Email
    EMAIL_PROVIDER = os.getenv('EMAIL_PROVIDER', 'resend')
    RESEND_API_KEY = os.getenv('RESEND_API_KEY', '')
    EMAIL_ADDRESS = os.getenv('EMAIL_ADDRESS', '')
    EMAIL_ADMIN_EMAIL = os.getenv('EMAIL_ADMIN_EMAIL', '')
