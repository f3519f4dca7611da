"""
My Portfolio API
================

Flask app serving the portfolio frontend through Folio.

Run with:
    python main.py

Seed the admin account and default galleries with:
    flask --app main folio seed
"""

import os
from flask import Flask

# ===== App Setup =====

app = Flask(__name__)

# Load config
from config import Config
app.config['SECRET_KEY'] = Config.SECRET_KEY
app.config['ENVIRONMENT'] = Config.ENVIRONMENT
app.config['DB_DIR'] = Config.DB_DIR
app.config['FOLIO_DB'] = Config.FOLIO_DB
app.config['STORAGE_BACKEND'] = Config.STORAGE_BACKEND
app.config['JWT_SECRET'] = Config.JWT_SECRET
app.config['ADMIN_USERNAME'] = Config.ADMIN_USERNAME
app.config['ADMIN_PASSWORD'] = Config.ADMIN_PASSWORD
app.config['ADMIN_EMAIL'] = Config.ADMIN_EMAIL
app.config['CORS_ORIGIN'] = Config.CORS_ORIGIN

# Email
app.config['EMAIL_PROVIDER'] = Config.EMAIL_PROVIDER
app.config['RESEND_API_KEY'] = Config.RESEND_API_KEY
app.config['EMAIL_ADDRESS'] = Config.EMAIL_ADDRESS
app.config['EMAIL_ADMIN_EMAIL'] = Config.EMAIL_ADMIN_EMAIL

# Ensure database directory exists
os.makedirs(Config.DB_DIR, exist_ok=True)

# ===== Folio =====

from folio import Folio
folio = Folio(app)


# ===== Run =====

if __name__ == '__main__':
    print("[STARTER] Starting on port 5000...")
    app.run(debug=not Config.ENVIRONMENT == 'production', port=int(os.getenv('PORT', '5000')), host='0.0.0.0')
