"""
Folio - Portfolio CMS backend
=============================

REST API behind a personal portfolio site and its admin dashboard:
- Projects and photo galleries
- Image uploads with optimisation and thumbnails
- Versioned resume PDF
- Contact form with owner notifications
- Basic visit analytics

Usage:
    from flask import Flask
    from folio import Folio

    app = Flask(__name__)
    folio = Folio(app, {'features': {'analytics': False}})
"""

import logging
import os
from datetime import datetime, timezone

from flask import jsonify
from flask_cors import CORS

from .core.config import Config, get_allowed_origins
from .core.database import Database
from .core.errors import register_error_handlers
from .core.storage import BlobStore, create_backend

__version__ = '0.1.0'
__author__ = 'Laurence Stephan'

logger = logging.getLogger(__name__)

DEFAULT_FEATURES = {
    'auth': True,
    'images': True,
    'projects': True,
    'galleries': True,
    'contact': True,
    'analytics': True,
    'resume': True,
}


class Folio:
    """
    Flask extension wiring the Folio API into an app.

    Owns the document store, blob store and email service for that app and
    registers one blueprint per enabled feature.
    """

    def __init__(self, app=None, config=None):
        self.config = config or {}
        self.features = dict(DEFAULT_FEATURES)
        self.features.update(self.config.get('features', {}))
        self.registered_modules = []
        self.db = None
        self.blobs = None
        self.email = None

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self._apply_defaults(app)

        self.db = Database(app.config['FOLIO_DB'])
        self.db.init_schema()
        self.blobs = BlobStore(self.db, create_backend(app.config))

        from .modules.email import EmailService
        self.email = EmailService(app)

        app.extensions['folio'] = self

        register_error_handlers(app)
        with app.app_context():
            CORS(app, resources={r"/api/*": {"origins": get_allowed_origins()}}, supports_credentials=True)
        self._register_blueprints(app)
        self._register_health(app)

        from .cli import folio_cli
        app.cli.add_command(folio_cli)

        logger.info(f"Folio initialised with modules: {', '.join(self.registered_modules)}")

    def _apply_defaults(self, app):
        """Fill app.config from Config for every key the host app left unset"""
        for key in dir(Config):
            if key.isupper() and app.config.get(key) is None:
                app.config[key] = getattr(Config, key)

        # Paths derived from a host-supplied DB_DIR
        db_dir = app.config['DB_DIR']
        if app.config['FOLIO_DB'] == Config.FOLIO_DB and db_dir != Config.DB_DIR:
            app.config['FOLIO_DB'] = os.path.join(db_dir, "folio.db")
        if app.config['BLOB_DIR'] == Config.BLOB_DIR and db_dir != Config.DB_DIR:
            app.config['BLOB_DIR'] = os.path.join(db_dir, "blobs")

    def _register_blueprints(self, app):
        from .modules.auth import auth_bp
        from .modules.images import images_bp
        from .modules.projects import projects_bp
        from .modules.galleries import galleries_bp
        from .modules.contact import contact_bp
        from .modules.analytics import analytics_bp
        from .modules.resume import resume_bp

        blueprints = {
            'auth': auth_bp,
            'images': images_bp,
            'projects': projects_bp,
            'galleries': galleries_bp,
            'contact': contact_bp,
            'analytics': analytics_bp,
            'resume': resume_bp,
        }
        for name, blueprint in blueprints.items():
            if self.features.get(name):
                app.register_blueprint(blueprint)
                self.registered_modules.append(name)

    def _register_health(self, app):
        @app.route('/api/health')
        def health():
            return jsonify({
                'success': True,
                'message': 'Server is running',
                'timestamp': datetime.now(timezone.utc).isoformat(),
                'environment': app.config.get('ENVIRONMENT'),
            })

    def get_registered_modules(self):
        return list(self.registered_modules)


__all__ = ['Folio', '__version__']
