"""
Folio Analytics Module
======================

Privacy-light visit tracking for the portfolio site.

Provides:
- Public event ingestion (pageview, click, download, form_submit)
- Hashed visitor IPs and user-agent derived browser/OS/device
- Admin statistics, recent events and a clear-all endpoint
"""

from flask import Blueprint

analytics_bp = Blueprint('analytics', __name__, url_prefix='/api/analytics')

from . import routes
from .analytics import Analytics

__all__ = ['analytics_bp', 'Analytics']
