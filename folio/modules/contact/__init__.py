"""
Folio Contact Module
====================

Public contact form with an owner notification email, and an admin inbox
for reading, annotating and archiving messages.
"""

from flask import Blueprint

contact_bp = Blueprint('contact', __name__, url_prefix='/api/contact')

from . import routes

__all__ = ['contact_bp']
