"""
Folio Galleries Module
======================

Named photo galleries (about, sailing, ...) built from images in the blob
store, with per-gallery carousel settings.
"""

from flask import Blueprint

galleries_bp = Blueprint('galleries', __name__, url_prefix='/api/galleries')

from . import routes

__all__ = ['galleries_bp']
