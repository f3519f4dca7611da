"""
Folio Images Module
===================

Image upload, optimisation, thumbnailing and public delivery from the
``images`` bucket of the blob store.
"""

from flask import Blueprint

images_bp = Blueprint('images', __name__, url_prefix='/api/images')

from . import routes

__all__ = ['images_bp']
