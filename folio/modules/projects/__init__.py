"""
Folio Projects Module
=====================

Portfolio projects: public listing of published work and admin management.

Provides:
- Published/featured/category filtering and ordering
- Create, update and delete
- Drag-and-drop reordering
- Publish toggle
"""

from flask import Blueprint

projects_bp = Blueprint('projects', __name__, url_prefix='/api/projects')

from . import routes

__all__ = ['projects_bp']
