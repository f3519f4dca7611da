"""
Folio Resume Module
===================

Public retrieval of the active resume PDF and admin version management.
"""

from flask import Blueprint

resume_bp = Blueprint('resume', __name__, url_prefix='/api/resume')

from . import routes
from .versioning import ResumeVersions

__all__ = ['resume_bp', 'ResumeVersions']
