"""
Folio Core
==========

Core utilities shared by the Folio API modules: configuration, the document
store, the blob store, logging and the error taxonomy.
"""

from .config import Config, get_config_value
from .database import Database, get_db, get_blobs
from .storage import BlobStore
from .logging_service import LoggingService, logger
from .errors import APIError, ValidationError, AuthenticationError, ForbiddenError, NotFoundError

__all__ = [
    'Config', 'get_config_value',
    'Database', 'get_db', 'get_blobs',
    'BlobStore',
    'LoggingService', 'logger',
    'APIError', 'ValidationError', 'AuthenticationError', 'ForbiddenError', 'NotFoundError',
]
