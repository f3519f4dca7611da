"""
Multipart upload checks shared by the image and resume endpoints.
Files are read fully into memory before any store is touched.
"""

import os
import re

from .config import get_config_value
from .errors import ValidationError

IMAGE_TYPES = re.compile(r'jpeg|jpg|png|gif|webp')


def _extension(filename):
    return os.path.splitext(filename or '')[1].lower()


def max_upload_size():
    return int(get_config_value('MAX_UPLOAD_SIZE', 10 * 1024 * 1024))


def read_file(file_storage, missing_message='No file uploaded'):
    """Return (bytes, filename, mimetype) of a werkzeug FileStorage, or raise"""
    if file_storage is None or not file_storage.filename:
        raise ValidationError(missing_message)
    data = file_storage.read()
    if len(data) > max_upload_size():
        raise ValidationError('File too large. Maximum size is 10MB')
    return data, file_storage.filename, file_storage.mimetype or ''


def is_image_upload(filename, mimetype):
    """Extension and MIME type must both name an allowed image format"""
    return bool(IMAGE_TYPES.search(_extension(filename))) and bool(IMAGE_TYPES.search(mimetype or ''))


def is_pdf_upload(filename, mimetype):
    return _extension(filename) == '.pdf' and mimetype == 'application/pdf'
