"""
Resume Versioning
=================

Keeps an ordered history of uploaded resume PDFs in the ``resume`` bucket of
the blob store. Exactly one version is meant to be active at a time; only the
five most recent uploads are retained.

The deactivate-all-then-activate-one sequence is two separate writes and is
not guarded by a lock, so concurrent uploads or activations can leave zero or
several versions active.
"""

import logging

from ...core.database import is_valid_id
from ...core.errors import ValidationError, NotFoundError
from ...core.uploads import is_pdf_upload, max_upload_size

logger = logging.getLogger(__name__)

BUCKET = 'resume'
RETENTION = 5


class ResumeVersions:
    """Version history of the resume file"""

    def __init__(self, blobs, retention=RETENTION):
        self.blobs = blobs
        self.retention = retention

    def _next_version(self):
        files = self.blobs.find(BUCKET, order='version')
        if not files:
            return 1
        return (files[0]['metadata'].get('version') or 0) + 1

    def upload(self, data, filename, content_type, uploaded_by=None):
        """Store a new version and make it the active one"""
        if data is None or not filename:
            raise ValidationError('No file uploaded')
        if not is_pdf_upload(filename, content_type):
            raise ValidationError('Only PDF files are allowed')
        if len(data) > max_upload_size():
            raise ValidationError('File size must be less than 10MB')

        version = self._next_version()
        self.blobs.update_metadata(BUCKET, {'active': False})
        record = self.blobs.upload(
            BUCKET, data, filename, content_type,
            metadata={'uploadedBy': uploaded_by, 'active': True, 'version': version},
        )
        self.prune()

        logger.info(f"Resume version {version} uploaded as {record['id']}")
        return {
            'id': record['id'],
            'filename': record['filename'],
            'size': record['length'],
            'version': version,
            'url': '/api/resume',
        }

    def prune(self):
        """Delete every version beyond the most recent ``retention`` uploads"""
        removed = []
        for stale in self.blobs.find(BUCKET)[self.retention:]:
            if self.blobs.delete(BUCKET, stale['id']):
                removed.append(stale['id'])
        if removed:
            logger.info(f"Pruned {len(removed)} old resume version(s)")
        return removed

    def activate(self, file_id):
        if not is_valid_id(file_id):
            raise ValidationError('Invalid resume ID')
        record = self.blobs.get(BUCKET, file_id)
        if not record:
            raise NotFoundError('Resume version not found')

        self.blobs.update_metadata(BUCKET, {'active': False})
        self.blobs.update_metadata(BUCKET, {'active': True}, file_id=file_id)
        return {
            'id': record['id'],
            'filename': record['filename'],
            'version': record['metadata'].get('version'),
        }

    def active(self):
        """Newest version flagged active, or None"""
        files = self.blobs.find(BUCKET, match={'active': True})
        return files[0] if files else None

    def versions(self):
        return [{
            'id': f['id'],
            'filename': f['filename'],
            'size': f['length'],
            'uploadDate': f['uploadDate'],
            'active': bool(f['metadata'].get('active')),
            'version': f['metadata'].get('version') or 1,
        } for f in self.blobs.find(BUCKET)]

    def delete_active(self):
        """Remove the active version; no other version is promoted"""
        current = self.active()
        if not current:
            raise NotFoundError('No active resume found')
        self.blobs.delete(BUCKET, current['id'])
        return current

    def stream(self, file_id):
        return self.blobs.stream(BUCKET, file_id)
