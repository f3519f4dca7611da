"""
Blob Storage
============

Binary objects grouped in buckets ("images", "resume"), each stored under a
generated identifier with a metadata record beside it. Bytes live on the
local filesystem or in DigitalOcean Spaces; metadata lives in the document
store's ``blob_files`` table.
"""

import logging
import os

from .database import new_id, utcnow, to_json, from_json

logger = logging.getLogger(__name__)

CHUNK_SIZE = 255 * 1024


class LocalBackend:
    """Keep blob bytes under a directory on disk."""

    def __init__(self, root):
        self.root = root

    def _path(self, bucket, file_id):
        return os.path.join(self.root, bucket, file_id)

    def put(self, bucket, file_id, data, content_type):
        folder = os.path.join(self.root, bucket)
        os.makedirs(folder, exist_ok=True)
        with open(self._path(bucket, file_id), 'wb') as f:
            f.write(data)

    def get(self, bucket, file_id):
        with open(self._path(bucket, file_id), 'rb') as f:
            return f.read()

    def iter_chunks(self, bucket, file_id, chunk_size=CHUNK_SIZE):
        with open(self._path(bucket, file_id), 'rb') as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    def delete(self, bucket, file_id):
        path = self._path(bucket, file_id)
        if os.path.isfile(path):
            os.unlink(path)
            return True
        return False


class SpacesBackend:
    """Keep blob bytes in DigitalOcean Spaces via boto3."""

    def __init__(self, region, space_name, access_key, secret_key, prefix='folio'):
        self.region = region
        self.space_name = space_name
        self.access_key = access_key
        self.secret_key = secret_key
        self.prefix = prefix
        self._client = None

    @property
    def client(self):
        if self._client is None:
            import boto3
            self._client = boto3.client(
                's3',
                region_name=self.region,
                endpoint_url=f"https://{self.region}.digitaloceanspaces.com",
                aws_access_key_id=self.access_key,
                aws_secret_access_key=self.secret_key,
            )
        return self._client

    def _key(self, bucket, file_id):
        return f"{self.prefix}/{bucket}/{file_id}"

    def put(self, bucket, file_id, data, content_type):
        self.client.put_object(
            Bucket=self.space_name,
            Key=self._key(bucket, file_id),
            Body=data,
            ACL='private',
            ContentType=content_type,
        )

    def get(self, bucket, file_id):
        response = self.client.get_object(Bucket=self.space_name, Key=self._key(bucket, file_id))
        return response['Body'].read()

    def iter_chunks(self, bucket, file_id, chunk_size=CHUNK_SIZE):
        response = self.client.get_object(Bucket=self.space_name, Key=self._key(bucket, file_id))
        for chunk in response['Body'].iter_chunks(chunk_size):
            yield chunk

    def delete(self, bucket, file_id):
        self.client.delete_object(Bucket=self.space_name, Key=self._key(bucket, file_id))
        return True


def create_backend(config):
    """Pick the byte backend from a config mapping"""
    if config.get('STORAGE_BACKEND', 'local') == 'spaces':
        return SpacesBackend(
            region=config.get('DO_SPACES_REGION'),
            space_name=config.get('DO_SPACES_NAME'),
            access_key=config.get('DO_SPACES_KEY'),
            secret_key=config.get('DO_SPACES_SECRET'),
            prefix=config.get('SPACES_FOLDER', 'folio'),
        )
    return LocalBackend(config.get('BLOB_DIR'))


def _row_to_file(row):
    return {
        'id': row['id'],
        'filename': row['filename'],
        'contentType': row['content_type'],
        'length': row['length'],
        'uploadDate': row['upload_date'],
        'metadata': from_json(row['metadata'], {}),
    }


class BlobStore:
    """Metadata-indexed binary storage"""

    def __init__(self, db, backend):
        self.db = db
        self.backend = backend

    def upload(self, bucket, data, filename, content_type, metadata=None):
        """Store bytes and their metadata record; returns the file record"""
        file_id = new_id()
        self.backend.put(bucket, file_id, data, content_type)

        record = {
            'id': file_id,
            'filename': filename,
            'contentType': content_type,
            'length': len(data),
            'uploadDate': utcnow(),
            'metadata': metadata or {},
        }
        with self.db.connect() as conn:
            conn.execute('''
                INSERT INTO blob_files (id, bucket, filename, content_type, length, upload_date, metadata)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (file_id, bucket, filename, content_type, record['length'],
                  record['uploadDate'], to_json(record['metadata'])))
        logger.info(f"Stored {bucket}/{file_id} ({record['length']} bytes)")
        return record

    def get(self, bucket, file_id):
        """Metadata record for a file, or None"""
        with self.db.connect() as conn:
            row = conn.execute(
                'SELECT * FROM blob_files WHERE bucket = ? AND id = ?', (bucket, file_id)
            ).fetchone()
        return _row_to_file(row) if row else None

    def read(self, bucket, file_id):
        return self.backend.get(bucket, file_id)

    def stream(self, bucket, file_id):
        return self.backend.iter_chunks(bucket, file_id)

    def find(self, bucket, match=None, order='upload_date'):
        """All records in a bucket newest first, optionally filtered on metadata.

        ``match`` is a dict of metadata key/values that must all be equal.
        ``order`` is 'upload_date' or 'version' (metadata.version, highest first).
        """
        with self.db.connect() as conn:
            rows = conn.execute(
                'SELECT * FROM blob_files WHERE bucket = ? ORDER BY upload_date DESC, seq DESC',
                (bucket,)
            ).fetchall()
        files = [_row_to_file(row) for row in rows]

        if match:
            files = [f for f in files
                     if all(f['metadata'].get(k) == v for k, v in match.items())]
        if order == 'version':
            files.sort(key=lambda f: f['metadata'].get('version') or 0, reverse=True)
        return files

    def update_metadata(self, bucket, patch, file_id=None):
        """Merge ``patch`` into the metadata of one file, or every file in the bucket"""
        with self.db.connect() as conn:
            if file_id is None:
                rows = conn.execute(
                    'SELECT id, metadata FROM blob_files WHERE bucket = ?', (bucket,)
                ).fetchall()
            else:
                rows = conn.execute(
                    'SELECT id, metadata FROM blob_files WHERE bucket = ? AND id = ?', (bucket, file_id)
                ).fetchall()

            for row in rows:
                metadata = from_json(row['metadata'], {})
                metadata.update(patch)
                conn.execute('UPDATE blob_files SET metadata = ? WHERE id = ?',
                             (to_json(metadata), row['id']))
            return len(rows)

    def delete(self, bucket, file_id):
        """Remove bytes and metadata; False when the file is unknown"""
        with self.db.connect() as conn:
            cursor = conn.execute('DELETE FROM blob_files WHERE bucket = ? AND id = ?', (bucket, file_id))
            deleted = cursor.rowcount > 0
        if deleted:
            self.backend.delete(bucket, file_id)
            logger.info(f"Deleted {bucket}/{file_id}")
        return deleted
