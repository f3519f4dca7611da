"""
Images API Routes
=================

POST   /api/images/upload            single image (field ``image``)
POST   /api/images/upload-multiple   up to 20 images (field ``images``)
GET    /api/images/<id>              image bytes (public)
GET    /api/images/<id>/metadata     stored metadata (public)
DELETE /api/images/<id>              image and its thumbnails
"""

import logging

from flask import Response, request, stream_with_context

from . import images_bp
from ...core.database import get_blobs, is_valid_id
from ...core.errors import ValidationError, NotFoundError, success, handles_errors
from ...core.logging_service import LoggingService
from ...core.uploads import read_file, is_image_upload
from ..auth.utils import admin_required, current_user
from .processor import validate_image, get_image_metadata, process_image, generate_thumbnail

logger = logging.getLogger(__name__)

BUCKET = 'images'
MAX_FILES = 20


def _image_url(file_id):
    return f"/api/images/{file_id}" if file_id else None


def store_image(data, filename, mimetype, uploaded_by, alt='', with_thumbnail=True):
    """Validate, optimise and store one image; returns (image record, thumbnail id)"""
    if not is_image_upload(filename, mimetype):
        raise ValidationError('Only image files are allowed (jpeg, jpg, png, gif, webp)')

    validate_image(data)
    info = get_image_metadata(data)
    processed = process_image(data)

    blobs = get_blobs()
    metadata = {
        'originalName': filename,
        'uploadedBy': uploaded_by,
        'width': info['width'],
        'height': info['height'],
        'optimized': True,
    }
    if alt is not None:
        metadata['alt'] = alt
    record = blobs.upload(BUCKET, processed, filename, 'image/jpeg', metadata=metadata)

    thumbnail_id = None
    if with_thumbnail:
        thumb = blobs.upload(
            BUCKET, generate_thumbnail(processed), f"thumb_{filename}", 'image/jpeg',
            metadata={
                'originalName': filename,
                'uploadedBy': uploaded_by,
                'isThumbnail': True,
                'parentImageId': record['id'],
            },
        )
        thumbnail_id = thumb['id']

    return record, thumbnail_id


def _flag(value, default='true'):
    return (value if value is not None else default) == 'true'


def _get_record_or_raise(image_id):
    if not is_valid_id(image_id):
        raise ValidationError('Invalid image ID')
    record = get_blobs().get(BUCKET, image_id)
    if not record:
        raise NotFoundError('Image not found')
    return record


@images_bp.route('/upload', methods=['POST'])
@admin_required
@handles_errors('images', 'Failed to upload image')
def upload_image():
    data, filename, mimetype = read_file(request.files.get('image'))
    user_id = current_user()['id']

    record, thumbnail_id = store_image(
        data, filename, mimetype, user_id,
        alt=request.form.get('alt', ''),
        with_thumbnail=_flag(request.form.get('generateThumb')),
    )

    LoggingService.log_user_action('images', f"uploaded image {record['id']}", user_id=user_id)
    return success(data={
        'imageId': record['id'],
        'thumbnailId': thumbnail_id,
        'filename': record['filename'],
        'contentType': record['contentType'],
        'size': record['length'],
        'metadata': record['metadata'],
        'url': _image_url(record['id']),
        'thumbnailUrl': _image_url(thumbnail_id),
    }, status=201)


@images_bp.route('/upload-multiple', methods=['POST'])
@admin_required
@handles_errors('images', 'Failed to upload images')
def upload_multiple_images():
    files = [f for f in request.files.getlist('images') if f and f.filename]
    if not files:
        raise ValidationError('No files uploaded')
    if len(files) > MAX_FILES:
        raise ValidationError(f'Too many files. Maximum is {MAX_FILES}')

    user_id = current_user()['id']
    with_thumbnails = _flag(request.form.get('generateThumbs'))
    uploaded = []

    for file_storage in files:
        try:
            data, filename, mimetype = read_file(file_storage)
            record, thumbnail_id = store_image(
                data, filename, mimetype, user_id, alt=None, with_thumbnail=with_thumbnails
            )
        except Exception as e:
            logger.warning(f"Failed to upload {file_storage.filename}: {e}")
            LoggingService.warning('images', f"Skipped {file_storage.filename}", {'error': str(e)})
            continue

        uploaded.append({
            'imageId': record['id'],
            'thumbnailId': thumbnail_id,
            'filename': record['filename'],
            'url': _image_url(record['id']),
            'thumbnailUrl': _image_url(thumbnail_id),
        })

    LoggingService.log_user_action('images', f"uploaded {len(uploaded)}/{len(files)} images", user_id=user_id)
    return success(data={
        'uploadedCount': len(uploaded),
        'totalFiles': len(files),
        'images': uploaded,
    }, status=201)


@images_bp.route('/<image_id>', methods=['GET'])
@handles_errors('images', 'Failed to retrieve image')
def get_image(image_id):
    record = _get_record_or_raise(image_id)
    response = Response(
        stream_with_context(get_blobs().stream(BUCKET, image_id)),
        mimetype=record['contentType'],
    )
    response.headers['Cache-Control'] = 'public, max-age=31536000'
    return response


@images_bp.route('/<image_id>/metadata', methods=['GET'])
@handles_errors('images', 'Failed to retrieve metadata')
def get_image_metadata_by_id(image_id):
    record = _get_record_or_raise(image_id)
    return success(data={
        'id': record['id'],
        'filename': record['filename'],
        'contentType': record['contentType'],
        'size': record['length'],
        'uploadDate': record['uploadDate'],
        'metadata': record['metadata'],
    })


@images_bp.route('/<image_id>', methods=['DELETE'])
@admin_required
@handles_errors('images', 'Failed to delete image')
def delete_image(image_id):
    _get_record_or_raise(image_id)
    blobs = get_blobs()

    blobs.delete(BUCKET, image_id)
    for thumb in blobs.find(BUCKET, match={'parentImageId': image_id}):
        blobs.delete(BUCKET, thumb['id'])

    LoggingService.log_user_action('images', f"deleted image {image_id}", user_id=current_user()['id'])
    return success(message='Image deleted successfully')
