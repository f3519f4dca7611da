"""
Galleries API Routes
====================

Galleries are addressed by their slug name. Non-admin callers only see
active galleries; images are always returned sorted by ``order``.
"""

from flask import request, g

from . import galleries_bp
from ...core.errors import ValidationError, NotFoundError, success, handles_errors, json_body
from ...core.logging_service import LoggingService
from ..auth.utils import admin_required, auth_optional, authorize, current_user
from .database import (
    get_galleries_db, get_gallery_db, create_gallery_db, save_gallery_db, delete_gallery_db,
    validate_settings, validate_caption, validate_image_id, sorted_images,
)

IMAGE_METADATA_FIELDS = ('dateTaken', 'location', 'tags')


def _for_response(gallery):
    gallery['images'] = sorted_images(gallery['images'])
    return gallery


def _load_or_404(name):
    gallery = get_gallery_db(name)
    if not gallery:
        raise NotFoundError('Gallery not found')
    return gallery


def _find_image(gallery, image_id):
    for image in gallery['images']:
        if image['imageId'] == image_id:
            return image
    raise NotFoundError('Image not found in gallery')


def _image_metadata(metadata):
    if metadata is None:
        return {}
    if not isinstance(metadata, dict):
        raise ValidationError('Image metadata must be an object')
    return {k: metadata[k] for k in IMAGE_METADATA_FIELDS if k in metadata}


def _order(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError('Order must be a number')
    return value


def _active_filter():
    """Active filter for the caller: admins choose, everyone else sees active only"""
    if authorize(g.user, 'admin'):
        value = request.args.get('active')
        return None if value is None else value == 'true'
    return True


@galleries_bp.route('', methods=['GET'])
@galleries_bp.route('/', methods=['GET'])
@auth_optional
@handles_errors('galleries', 'Failed to fetch galleries')
def get_galleries():
    galleries = [_for_response(gallery) for gallery in get_galleries_db(active=_active_filter())]
    return success(data=galleries)


@galleries_bp.route('/<name>', methods=['GET'])
@auth_optional
@handles_errors('galleries', 'Failed to fetch galleries')
def get_gallery(name):
    gallery = get_gallery_db(name, active=_active_filter())
    if not gallery:
        raise NotFoundError('Gallery not found')
    return success(data=_for_response(gallery))


@galleries_bp.route('', methods=['POST'])
@galleries_bp.route('/', methods=['POST'])
@admin_required
@handles_errors('galleries', 'Failed to create gallery')
def create_gallery():
    data = json_body()
    name = data.get('name')
    display_name = data.get('displayName')

    if not isinstance(name, str) or not name.strip() or not isinstance(display_name, str) or not display_name.strip():
        raise ValidationError('Gallery name and display name are required')

    gallery = create_gallery_db(name, display_name, data.get('description') or '')
    LoggingService.log_user_action('galleries', f"created gallery {gallery['name']}", user_id=current_user()['id'])
    return success(data=gallery, message='Gallery created successfully', status=201)


@galleries_bp.route('/<name>', methods=['PUT'])
@admin_required
@handles_errors('galleries', 'Failed to update gallery')
def update_gallery(name):
    gallery = _load_or_404(name)
    data = json_body()

    if 'displayName' in data:
        display_name = data['displayName']
        if not isinstance(display_name, str) or not display_name.strip():
            raise ValidationError('Display name is required')
        gallery['displayName'] = display_name.strip()
    if 'description' in data:
        gallery['description'] = (data['description'] or '').strip()
    if 'active' in data:
        if not isinstance(data['active'], bool):
            raise ValidationError('Active must be true or false')
        gallery['active'] = data['active']

    save_gallery_db(gallery)
    return success(data=_for_response(gallery))


@galleries_bp.route('/<name>', methods=['DELETE'])
@admin_required
@handles_errors('galleries', 'Failed to delete gallery')
def delete_gallery(name):
    if not delete_gallery_db(name):
        raise NotFoundError('Gallery not found')
    LoggingService.log_user_action('galleries', f"deleted gallery {name}", user_id=current_user()['id'])
    return success(message='Gallery deleted successfully')


@galleries_bp.route('/<name>/images', methods=['POST'])
@admin_required
@handles_errors('galleries', 'Failed to add images')
def add_images_to_gallery(name):
    data = json_body()
    images = data.get('images')
    if not isinstance(images, list) or not images:
        raise ValidationError('Please provide an array of images')

    gallery = _load_or_404(name)
    current_max = max((img.get('order', 0) for img in gallery['images']), default=-1)

    new_images = []
    for index, img in enumerate(images):
        if not isinstance(img, dict):
            raise ValidationError('Each image must be an object')
        new_images.append({
            'imageId': validate_image_id(img.get('imageId')),
            'caption': validate_caption(img.get('caption')),
            'order': current_max + 1 + index,
            'metadata': _image_metadata(img.get('metadata')),
        })

    gallery['images'].extend(new_images)
    save_gallery_db(gallery)
    return success(data={'addedCount': len(new_images), 'gallery': _for_response(gallery)}, status=201)


@galleries_bp.route('/<name>/images/<image_id>', methods=['PUT'])
@admin_required
@handles_errors('galleries', 'Failed to update image')
def update_gallery_image(name, image_id):
    gallery = _load_or_404(name)
    image = _find_image(gallery, image_id)
    data = json_body()

    if 'caption' in data:
        image['caption'] = validate_caption(data['caption'])
    if 'order' in data:
        image['order'] = _order(data['order'])
    if 'metadata' in data:
        merged = dict(image.get('metadata') or {})
        merged.update(_image_metadata(data['metadata']))
        image['metadata'] = merged

    save_gallery_db(gallery)
    return success(data=_for_response(gallery))


@galleries_bp.route('/<name>/images/<image_id>', methods=['DELETE'])
@admin_required
@handles_errors('galleries', 'Failed to remove image')
def remove_image_from_gallery(name, image_id):
    gallery = _load_or_404(name)
    _find_image(gallery, image_id)

    gallery['images'] = [img for img in gallery['images'] if img['imageId'] != image_id]
    save_gallery_db(gallery)
    return success(data=_for_response(gallery), message='Image removed from gallery')


@galleries_bp.route('/<name>/reorder', methods=['PATCH'])
@admin_required
@handles_errors('galleries', 'Failed to reorder images')
def reorder_gallery_images(name):
    data = json_body()
    images = data.get('images')
    if not isinstance(images, list):
        raise ValidationError('Images must be an array')

    gallery = _load_or_404(name)
    by_id = {}
    for img in gallery['images']:
        by_id.setdefault(img['imageId'], img)
    for item in images:
        if not isinstance(item, dict):
            continue
        target = by_id.get(item.get('imageId'))
        if target is not None:
            target['order'] = _order(item.get('order'))

    save_gallery_db(gallery)
    return success(data=_for_response(gallery), message='Images reordered successfully')


@galleries_bp.route('/<name>/settings', methods=['PUT'])
@admin_required
@handles_errors('galleries', 'Failed to update settings')
def update_gallery_settings(name):
    gallery = _load_or_404(name)
    data = json_body()

    settings = dict(gallery['settings'])
    for key in ('carouselSpeed', 'displayType', 'showCaptions'):
        if key in data:
            settings[key] = data[key]
    gallery['settings'] = validate_settings(settings)

    save_gallery_db(gallery)
    return success(data=_for_response(gallery))
