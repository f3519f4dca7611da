"""
Gallery store helpers over the ``galleries`` table. The image list and the
settings are JSON columns; image edits load, modify and save the whole list.
"""

import re
import sqlite3

from ...core.database import get_db, new_id, utcnow, to_json, from_json, is_valid_id
from ...core.errors import ValidationError

NAME_PATTERN = re.compile(r'^[a-z0-9-]+$')
DISPLAY_TYPES = ('carousel', 'grid', 'masonry')
MIN_CAROUSEL_SPEED = 500
MAX_CAROUSEL_SPEED = 10000
MAX_CAPTION = 500

DEFAULT_SETTINGS = {
    'carouselSpeed': 1600,
    'displayType': 'carousel',
    'showCaptions': False,
}


def normalize_name(name):
    return (name or '').strip().lower()


def validate_name(name):
    if not NAME_PATTERN.match(name):
        raise ValidationError('Gallery name can only contain lowercase letters, numbers, and hyphens')
    return name


def validate_settings(settings):
    """Check a complete settings dict"""
    speed = settings.get('carouselSpeed')
    if isinstance(speed, bool) or not isinstance(speed, int):
        raise ValidationError('Carousel speed must be a whole number of milliseconds')
    if speed < MIN_CAROUSEL_SPEED:
        raise ValidationError(f'Carousel speed must be at least {MIN_CAROUSEL_SPEED}ms')
    if speed > MAX_CAROUSEL_SPEED:
        raise ValidationError(f'Carousel speed cannot exceed {MAX_CAROUSEL_SPEED}ms')
    if settings.get('displayType') not in DISPLAY_TYPES:
        raise ValidationError(f"Display type must be one of: {', '.join(DISPLAY_TYPES)}")
    if not isinstance(settings.get('showCaptions'), bool):
        raise ValidationError('Show captions must be true or false')
    return settings


def validate_caption(caption):
    if caption is None:
        return ''
    if not isinstance(caption, str):
        raise ValidationError('Caption must be a string')
    caption = caption.strip()
    if len(caption) > MAX_CAPTION:
        raise ValidationError(f'Caption cannot exceed {MAX_CAPTION} characters')
    return caption


def validate_image_id(image_id):
    if not is_valid_id(image_id):
        raise ValidationError('Invalid image ID')
    return image_id


def sorted_images(images):
    return sorted(images, key=lambda img: img.get('order', 0))


def _row_to_dict(row):
    """Convert a DB row to a gallery dict"""
    return {
        'id': row['id'],
        'name': row['name'],
        'displayName': row['display_name'],
        'description': row['description'] or '',
        'images': from_json(row['images'], []),
        'settings': from_json(row['settings'], dict(DEFAULT_SETTINGS)),
        'active': bool(row['active']),
        'createdAt': row['created_at'],
        'updatedAt': row['updated_at'],
    }


def get_galleries_db(active=None):
    query = 'SELECT * FROM galleries'
    params = []
    if active is not None:
        query += ' WHERE active = ?'
        params.append(1 if active else 0)
    query += ' ORDER BY created_at ASC'
    with get_db().connect() as conn:
        rows = conn.execute(query, params).fetchall()
    return [_row_to_dict(row) for row in rows]


def get_gallery_db(name, active=None):
    query = 'SELECT * FROM galleries WHERE name = ?'
    params = [normalize_name(name)]
    if active is not None:
        query += ' AND active = ?'
        params.append(1 if active else 0)
    with get_db().connect() as conn:
        row = conn.execute(query, params).fetchone()
    return _row_to_dict(row) if row else None


def create_gallery_db(name, display_name, description=''):
    """Insert a gallery with default settings; raises ValidationError on a taken name"""
    name = validate_name(normalize_name(name))
    gallery_id = new_id()
    now = utcnow()
    try:
        with get_db().connect() as conn:
            conn.execute('''
                INSERT INTO galleries (id, name, display_name, description, images, settings, active,
                                       created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, 1, ?, ?)
            ''', (gallery_id, name, display_name.strip(), (description or '').strip(), '[]',
                  to_json(DEFAULT_SETTINGS), now, now))
    except sqlite3.IntegrityError:
        raise ValidationError('Gallery with this name already exists')
    return get_gallery_db(name)


def save_gallery_db(gallery):
    """Persist the mutable fields of a loaded gallery dict"""
    gallery['updatedAt'] = utcnow()
    with get_db().connect() as conn:
        conn.execute('''
            UPDATE galleries
            SET display_name = ?, description = ?, images = ?, settings = ?, active = ?, updated_at = ?
            WHERE id = ?
        ''', (gallery['displayName'], gallery['description'], to_json(gallery['images']),
              to_json(gallery['settings']), 1 if gallery['active'] else 0, gallery['updatedAt'],
              gallery['id']))
    return gallery


def delete_gallery_db(name):
    with get_db().connect() as conn:
        cursor = conn.execute('DELETE FROM galleries WHERE name = ?', (normalize_name(name),))
        return cursor.rowcount > 0
