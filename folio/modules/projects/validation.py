"""
Project field rules. ``clean_project`` turns an API payload into column
values, raising ValidationError on the first bad field.
"""

from ...core.database import is_valid_id
from ...core.errors import ValidationError

CATEGORIES = ('research', 'presentation', 'code', 'academic', 'personal', 'other')
LINK_TYPES = ('github', 'demo', 'paper', 'video', 'other')
METADATA_FIELDS = ('date', 'organization', 'location')


def _text(data, key, label, max_length=None):
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    value = value.strip()
    if max_length and len(value) > max_length:
        raise ValidationError(f"{label} cannot exceed {max_length} characters")
    return value


def _bool(value, label):
    if isinstance(value, bool):
        return value
    if value in ('true', 'false'):
        return value == 'true'
    raise ValidationError(f"{label} must be true or false")


def _id(value, label):
    if not is_valid_id(value):
        raise ValidationError(f"Invalid {label} ID")
    return value


def _external_links(links):
    if not isinstance(links, list):
        raise ValidationError('External links must be an array')
    cleaned = []
    for link in links:
        if not isinstance(link, dict):
            raise ValidationError('Each external link must be an object')
        link_type = link.get('type')
        if link_type not in LINK_TYPES:
            raise ValidationError(f"External link type must be one of: {', '.join(LINK_TYPES)}")
        url = link.get('url')
        if not isinstance(url, str) or not url.strip():
            raise ValidationError('External link URL is required')
        cleaned.append({'type': link_type, 'url': url.strip(), 'label': link.get('label')})
    return cleaned


def clean_project(data, partial=False):
    """Validate a project payload; returns a dict of column -> value"""
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')

    values = {}

    def present(key):
        return not partial or key in data

    if present('title'):
        values['title'] = _text(data, 'title', 'Project title', 200)
    if present('shortDescription'):
        values['short_description'] = _text(data, 'shortDescription', 'Short description', 500)
    if present('fullDescription'):
        values['full_description'] = _text(data, 'fullDescription', 'Full description')
    if present('thumbnailImageId'):
        if not data.get('thumbnailImageId'):
            raise ValidationError('Thumbnail image is required')
        values['thumbnail_image_id'] = _id(data['thumbnailImageId'], 'thumbnail image')

    if 'detailImageIds' in data:
        ids = data['detailImageIds'] or []
        if not isinstance(ids, list):
            raise ValidationError('Detail image IDs must be an array')
        values['detail_image_ids'] = [_id(i, 'detail image') for i in ids]
    elif not partial:
        values['detail_image_ids'] = []

    if 'pdfFileId' in data:
        values['pdf_file_id'] = _id(data['pdfFileId'], 'PDF file') if data['pdfFileId'] else None

    if 'category' in data or not partial:
        category = data.get('category') or 'other'
        category = str(category).strip().lower()
        if category not in CATEGORIES:
            raise ValidationError(f"Category must be one of: {', '.join(CATEGORIES)}")
        values['category'] = category

    if 'tags' in data:
        tags = data['tags'] or []
        if not isinstance(tags, list):
            raise ValidationError('Tags must be an array')
        values['tags'] = [str(t).strip().lower() for t in tags if str(t).strip()]
    elif not partial:
        values['tags'] = []

    if 'featured' in data or not partial:
        values['featured'] = _bool(data.get('featured', False), 'Featured')
    if 'published' in data or not partial:
        values['published'] = _bool(data.get('published', False), 'Published')

    if 'order' in data or not partial:
        try:
            values['sort_order'] = int(data.get('order', 0) or 0)
        except (TypeError, ValueError):
            raise ValidationError('Order must be a number')

    if 'externalLinks' in data:
        values['external_links'] = _external_links(data['externalLinks'] or [])
    elif not partial:
        values['external_links'] = []

    if 'metadata' in data:
        metadata = data['metadata'] or {}
        if not isinstance(metadata, dict):
            raise ValidationError('Metadata must be an object')
        values['metadata'] = {k: metadata.get(k) for k in METADATA_FIELDS if k in metadata}
    elif not partial:
        values['metadata'] = {}

    return values
