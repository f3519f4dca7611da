"""
Image Processing
================

Validation, measurement, optimisation and thumbnailing of uploaded images
with Pillow. Every processed image and thumbnail is re-encoded as JPEG.
"""

from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from ...core.errors import ValidationError

ALLOWED_FORMATS = ('jpeg', 'jpg', 'png', 'gif', 'webp')
MAX_SIZE = 10 * 1024 * 1024

MAX_WIDTH = 2000
MAX_HEIGHT = 2000
QUALITY = 85

THUMB_SIZE = 300
THUMB_QUALITY = 80


class ImageProcessingError(ValidationError):
    """Uploaded bytes are not an acceptable image"""


def _open(data):
    try:
        img = Image.open(BytesIO(data))
        img.load()
        return img
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageProcessingError(f"Invalid image file: {e}")


def _to_rgb(img):
    if img.mode in ('RGBA', 'LA', 'P'):
        img = img.convert('RGBA')
        background = Image.new('RGB', img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        return background
    if img.mode != 'RGB':
        return img.convert('RGB')
    return img


def _encode_jpeg(img, quality):
    out = BytesIO()
    _to_rgb(img).save(out, format='JPEG', quality=quality, optimize=True)
    return out.getvalue()


def validate_image(data, max_size=MAX_SIZE, allowed_formats=ALLOWED_FORMATS):
    """Raise ImageProcessingError unless ``data`` is a decodable image in an allowed format"""
    if len(data) > max_size:
        raise ImageProcessingError(
            f"File size exceeds maximum allowed size of {max_size // (1024 * 1024)}MB"
        )
    img = _open(data)
    fmt = (img.format or '').lower()
    if fmt not in allowed_formats:
        raise ImageProcessingError(f"Invalid image format. Allowed: {', '.join(allowed_formats)}")
    return True


def get_image_metadata(data):
    img = _open(data)
    return {
        'width': img.width,
        'height': img.height,
        'format': (img.format or '').lower(),
        'size': len(data),
        'hasAlpha': img.mode in ('RGBA', 'LA') or 'transparency' in img.info,
    }


def process_image(data, max_width=MAX_WIDTH, max_height=MAX_HEIGHT, quality=QUALITY):
    """Fit inside max_width x max_height (never enlarging) and re-encode as JPEG"""
    img = _open(data)
    if img.width > max_width or img.height > max_height:
        img.thumbnail((max_width, max_height), Image.LANCZOS)
    return _encode_jpeg(img, quality)


def generate_thumbnail(data, size=THUMB_SIZE):
    """Centre-cropped square thumbnail"""
    img = _to_rgb(_open(data))
    thumb = ImageOps.fit(img, (size, size), Image.LANCZOS, centering=(0.5, 0.5))
    return _encode_jpeg(thumb, THUMB_QUALITY)
