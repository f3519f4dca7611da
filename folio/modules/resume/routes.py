"""
Resume API Routes
=================

GET    /api/resume                 active PDF, inline (public)
GET    /api/resume/info            active version metadata
GET    /api/resume/versions        version history
POST   /api/resume/upload          new version (multipart field ``resume``)
DELETE /api/resume                 delete the active version
PATCH  /api/resume/activate/<id>   make a stored version active
"""

from flask import Response, request, stream_with_context, jsonify

from . import resume_bp
from ...core.config import get_allowed_origins
from ...core.database import get_blobs
from ...core.errors import success, handles_errors
from ...core.logging_service import LoggingService
from ...core.uploads import read_file
from ..auth.utils import admin_required, current_user
from .versioning import ResumeVersions


def get_versions():
    return ResumeVersions(get_blobs())


def frame_ancestors():
    """CSP frame-ancestors value allowing the frontend origins to embed the PDF"""
    origins = get_allowed_origins()
    candidates = (
        origins
        + [o.replace('://', '://www.') for o in origins if '://www.' not in o]
        + [o.replace('://www.', '://') for o in origins]
        + ['http://localhost:5173']
    )
    seen = []
    for origin in candidates:
        if origin not in seen:
            seen.append(origin)
    return "frame-ancestors 'self' " + ' '.join(seen)


@resume_bp.route('', methods=['GET'])
@resume_bp.route('/', methods=['GET'])
@handles_errors('resume', 'Failed to retrieve resume')
def get_resume():
    versions = get_versions()
    current = versions.active()
    if not current:
        return jsonify({'success': False, 'message': 'No resume found'}), 404

    response = Response(stream_with_context(versions.stream(current['id'])), mimetype='application/pdf')
    response.headers['Content-Disposition'] = f'inline; filename="{current["filename"]}"'
    response.headers['Cache-Control'] = 'public, max-age=3600'
    response.headers['Content-Security-Policy'] = frame_ancestors()
    response.headers.pop('X-Frame-Options', None)
    return response


@resume_bp.route('/info', methods=['GET'])
@admin_required
@handles_errors('resume', 'Failed to retrieve resume info')
def get_resume_info():
    current = get_versions().active()
    if not current:
        return jsonify({'success': False, 'message': 'No resume found'}), 404
    return success(data={
        'id': current['id'],
        'filename': current['filename'],
        'contentType': current['contentType'],
        'size': current['length'],
        'uploadDate': current['uploadDate'],
        'metadata': current['metadata'],
    })


@resume_bp.route('/versions', methods=['GET'])
@admin_required
@handles_errors('resume', 'Failed to retrieve resume versions')
def get_resume_versions():
    versions = get_versions().versions()
    return success(data=versions, count=len(versions))


@resume_bp.route('/upload', methods=['POST'])
@admin_required
@handles_errors('resume', 'Failed to upload resume')
def upload_resume():
    data, filename, mimetype = read_file(request.files.get('resume'))
    user = current_user()
    result = get_versions().upload(data, filename, mimetype, uploaded_by=user['id'])

    LoggingService.log_user_action('resume', f"uploaded resume version {result['version']}", user_id=user['id'])
    return success(data=result, message='Resume uploaded successfully', status=201)


@resume_bp.route('', methods=['DELETE'])
@resume_bp.route('/', methods=['DELETE'])
@admin_required
@handles_errors('resume', 'Failed to delete resume')
def delete_resume():
    removed = get_versions().delete_active()
    LoggingService.log_user_action('resume', f"deleted resume {removed['id']}", user_id=current_user()['id'])
    return success(message='Resume deleted successfully')


@resume_bp.route('/activate/<file_id>', methods=['PATCH'])
@admin_required
@handles_errors('resume', 'Failed to activate resume version')
def activate_resume_version(file_id):
    result = get_versions().activate(file_id)
    LoggingService.log_user_action('resume', f"activated resume {file_id}", user_id=current_user()['id'])
    return success(data=result, message='Resume version activated successfully')
