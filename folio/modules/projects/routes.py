"""
Projects API Routes
===================

Public visitors only ever see published projects. Admins see everything and
may filter on ``published``.
"""

from flask import request, g

from . import projects_bp
from ...core.database import is_valid_id
from ...core.errors import ValidationError, NotFoundError, success, handles_errors, json_body
from ...core.logging_service import LoggingService
from ..auth.utils import admin_required, auth_optional, authorize, current_user
from .database import (
    get_projects_db, get_project_db, create_project_db, update_project_db,
    delete_project_db, reorder_projects_db, toggle_publish_db,
)
from .validation import clean_project


def _int_arg(name, default):
    try:
        return max(int(request.args.get(name, default)), 0)
    except (TypeError, ValueError):
        return default


def _bool_arg(name):
    value = request.args.get(name)
    return None if value is None else value == 'true'


def _check_id(project_id):
    if not is_valid_id(project_id):
        raise ValidationError('Invalid project ID')


@projects_bp.route('', methods=['GET'])
@projects_bp.route('/', methods=['GET'])
@auth_optional
@handles_errors('projects', 'Failed to fetch projects')
def get_projects():
    """List projects"""
    published = _bool_arg('published') if authorize(g.user, 'admin') else True

    projects, total = get_projects_db(
        published=published,
        category=request.args.get('category'),
        featured=_bool_arg('featured'),
        sort=request.args.get('sort', 'order'),
        limit=_int_arg('limit', 100),
        skip=_int_arg('skip', 0),
    )
    return success(data=projects, count=len(projects), total=total)


@projects_bp.route('/<project_id>', methods=['GET'])
@auth_optional
@handles_errors('projects', 'Failed to fetch project')
def get_project(project_id):
    _check_id(project_id)
    project = get_project_db(project_id)
    if not project or (not project['published'] and not authorize(g.user, 'admin')):
        raise NotFoundError('Project not found')
    return success(data=project)


@projects_bp.route('', methods=['POST'])
@projects_bp.route('/', methods=['POST'])
@admin_required
@handles_errors('projects', 'Failed to create project')
def create_project():
    data = json_body()

    if not data.get('title') or not data.get('shortDescription') or not data.get('fullDescription'):
        raise ValidationError('Please provide title, short description, and full description')
    if not data.get('thumbnailImageId'):
        raise ValidationError('Please provide a thumbnail image')

    project = create_project_db(clean_project(data))
    LoggingService.log_user_action('projects', f"created project {project['id']}", user_id=current_user()['id'])
    return success(data=project, status=201)


@projects_bp.route('/reorder', methods=['PATCH'])
@admin_required
@handles_errors('projects', 'Failed to reorder projects')
def reorder_projects():
    data = json_body()
    projects = data.get('projects')
    if not isinstance(projects, list):
        raise ValidationError('Projects must be an array')

    orders = []
    for item in projects:
        if not isinstance(item, dict) or not is_valid_id(item.get('id')):
            continue
        try:
            orders.append((item['id'], int(item.get('order', 0))))
        except (TypeError, ValueError):
            raise ValidationError('Order must be a number')

    reorder_projects_db(orders)
    return success(message='Projects reordered successfully')


@projects_bp.route('/<project_id>', methods=['PUT'])
@admin_required
@handles_errors('projects', 'Failed to update project')
def update_project(project_id):
    _check_id(project_id)
    values = clean_project(json_body(), partial=True)

    project = update_project_db(project_id, values) if values else get_project_db(project_id)
    if not project:
        raise NotFoundError('Project not found')

    LoggingService.log_user_action('projects', f"updated project {project_id}", user_id=current_user()['id'])
    return success(data=project)


@projects_bp.route('/<project_id>', methods=['DELETE'])
@admin_required
@handles_errors('projects', 'Failed to delete project')
def delete_project(project_id):
    _check_id(project_id)
    if not delete_project_db(project_id):
        raise NotFoundError('Project not found')

    LoggingService.log_user_action('projects', f"deleted project {project_id}", user_id=current_user()['id'])
    return success(data={}, message='Project deleted successfully')


@projects_bp.route('/<project_id>/toggle-publish', methods=['PATCH'])
@admin_required
@handles_errors('projects', 'Failed to toggle publish status')
def toggle_publish(project_id):
    _check_id(project_id)
    project = toggle_publish_db(project_id)
    if not project:
        raise NotFoundError('Project not found')
    return success(data=project)
