"""
Contact API Routes
==================

POST   /api/contact                  submit the contact form (public)
GET    /api/contact/messages         inbox
GET    /api/contact/messages/<id>    one message
PATCH  /api/contact/messages/<id>    status / notes
DELETE /api/contact/messages/<id>    remove a message
"""

import logging

from flask import request, current_app

from . import contact_bp
from ...core.database import is_valid_id
from ...core.errors import ValidationError, NotFoundError, success, handles_errors, json_body
from ...core.logging_service import LoggingService
from ..analytics.analytics import Analytics
from ..auth.utils import admin_required, current_user
from .database import (
    clean_contact, create_contact_db, get_contacts_db, get_contact_db,
    update_contact_db, delete_contact_db,
)

logger = logging.getLogger(__name__)


def _check_id(contact_id):
    if not is_valid_id(contact_id):
        raise ValidationError('Invalid contact ID')


def _int_arg(name, default):
    try:
        return max(int(request.args.get(name, default)), 0)
    except (TypeError, ValueError):
        return default


def notify_owner(contact):
    """Send the owner notification; failures are logged only"""
    try:
        email_service = current_app.extensions['folio'].email
        if not email_service.send_contact_notification(contact):
            logger.info(f"Contact notification not sent for {contact['id']}")
    except Exception as e:
        LoggingService.error('contact', f"Contact notification failed: {e}")


@contact_bp.route('', methods=['POST'])
@contact_bp.route('/', methods=['POST'])
@handles_errors('contact', 'Failed to send message. Please try again later.')
def submit_contact():
    values = clean_contact(json_body())
    contact = create_contact_db(
        values,
        ip_address=Analytics.get_client_ip(request),
        user_agent=request.headers.get('User-Agent'),
    )
    notify_owner(contact)

    LoggingService.info('contact', f"New contact message {contact['id']}")
    return success(
        data={'id': contact['id'], 'sentAt': contact['sentAt']},
        message='Message sent successfully. Thank you for reaching out!',
        status=201,
    )


@contact_bp.route('/messages', methods=['GET'])
@admin_required
@handles_errors('contact', 'Failed to fetch contacts')
def get_contacts():
    contacts, total = get_contacts_db(
        status=request.args.get('status'),
        sort=request.args.get('sort', '-sentAt'),
        limit=_int_arg('limit', 50),
        skip=_int_arg('skip', 0),
    )
    return success(data=contacts, count=len(contacts), total=total)


@contact_bp.route('/messages/<contact_id>', methods=['GET'])
@admin_required
@handles_errors('contact', 'Failed to fetch contact')
def get_contact(contact_id):
    _check_id(contact_id)
    contact = get_contact_db(contact_id)
    if not contact:
        raise NotFoundError('Contact not found')
    return success(data=contact)


@contact_bp.route('/messages/<contact_id>', methods=['PATCH'])
@admin_required
@handles_errors('contact', 'Failed to update contact')
def update_contact_status(contact_id):
    _check_id(contact_id)
    data = json_body()

    contact = update_contact_db(
        contact_id,
        status=data.get('status'),
        notes=data.get('notes'),
        set_notes='notes' in data,
    )
    if not contact:
        raise NotFoundError('Contact not found')

    LoggingService.log_user_action('contact', f"updated contact {contact_id}", user_id=current_user()['id'])
    return success(data=contact)


@contact_bp.route('/messages/<contact_id>', methods=['DELETE'])
@admin_required
@handles_errors('contact', 'Failed to delete contact')
def delete_contact(contact_id):
    _check_id(contact_id)
    if not delete_contact_db(contact_id):
        raise NotFoundError('Contact not found')
    return success(data={}, message='Contact deleted successfully')
