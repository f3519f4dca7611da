"""
Contact message store helpers over the ``contacts`` table.
"""

import re

from ...core.database import get_db, new_id, utcnow
from ...core.errors import ValidationError

STATUSES = ('new', 'read', 'replied', 'archived')
EMAIL_PATTERN = re.compile(r'^\S+@\S+\.\S+$')

# API field -> column, for sorting
SORT_FIELDS = {
    'sentAt': 'sent_at',
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
    'readAt': 'read_at',
    'repliedAt': 'replied_at',
    'name': 'name',
    'email': 'email',
    'subject': 'subject',
    'status': 'status',
}


def _row_to_dict(row):
    """Convert a DB row to a contact dict"""
    return {
        'id': row['id'],
        'name': row['name'],
        'email': row['email'],
        'subject': row['subject'],
        'message': row['message'],
        'status': row['status'],
        'ipAddress': row['ip_address'],
        'userAgent': row['user_agent'],
        'sentAt': row['sent_at'],
        'readAt': row['read_at'],
        'repliedAt': row['replied_at'],
        'notes': row['notes'],
        'createdAt': row['created_at'],
        'updatedAt': row['updated_at'],
    }


def clean_contact(data):
    """Validate a contact form submission"""
    name = data.get('name')
    email = data.get('email')
    message = data.get('message')
    subject = data.get('subject')

    if not all(isinstance(v, str) and v.strip() for v in (name, email, message)):
        raise ValidationError('Please provide name, email, and message')

    name = name.strip()
    if len(name) > 100:
        raise ValidationError('Name cannot exceed 100 characters')

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError('Please provide a valid email')

    subject = subject.strip() if isinstance(subject, str) else ''
    subject = subject or '(No subject)'
    if len(subject) > 200:
        raise ValidationError('Subject cannot exceed 200 characters')

    message = message.strip()
    if len(message) < 10:
        raise ValidationError('Message must be at least 10 characters')
    if len(message) > 2000:
        raise ValidationError('Message cannot exceed 2000 characters')

    return {'name': name, 'email': email, 'subject': subject, 'message': message}


def parse_sort(sort):
    """'-sentAt' -> 'sent_at DESC'; unknown fields fall back to newest first"""
    sort = (sort or '-sentAt').strip()
    descending = sort.startswith('-')
    column = SORT_FIELDS.get(sort.lstrip('-'))
    if not column:
        return 'sent_at DESC'
    return f"{column} {'DESC' if descending else 'ASC'}"


def create_contact_db(values, ip_address, user_agent=None):
    contact_id = new_id()
    now = utcnow()
    with get_db().connect() as conn:
        conn.execute('''
            INSERT INTO contacts (id, name, email, subject, message, status, ip_address, user_agent,
                                  sent_at, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, 'new', ?, ?, ?, ?, ?)
        ''', (contact_id, values['name'], values['email'], values['subject'], values['message'],
              ip_address, user_agent, now, now, now))
    return get_contact_db(contact_id)


def get_contacts_db(status=None, sort='-sentAt', limit=50, skip=0):
    """Filtered page of messages plus the total matching count. ``limit=0`` means no limit."""
    where = ''
    params = []
    if status:
        where = 'WHERE status = ?'
        params.append(status)

    with get_db().connect() as conn:
        total = conn.execute(f'SELECT COUNT(*) FROM contacts {where}', params).fetchone()[0]
        rows = conn.execute(
            f'SELECT * FROM contacts {where} ORDER BY {parse_sort(sort)} LIMIT ? OFFSET ?',
            params + [limit or -1, skip]
        ).fetchall()
    return [_row_to_dict(row) for row in rows], total


def get_contact_db(contact_id):
    with get_db().connect() as conn:
        row = conn.execute('SELECT * FROM contacts WHERE id = ?', (contact_id,)).fetchone()
    return _row_to_dict(row) if row else None


def update_contact_db(contact_id, status=None, notes=None, set_notes=False):
    """Change status and/or notes, stamping readAt / repliedAt the first time"""
    contact = get_contact_db(contact_id)
    if not contact:
        return None

    now = utcnow()
    updates = {'updated_at': now}
    if status:
        if status not in STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(STATUSES)}")
        updates['status'] = status
        if status == 'read' and not contact['readAt']:
            updates['read_at'] = now
        elif status == 'replied' and not contact['repliedAt']:
            updates['replied_at'] = now
    if set_notes:
        updates['notes'] = notes.strip() if isinstance(notes, str) else notes

    assignments = ', '.join(f'{column} = ?' for column in updates)
    with get_db().connect() as conn:
        conn.execute(f'UPDATE contacts SET {assignments} WHERE id = ?',
                     list(updates.values()) + [contact_id])
    return get_contact_db(contact_id)


def delete_contact_db(contact_id):
    with get_db().connect() as conn:
        cursor = conn.execute('DELETE FROM contacts WHERE id = ?', (contact_id,))
        return cursor.rowcount > 0
