"""
Project store helpers over the ``projects`` table.
"""

from ...core.database import get_db, new_id, utcnow, to_json, from_json

JSON_COLUMNS = ('detail_image_ids', 'tags', 'external_links', 'metadata')
BOOL_COLUMNS = ('featured', 'published')

SORT_OPTIONS = {
    'order': 'sort_order ASC, created_at ASC',
    'date': 'created_at DESC',
    '-date': 'created_at ASC',
}


def _row_to_dict(row):
    """Convert a DB row to a project dict"""
    return {
        'id': row['id'],
        'title': row['title'],
        'shortDescription': row['short_description'],
        'fullDescription': row['full_description'],
        'thumbnailImageId': row['thumbnail_image_id'],
        'detailImageIds': from_json(row['detail_image_ids'], []),
        'pdfFileId': row['pdf_file_id'],
        'category': row['category'],
        'tags': from_json(row['tags'], []),
        'featured': bool(row['featured']),
        'order': row['sort_order'],
        'externalLinks': from_json(row['external_links'], []),
        'metadata': from_json(row['metadata'], {}),
        'published': bool(row['published']),
        'createdAt': row['created_at'],
        'updatedAt': row['updated_at'],
        'thumbnailUrl': f"/api/images/{row['thumbnail_image_id']}" if row['thumbnail_image_id'] else None,
    }


def _encode(values):
    encoded = {}
    for column, value in values.items():
        if column in JSON_COLUMNS:
            encoded[column] = to_json(value)
        elif column in BOOL_COLUMNS:
            encoded[column] = 1 if value else 0
        else:
            encoded[column] = value
    return encoded


def get_projects_db(published=None, category=None, featured=None, sort='order', limit=100, skip=0):
    """Filtered page of projects plus the total matching count. ``limit=0`` means no limit."""
    conditions = []
    params = []
    if published is not None:
        conditions.append('published = ?')
        params.append(1 if published else 0)
    if category:
        conditions.append('category = ?')
        params.append(category.lower())
    if featured is not None:
        conditions.append('featured = ?')
        params.append(1 if featured else 0)

    where = f"WHERE {' AND '.join(conditions)}" if conditions else ''
    order_by = SORT_OPTIONS.get(sort, 'rowid ASC')

    with get_db().connect() as conn:
        total = conn.execute(f'SELECT COUNT(*) FROM projects {where}', params).fetchone()[0]
        rows = conn.execute(
            f'SELECT * FROM projects {where} ORDER BY {order_by} LIMIT ? OFFSET ?',
            params + [limit or -1, skip]
        ).fetchall()
    return [_row_to_dict(row) for row in rows], total


def get_project_db(project_id):
    with get_db().connect() as conn:
        row = conn.execute('SELECT * FROM projects WHERE id = ?', (project_id,)).fetchone()
    return _row_to_dict(row) if row else None


def create_project_db(values):
    """Insert a cleaned project; returns the stored project"""
    project_id = new_id()
    now = utcnow()
    row = _encode(values)
    row.update({'id': project_id, 'created_at': now, 'updated_at': now})

    columns = ', '.join(row)
    placeholders = ', '.join('?' for _ in row)
    with get_db().connect() as conn:
        conn.execute(f'INSERT INTO projects ({columns}) VALUES ({placeholders})', list(row.values()))
    return get_project_db(project_id)


def update_project_db(project_id, values):
    """Apply cleaned partial values; returns the updated project or None"""
    row = _encode(values)
    row['updated_at'] = utcnow()
    assignments = ', '.join(f'{column} = ?' for column in row)
    with get_db().connect() as conn:
        cursor = conn.execute(
            f'UPDATE projects SET {assignments} WHERE id = ?', list(row.values()) + [project_id]
        )
        if cursor.rowcount == 0:
            return None
    return get_project_db(project_id)


def delete_project_db(project_id):
    with get_db().connect() as conn:
        cursor = conn.execute('DELETE FROM projects WHERE id = ?', (project_id,))
        return cursor.rowcount > 0


def reorder_projects_db(orders):
    """Set sort_order for each (id, order) pair; returns the number updated"""
    now = utcnow()
    updated = 0
    with get_db().connect() as conn:
        for project_id, order in orders:
            cursor = conn.execute(
                'UPDATE projects SET sort_order = ?, updated_at = ? WHERE id = ?',
                (order, now, project_id)
            )
            updated += cursor.rowcount
    return updated


def toggle_publish_db(project_id):
    with get_db().connect() as conn:
        cursor = conn.execute(
            'UPDATE projects SET published = 1 - published, updated_at = ? WHERE id = ?',
            (utcnow(), project_id)
        )
        if cursor.rowcount == 0:
            return None
    return get_project_db(project_id)
