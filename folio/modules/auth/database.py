import sqlite3

from passlib.hash import pbkdf2_sha256

from ...core.database import get_db, new_id, utcnow


def _row_to_user(row, include_hash=False):
    user = {
        'id': row['id'],
        'username': row['username'],
        'email': row['email'],
        'role': row['role'],
        'lastLogin': row['last_login'],
        'createdAt': row['created_at'],
        'updatedAt': row['updated_at'],
    }
    if include_hash:
        user['passwordHash'] = row['password_hash']
    return user


class UserDatabase:
    """Admin user records"""

    @staticmethod
    def hash_password(password):
        return pbkdf2_sha256.hash(password)

    @staticmethod
    def verify_password(password, password_hash):
        try:
            return pbkdf2_sha256.verify(password, password_hash)
        except ValueError:
            return False

    @staticmethod
    def get_user_by_id(user_id, db=None):
        db = db or get_db()
        with db.connect() as conn:
            row = conn.execute('SELECT * FROM users WHERE id = ?', (user_id,)).fetchone()
        return _row_to_user(row) if row else None

    @staticmethod
    def get_user_by_login(login, db=None):
        """Look up a user by username or email, including the password hash"""
        db = db or get_db()
        login = (login or '').strip()
        with db.connect() as conn:
            row = conn.execute(
                'SELECT * FROM users WHERE username = ? OR lower(email) = lower(?)',
                (login, login)
            ).fetchone()
        return _row_to_user(row, include_hash=True) if row else None

    @staticmethod
    def create_user(username, password, email=None, role='admin', db=None):
        """Create a user; returns the new id, or None when the username is taken"""
        db = db or get_db()
        now = utcnow()
        user_id = new_id()
        try:
            with db.connect() as conn:
                conn.execute('''
                    INSERT INTO users (id, username, email, password_hash, role, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                ''', (user_id, username, email, UserDatabase.hash_password(password), role, now, now))
            return user_id
        except sqlite3.IntegrityError:
            return None

    @staticmethod
    def update_credentials(user_id, username=None, password=None, db=None):
        db = db or get_db()
        updates = ['updated_at = ?']
        params = [utcnow()]
        if username:
            updates.append('username = ?')
            params.append(username)
        if password:
            updates.append('password_hash = ?')
            params.append(UserDatabase.hash_password(password))
        params.append(user_id)
        with db.connect() as conn:
            cursor = conn.execute(f"UPDATE users SET {', '.join(updates)} WHERE id = ?", params)
            return cursor.rowcount > 0

    @staticmethod
    def get_first_admin(db=None):
        db = db or get_db()
        with db.connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE role = 'admin' ORDER BY created_at LIMIT 1"
            ).fetchone()
        return _row_to_user(row) if row else None

    @staticmethod
    def record_login(user_id, db=None):
        db = db or get_db()
        now = utcnow()
        with db.connect() as conn:
            conn.execute('UPDATE users SET last_login = ?, updated_at = ? WHERE id = ?',
                         (now, now, user_id))
        return now
