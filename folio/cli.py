"""
Admin CLI
=========

    flask folio seed [--reset]
    flask folio update-admin USERNAME PASSWORD
    flask folio cleanup-logs [--days N]
"""

import sqlite3

import click
from flask.cli import AppGroup

from .core.config import get_config_value
from .core.database import get_db
from .core.errors import ValidationError
from .core.logging_service import LoggingService
from .modules.auth.database import UserDatabase
from .modules.galleries.database import get_gallery_db, create_gallery_db, save_gallery_db

folio_cli = AppGroup('folio', help='Folio content management commands.')

SEED_GALLERIES = [
    {
        'name': 'about',
        'display_name': 'About Me',
        'description': 'Personal photos and moments',
        'settings': {'carouselSpeed': 1600, 'displayType': 'carousel', 'showCaptions': False},
    },
    {
        'name': 'sailing',
        'display_name': 'Sailing Adventures',
        'description': 'My sailing journey',
        'settings': {'carouselSpeed': 2000, 'displayType': 'grid', 'showCaptions': True},
    },
    {
        'name': 'kazakhstan',
        'display_name': 'Kazakhstan 2024',
        'description': 'Turkish Youth Forum in Kazakhstan',
        'settings': {'carouselSpeed': 2300, 'displayType': 'carousel', 'showCaptions': False},
    },
]

MIN_PASSWORD_LENGTH = 8


def seed_database(reset=False):
    """Create the admin user and the default galleries; returns what was created"""
    created = {'admin': None, 'galleries': []}

    if reset:
        with get_db().connect() as conn:
            conn.execute('DELETE FROM users')
            conn.execute('DELETE FROM galleries')

    username = get_config_value('ADMIN_USERNAME')
    password = get_config_value('ADMIN_PASSWORD')
    if not username or not password:
        raise click.ClickException('ADMIN_USERNAME and ADMIN_PASSWORD must be set')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise click.ClickException(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long')

    if UserDatabase.create_user(username, password, email=get_config_value('ADMIN_EMAIL')):
        created['admin'] = username

    for seed in SEED_GALLERIES:
        if get_gallery_db(seed['name']):
            continue
        try:
            gallery = create_gallery_db(seed['name'], seed['display_name'], seed['description'])
        except ValidationError:
            continue
        gallery['settings'] = dict(seed['settings'])
        save_gallery_db(gallery)
        created['galleries'].append(gallery['name'])

    return created


@folio_cli.command('seed')
@click.option('--reset', is_flag=True, help='Delete existing users and galleries first.')
def seed_command(reset):
    """Create the admin user and default galleries."""
    created = seed_database(reset=reset)

    if created['admin']:
        click.echo(f"Created admin user: {created['admin']}")
    else:
        click.echo('Admin user already exists, skipped')
    for name in created['galleries']:
        click.echo(f"Created gallery: {name}")
    click.echo('Seed complete')


@folio_cli.command('update-admin')
@click.argument('username')
@click.argument('password')
def update_admin_command(username, password):
    """Change the admin username and password."""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise click.ClickException(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long')

    admin = UserDatabase.get_first_admin()
    if not admin:
        raise click.ClickException('No admin user found')

    click.echo(f"Updating admin user: {admin['username']} -> {username}")
    try:
        UserDatabase.update_credentials(admin['id'], username=username, password=password)
    except sqlite3.IntegrityError:
        raise click.ClickException(f'Username {username} is already taken')
    click.echo('Admin credentials updated successfully')


@folio_cli.command('cleanup-logs')
@click.option('--days', default=30, show_default=True, type=click.IntRange(min=0),
              help='Keep entries newer than this many days.')
def cleanup_logs_command(days):
    """Delete old application log entries."""
    removed = LoggingService.cleanup_old_logs(days_to_keep=days)
    click.echo(f"Removed {removed} log entries older than {days} days")
