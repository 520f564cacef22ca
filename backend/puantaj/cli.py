# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/puantaj/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--admin-email admin@puantaj.local]
#   Idempotent bootstrap: creates tables and the default admin user.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and status.
# - python -m flask users create --email user@puantaj.local --password "Password123" --role USER
#   Create a user (prompts if options are omitted).
# - python -m flask users suspend user@puantaj.local
# - python -m flask users activate user@puantaj.local
#   Suspending deletes every session of the user.
#
# Maintenance:
# - python -m flask sessions cleanup
#   Delete expired session rows (the background sweeper does the same on a timer).

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .services import auth_service, session_service
from .services.auth_service import PasswordValidationError
from .validation import ConflictError, NotFoundError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--admin-email', default='admin@puantaj.local', help='Email of the default admin')
@click.option('--admin-password', default='Password123', help='Password of the default admin')
@with_appcontext
def init_system(admin_email, admin_password):
    """
    Create all tables and the default admin user.

    SECURITY: Change the admin password immediately in production!
    """
    click.echo("START Initializing PuantajPro...")

    db.create_all()
    click.echo("PASS Tables created")

    admin = db.session.query(User).filter_by(email=auth_service.normalize_email(admin_email)).first()
    if admin:
        click.echo(f"PASS Using existing admin: {admin.email}")
        return

    try:
        admin = auth_service.create_user(admin_email, admin_password, first_name="Admin", role="ADMIN")
    except (PasswordValidationError, ValidationError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created admin: {admin.email} / {admin_password}")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """User inspection and management commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(['USER', 'ADMIN', 'SUPER_ADMIN']), default='USER', help='Role')
@click.option('--first-name', default=None, help='First name')
@click.option('--last-name', default=None, help='Last name')
@with_appcontext
def create_user_cli(email, password, role, first_name, last_name):
    """Create a user."""
    try:
        user = auth_service.create_user(email, password, first_name=first_name, last_name=last_name, role=role)
    except (PasswordValidationError, ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user {user.email} (ID: {user.id}, role: {user.role})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with role and status."""
    users = auth_service.list_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<38} {'Email':<30} {'Role':<12} {'Status':<10}")
    click.echo("="*100)

    for user in users:
        click.echo(f"{user.id:<38} {user.email:<30} {user.role:<12} {user.status:<10}")

    click.echo("="*100 + "\n")


def _set_status(email: str, status: str):
    user = db.session.query(User).filter_by(email=auth_service.normalize_email(email)).first()
    if not user:
        raise click.ClickException(f"User not found: {email}")
    try:
        return auth_service.set_user_status(user.id, status)
    except (ValidationError, NotFoundError) as e:
        raise click.ClickException(str(e))


@users_group.command('suspend')
@click.argument('email')
@with_appcontext
def suspend_user_cli(email):
    """Suspend a user and delete all of their sessions."""
    user = _set_status(email, "SUSPENDED")
    click.echo(f"PASS Suspended {user.email}")


@users_group.command('activate')
@click.argument('email')
@with_appcontext
def activate_user_cli(email):
    """Reactivate a suspended user."""
    user = _set_status(email, "ACTIVE")
    click.echo(f"PASS Activated {user.email}")


@click.group('sessions')
def sessions_group():
    """Session maintenance commands."""


@sessions_group.command('cleanup')
@with_appcontext
def cleanup_sessions():
    """Delete expired session rows."""
    deleted = session_service.cleanup_expired_sessions()
    click.echo(f"PASS Deleted {deleted} expired sessions")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(sessions_group)
