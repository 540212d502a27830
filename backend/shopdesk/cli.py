# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/shopdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and approval status.
# - python -m flask users create --username admin@shop.local --password "Password123!" --role admin
#   Create an approved user (prompts if options are omitted).
# - python -m flask users approve admin@shop.local [--revoke]
#   Approve (or disapprove) an account.
# - python -m flask users seed
#   Create approved accounts from ADMIN1_*/ADMIN2_*/EMPLOYEE1_*/EMPLOYEE2_* env vars.
#
# Inventory:
# - python -m flask inventory low-stock [--threshold 5]
#   List active items at or below the threshold.
#
# Maintenance:
# - python -m flask sessions cleanup
#   Delete expired/revoked sessions older than 30 days.

import os

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .models.auth import ROLES, ROLE_ADMIN, ROLE_EMPLOYEE
from .services import get_services
from .validation import ValidationError, ConflictError

# (env prefix, role) pairs read by `users seed`
SEED_ACCOUNTS = (
    ("ADMIN1", ROLE_ADMIN),
    ("ADMIN2", ROLE_ADMIN),
    ("EMPLOYEE1", ROLE_EMPLOYEE),
    ("EMPLOYEE2", ROLE_EMPLOYEE),
)


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables."""
    db.create_all()
    click.echo("PASS Tables created.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask users seed' to add accounts.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with role and approval status."""
    users = get_services().access.list_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'ID':<5} {'Username':<35} {'Role':<10} {'Approved'}")
    click.echo("="*70)

    for user in users:
        approved_str = "Yes" if user.is_approved else "No"
        click.echo(f"{user.id:<5} {user.username:<35} {user.role:<10} {approved_str}")

    click.echo("="*70 + "\n")


@users_group.command('create')
@click.option('--username', prompt=True, help='Username (usually an email)')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ROLES), default=ROLE_EMPLOYEE, show_default=True)
@with_appcontext
def create_user_command(username, password, role):
    """Create an approved user."""
    try:
        user = get_services().access.create_user(username, password, role, is_approved=True)
        db.session.commit()
    except (ValidationError, ConflictError) as e:
        db.session.rollback()
        raise click.ClickException(str(e))

    click.echo(f"PASS Created {user.role} {user.username} (ID: {user.id})")


@users_group.command('approve')
@click.argument('username')
@click.option('--revoke', is_flag=True, help='Withdraw approval instead')
@with_appcontext
def approve_user_command(username, revoke):
    """Approve (or disapprove) an account by username."""
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        raise click.ClickException(f"User {username} not found")

    user = get_services().access.set_approval(user.id, not revoke)
    click.echo(f"PASS {user.username} approved={user.is_approved}")


@users_group.command('seed')
@with_appcontext
def seed_users():
    """
    Create approved accounts from environment variables.

    Reads <PREFIX>_USERNAME and <PREFIX>_PASSWORD for ADMIN1, ADMIN2,
    EMPLOYEE1 and EMPLOYEE2. Missing pairs and existing usernames are skipped.
    """
    access = get_services().access
    created = 0
    for prefix, role in SEED_ACCOUNTS:
        username = os.environ.get(f"{prefix}_USERNAME")
        password = os.environ.get(f"{prefix}_PASSWORD")
        if not username or not password:
            continue
        if db.session.query(User).filter_by(username=username).first():
            click.echo(f"SKIP {username} already exists")
            continue
        try:
            access.create_user(username, password, role, is_approved=True)
            db.session.commit()
        except ValidationError as e:
            db.session.rollback()
            click.echo(f"FAIL {username}: {e}", err=True)
            continue
        created += 1
        click.echo(f"PASS Seeded {role} {username}")

    click.echo(f"Seeded {created} account(s).")


@click.group('inventory')
def inventory_group():
    """Inventory inspection commands."""


@inventory_group.command('low-stock')
@click.option('--threshold', type=int, default=None, help='Defaults to LOW_STOCK_THRESHOLD')
@with_appcontext
def low_stock_command(threshold):
    """List active items at or below the low-stock threshold."""
    items = get_services().reports.low_stock(threshold)
    if not items:
        click.echo("No low-stock items.")
        return

    for item in items:
        click.echo(f"{item.unique_code:<25} {item.quantity:>5}  {item.name}")


@click.group('sessions')
def sessions_group():
    """Session maintenance commands."""


@sessions_group.command('cleanup')
@with_appcontext
def cleanup_sessions():
    """Delete expired or revoked sessions older than the retention window."""
    deleted = get_services().sessions.cleanup_expired()
    click.echo(f"PASS Deleted {deleted} session(s).")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(sessions_group)
