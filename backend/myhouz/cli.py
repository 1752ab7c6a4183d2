# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/myhouz/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (use `flask db upgrade` for migrated databases).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list [--type professional]
#   List accounts with type and active status.
# - python -m flask users create --email pro@myhouz.local --password "Password123!" --first-name Ana --last-name Pro --type professional
#   Create an account (prompts if options are omitted).
#
# Register inspection:
# - python -m flask registers list --seller-id 1
#   List a seller's registers with their shift status.
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions
#   Delete expired and revoked sessions older than 30 days.

import click
from flask.cli import with_appcontext

from .extensions import db
from .errors import DomainError
from .models import User
from .models.auth import USER_TYPES
from .services import register_service, session_service
from .services.auth_service import create_user


def _cents(value: int | None) -> str:
    return "-" if value is None else f"{value / 100:.2f}"


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


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

    click.echo("PASS Database reset complete.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--first-name', prompt=True, help='First name')
@click.option('--last-name', prompt=True, help='Last name')
@click.option('--type', 'user_type', type=click.Choice(USER_TYPES), default='individual', show_default=True)
@with_appcontext
def create_user_cli(email, password, first_name, last_name, user_type):
    """
    Create a new account.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character
    """
    try:
        user = create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            user_type=user_type,
        )
    except DomainError as e:
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)

    click.echo(f"PASS Created {user.user_type} user: {user.email} (ID: {user.id})")


@users_group.command('list')
@click.option('--type', 'user_type', type=click.Choice(USER_TYPES), help='Filter by account type')
@with_appcontext
def list_users(user_type):
    """List all users."""
    query = db.session.query(User)

    if user_type:
        query = query.filter_by(user_type=user_type)

    users = query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'ID':<5} {'Email':<35} {'Name':<25} {'Type':<14} {'Active'}")
    click.echo("=" * 90)

    for user in users:
        name = f"{user.first_name} {user.last_name}"
        active = "yes" if user.is_active else "no"
        click.echo(f"{user.id:<5} {user.email:<35} {name:<25} {user.user_type:<14} {active}")

    click.echo("=" * 90 + "\n")


@click.group('registers')
def registers_group():
    """Register inspection commands."""


@registers_group.command('list')
@click.option('--seller-id', type=int, required=True, help='Seller (professional user) ID')
@click.option('--status', type=click.Choice(['open', 'closed']), help='Filter by status')
@with_appcontext
def list_registers_cli(seller_id, status):
    """
    List a seller's registers.

    Example:
        flask registers list --seller-id 1
        flask registers list --seller-id 1 --status open
    """
    registers = register_service.list_registers(seller_id, status=status)

    if not registers:
        click.echo("No registers found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'ID':<5} {'Name':<30} {'Status':<8} {'Sales':<7} {'Total':<12} {'Opening':<12} {'Closing'}")
    click.echo("=" * 90)

    for reg in registers:
        click.echo(
            f"{reg.id:<5} {reg.name[:30]:<30} {reg.status:<8} {reg.sales_count:<7} "
            f"{_cents(reg.total_sales_cents):<12} {_cents(reg.opening_balance_cents):<12} "
            f"{_cents(reg.closing_balance_cents)}"
        )

    click.echo("=" * 90 + "\n")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@with_appcontext
def cleanup_sessions_cli():
    """Delete expired and revoked sessions older than 30 days."""
    deleted = session_service.cleanup_expired_sessions()
    click.echo(f"Deleted {deleted} expired or revoked sessions.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(registers_group)
    app.cli.add_command(maintenance_group)
