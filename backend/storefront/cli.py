# Overview: Flask CLI command groups for bootstrap and user administration.

# backend/storefront/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User administration:
# - python -m flask users list
#   List all users with their roles.
# - python -m flask users create --username root --email root@storefront.local --password "Password123!" --role SuperUser
#   Create a user (prompts if options are omitted). The only way to create the first SuperUser.
# - python -m flask users set-role alice Admin
#   Change a user's role.

import click
from flask.cli import with_appcontext

from .errors import ApiError
from .extensions import db
from .models import User
from .roles import Role
from .services.auth_service import create_user

ROLE_CHOICES = [r.value for r in Role]


@click.group('system')
def system_group():
    """Database bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm dropping all data')
@with_appcontext
def reset_db(yes):
    """Drop and recreate all tables (DEV/TEST only)."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('users')
def users_group():
    """User administration commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = db.session.query(User).order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Username':<20} {'Email':<35} {'Role'}")
    click.echo("="*80)

    for user in users:
        click.echo(f"{user.id:<5} {user.username:<20} {user.email:<35} {user.role.value}")

    click.echo("="*80 + "\n")


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(ROLE_CHOICES), default=Role.USER.value, show_default=True)
@with_appcontext
def create_user_cli(username, email, password, role):
    """Create a user with any role."""
    try:
        user = create_user(username=username, email=email, password=password, role=Role(role))
    except ApiError as e:
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)

    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role.value}'")


@users_group.command('set-role')
@click.argument('username')
@click.argument('role', type=click.Choice(ROLE_CHOICES))
@with_appcontext
def set_role(username, role):
    """Change a user's role."""
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        click.echo(f"FAIL User '{username}' not found")
        raise SystemExit(1)

    user.role = Role(role)
    db.session.commit()
    click.echo(f"PASS {username} is now {role}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
