# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/stockpos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: python -m flask --app wsgi <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask --app wsgi system init [--sample-data]
#   Idempotent bootstrap: creates tables, default settings and the default admin.
# - python -m flask --app wsgi system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User maintenance:
# - python -m flask --app wsgi users reset-password --email admin@stockpos.local
#   Set a new password without knowing the current one.
#
# Inventory inspection:
# - python -m flask --app wsgi items low-stock [--threshold 10]
#   List items at or below their minimum or the global threshold.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .services.pos_service import PosService, get_pos_service
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--sample-data/--no-sample-data', default=None,
              help='Insert sample items into an empty catalogue (default: SEED_SAMPLE_DATA)')
@with_appcontext
def init_system(sample_data):
    """
    Initialize StockPOS: schema, default settings and the default administrator.

    Safe to run repeatedly; existing settings and users are left alone.

    SECURITY: Change the default password immediately!
    """
    click.echo("START Initializing StockPOS...")

    db.create_all()
    click.echo("PASS Tables ready")

    service: PosService = get_pos_service()

    added = service.initialize_default_settings()
    if added:
        click.echo(f"PASS Added default settings: {', '.join(added)}")
    else:
        click.echo("PASS Default settings already present")

    if service.initialize_default_user():
        click.echo(f"PASS Created default user: {current_app.config['DEFAULT_ADMIN_EMAIL']}")
    else:
        click.echo("PASS Default user already exists")

    if sample_data is None:
        sample_data = current_app.config["SEED_SAMPLE_DATA"]
    if sample_data:
        count = service.ledger.seed_sample_items()
        click.echo(f"PASS Inserted {count} sample items" if count else "PASS Catalogue not empty; no samples added")

    click.echo("DONE StockPOS initialized")


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

    click.echo("PASS Database reset complete. Run 'python -m flask --app wsgi system init' to initialize.")


@click.group('users')
def users_group():
    """User maintenance commands."""


@users_group.command('reset-password')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='New password')
@with_appcontext
def reset_password_cli(email, password):
    """Set a new password for a user without the current one."""
    try:
        updated = get_pos_service().auth.reset_password(email, password)
    except ValidationError as e:
        click.echo(f"FAIL {e}")
        return

    if not updated:
        click.echo(f"FAIL No user with email {email}")
        return
    click.echo(f"PASS Password updated for {email}")


@click.group('items')
def items_group():
    """Inventory inspection commands."""


@items_group.command('low-stock')
@click.option('--threshold', type=int, default=None, help='Global threshold (default: LOW_STOCK_THRESHOLD)')
@with_appcontext
def low_stock_cli(threshold):
    """List items at or below their minimum stock or the threshold."""
    items = get_pos_service().get_low_stock_items(threshold)
    if not items:
        click.echo("No low-stock items")
        return

    click.echo(f"{'Name':<32} {'Barcode':<16} {'Qty':>6} {'Min':>6}")
    for item in items:
        click.echo(
            f"{item['name'][:32]:<32} {(item['barcode'] or '-'):<16} "
            f"{item['quantity']:>6} {(item['min_stock'] if item['min_stock'] is not None else '-'):>6}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(items_group)
