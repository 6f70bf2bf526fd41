# Overview: Flask CLI command groups for bootstrap and staff account administration.

# backend/app/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to "app:create_app" and export SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY.
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system create-tables
#   Create all tables directly (dev/test; production uses flask db upgrade).
# - python -m flask system create-admin --email admin@example.com --full-name "Owner"
#   Create a confirmed identity plus an active admin profile (prompts for password).
# - python -m flask system add-stall --name "Stall 1" --location "Market St"
#   Add a stall.
# - python -m flask system add-menu-item --name "2pc Chicken" --price-cents 12900
#   Add a menu item (price in centavos).
#
# Staff administration through the deployed admin gateway
# (needs ADMIN_API_TOKEN, an admin's access token, or --token):
# - python -m flask staff create --email a@b.c --full-name "Ana" --stall-id 1
# - python -m flask staff resend-invite --email a@b.c
# - python -m flask staff delete <user-id>
# - python -m flask staff auth-status <user-id>

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import MenuItem, Profile, Stall
from .services.admin_api_client import AdminApiClient, AdminApiError
from .services.identity_service import IdentityProviderError, get_identity_client


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('create-tables')
@with_appcontext
def create_tables_command():
    """Create all tables from model metadata."""
    db.create_all()
    click.echo("Tables created.")


@system_group.command('create-admin')
@click.option('--email', required=True)
@click.option('--full-name', required=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_admin_command(email, full_name, password):
    """Create a confirmed admin account and its profile."""
    if db.session.query(Profile).filter_by(email=email).first():
        raise click.ClickException(f"A profile for {email} already exists")

    try:
        user = get_identity_client().create_user(email, password, email_confirm=True)
    except IdentityProviderError as exc:
        raise click.ClickException(exc.message)

    db.session.add(Profile(
        id=user.id,
        full_name=full_name,
        email=email,
        role="admin",
        status="active",
    ))
    db.session.commit()
    click.echo(f"Admin created: {email} ({user.id})")


@system_group.command('add-stall')
@click.option('--name', 'stall_name', required=True)
@click.option('--location', default=None)
@with_appcontext
def add_stall_command(stall_name, location):
    """Add a stall."""
    stall = Stall(stall_name=stall_name, location=location)
    db.session.add(stall)
    db.session.commit()
    click.echo(f"Stall created: {stall.stall_id} {stall.stall_name}")


@system_group.command('add-menu-item')
@click.option('--name', 'item_name', required=True)
@click.option('--price-cents', type=click.IntRange(min=0), required=True)
@with_appcontext
def add_menu_item_command(item_name, price_cents):
    """Add a menu item."""
    item = MenuItem(item_name=item_name.strip(), price_cents=price_cents)
    db.session.add(item)
    db.session.commit()
    click.echo(f"Menu item created: {item.item_id} {item.item_name}")


# =============================================================================
# STAFF (via admin gateway)
# =============================================================================

@click.group('staff')
@click.option('--token', envvar='ADMIN_API_TOKEN', default=None, help='Admin access token.')
@click.pass_context
def staff_group(ctx, token):
    """Staff account administration through the admin gateway."""
    ctx.meta["admin_api_token"] = token


def _client(ctx) -> AdminApiClient:
    token = ctx.meta.get("admin_api_token")
    return AdminApiClient.from_config(current_app.config, lambda: token)


def _call(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except AdminApiError as exc:
        raise click.ClickException(str(exc))


@staff_group.command('create')
@click.option('--email', required=True)
@click.option('--full-name', required=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--contact-number', default=None)
@click.option('--stall-id', type=int, default=None)
@click.pass_context
@with_appcontext
def staff_create_command(ctx, email, full_name, password, contact_number, stall_id):
    """Create a staff account (confirmation email is sent)."""
    result = _call(
        _client(ctx).create_staff_account,
        email=email,
        password=password,
        full_name=full_name,
        contact_number=contact_number,
        stall_id=stall_id,
    )
    click.echo(f"Staff created: {result['userId']}")


@staff_group.command('resend-invite')
@click.option('--email', required=True)
@click.pass_context
@with_appcontext
def staff_resend_invite_command(ctx, email):
    """Resend the confirmation email."""
    result = _call(_client(ctx).resend_staff_invite, email)
    click.echo(result.get("message", "Email resent"))


@staff_group.command('delete')
@click.argument('user_id')
@click.confirmation_option(prompt='Delete this staff account?')
@click.pass_context
@with_appcontext
def staff_delete_command(ctx, user_id):
    """Delete a staff account."""
    _call(_client(ctx).delete_staff_account, user_id)
    click.echo(f"Deleted: {user_id}")


@staff_group.command('auth-status')
@click.argument('user_id')
@click.pass_context
@with_appcontext
def staff_auth_status_command(ctx, user_id):
    """Show email confirmation and last sign-in for an account."""
    result = _call(_client(ctx).fetch_user_auth_status, user_id)
    click.echo(f"emailConfirmedAt: {result.get('emailConfirmedAt') or '-'}")
    click.echo(f"lastSignInAt:     {result.get('lastSignInAt') or '-'}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(staff_group)
