# Overview: Flask CLI command groups for inspection and maintenance.

# backend/distrack/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Companies (tenants):
# - python -m flask companies list
#   List all companies with user and product counts.
#
# Users:
# - python -m flask users list [--company "Acme"]
# - python -m flask users create --company "Acme" --user-id mgr1 --name "Maria" --password "secret1" --role manager
#   Creates the company on first use, same as self-registration.
#
# Stock:
# - python -m flask stock show --company "Acme"
#   Initial, distributed and remaining quantity per product.
#
# Permissions:
# - python -m flask perms list [--role worker] [--category REPORTING]
# - python -m flask perms check worker VIEW_REPORTS

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Company, User, Product, ROLES
from .permissions import (
    PERMISSION_DEFINITIONS,
    get_permission_definition,
    get_permissions_by_category,
    get_roles_for_permission,
)
from .services.auth_service import register_user, get_company_by_name
from .services.ledger_service import stock_levels_query
from .services.permission_service import has_permission
from .validation import ValidationError, ConflictError


@click.group('system')
def system_group():
    """System maintenance commands."""


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


@click.group('companies')
def companies_group():
    """Company (tenant) inspection commands."""


@companies_group.command('list')
@with_appcontext
def list_companies():
    """List all companies."""
    companies = db.session.query(Company).order_by(Company.id).all()

    if not companies:
        click.echo("No companies found.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'ID':<5} {'Name':<35} {'Users':<8} {'Products'}")
    click.echo("="*70)

    for company in companies:
        user_count = db.session.query(User).filter_by(company_id=company.id).count()
        product_count = db.session.query(Product).filter_by(company_id=company.id).count()
        click.echo(f"{company.id:<5} {company.name:<35} {user_count:<8} {product_count}")

    click.echo("="*70 + "\n")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--company', 'company_name', prompt=True, help='Company name (created if new)')
@click.option('--user-id', prompt=True, help='Login id, unique within the company')
@click.option('--name', prompt=True, help='Display name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ROLES)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(company_name, user_id, name, password, role):
    """
    Create a user.

    MULTI-TENANT: The company is created if no company has this name yet.
    Password must be at least 6 characters.
    """
    try:
        user = register_user(
            company_name=company_name,
            user_id=user_id,
            password=password,
            name=name,
            role=role,
        )
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created user: {user.user_id} ({user.name}) with role '{user.role}'")
    click.echo(f"     Company: {user.company.name} (ID: {user.company_id})")


@users_group.command('list')
@click.option('--company', 'company_name', help='Filter by company name')
@with_appcontext
def list_users(company_name):
    """List users with their roles."""
    query = db.session.query(User)

    if company_name:
        company = get_company_by_name(company_name)
        if company is None:
            raise click.ClickException(f"Company {company_name!r} not found")
        query = query.filter_by(company_id=company.id)

    users = query.order_by(User.company_id, User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Company':<8} {'User ID':<20} {'Name':<30} {'Role'}")
    click.echo("="*80)

    for user in users:
        click.echo(f"{user.id:<5} {user.company_id:<8} {user.user_id:<20} {user.name:<30} {user.role}")

    click.echo("="*80 + "\n")


@click.group('stock')
def stock_group():
    """Stock inspection commands."""


@stock_group.command('show')
@click.option('--company', 'company_name', required=True, help='Company name')
@with_appcontext
def show_stock(company_name):
    """Initial, distributed and remaining quantity for every product."""
    company = get_company_by_name(company_name)
    if company is None:
        raise click.ClickException(f"Company {company_name!r} not found")

    query, _ = stock_levels_query(company.id)
    rows = query.order_by(Product.name.asc(), Product.id.asc()).all()

    if not rows:
        click.echo("No products found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Product':<30} {'Category':<15} {'Initial':>8} {'Out':>8} {'Left':>8}")
    click.echo("="*80)

    for product, remaining in rows:
        distributed = product.initial_quantity - int(remaining)
        click.echo(
            f"{product.id:<5} {product.name:<30} {product.category or '-':<15} "
            f"{product.initial_quantity:>8} {distributed:>8} {int(remaining):>8}"
        )

    click.echo("="*80 + "\n")


@click.group('perms')
def perms_group():
    """Permission inspection commands."""


@perms_group.command('list')
@click.option('--role', type=click.Choice(list(ROLES)), help='Only permissions granted to this role')
@click.option('--category', help='Filter by category (INVENTORY, DISTRIBUTION, REPORTING)')
def list_perms(role, category):
    """List permission codes and the roles that hold them."""
    perms = get_permissions_by_category(category.upper()) if category else PERMISSION_DEFINITIONS

    for code, name, _description, perm_category in perms:
        roles = get_roles_for_permission(code)
        if role and role not in roles:
            continue
        click.echo(f"{code:<25} {perm_category:<14} {', '.join(roles) or '-':<25} {name}")


@perms_group.command('check')
@click.argument('role', type=click.Choice(list(ROLES)))
@click.argument('code')
def check_perm(role, code):
    """Check whether a role holds a permission."""
    definition = get_permission_definition(code.upper())
    if definition is None:
        raise click.ClickException(f"Unknown permission code: {code}")

    if has_permission(role, definition["code"]):
        click.echo(f"PASS {role} has {definition['code']} ({definition['description']})")
    else:
        click.echo(f"DENY {role} lacks {definition['code']}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(companies_group)
    app.cli.add_command(users_group)
    app.cli.add_command(stock_group)
    app.cli.add_command(perms_group)
