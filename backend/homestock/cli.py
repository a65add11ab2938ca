# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/homestock/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to homestock (PowerShell: $env:FLASK_APP="homestock").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create tables (if missing) and seed the minimal/standard/extended presets.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Hierarchy rules:
# - python -m flask hierarchy presets
#   List preset names and their allowed placements.
# - python -m flask hierarchy apply-preset household-1 --preset extended
#   Replace a rule-set with a preset (destructive).
# - python -m flask hierarchy check household-1 CABINET SHELF
#   Check whether a placement is allowed.
#
# Households and locations:
# - python -m flask households create --name "Hjemme" --preset standard
# - python -m flask households list
# - python -m flask locations tree 1
#   Print a household's active location tree.

import click
from flask.cli import with_appcontext

from .extensions import db
from .errors import HierarchyError
from .services import household_service, location_service
from .services.hierarchy_service import default_engine


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create tables and seed every preset under its own rule-set name."""
    click.echo("START Initializing homestock...")
    db.create_all()
    for name in default_engine.presets:
        rules = default_engine.apply_preset(name)
        click.echo(f"PASS Seeded preset {name} ({len(rules)} rules)")
    click.echo("DONE")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.confirm("This deletes ALL data. Continue?", abort=True)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('hierarchy')
def hierarchy_group():
    """Hierarchy rule-set commands."""


@hierarchy_group.command('presets')
@with_appcontext
def list_presets_cli():
    for preset in default_engine.list_presets():
        click.echo(f"{preset['name']} ({preset['rule_count']} rules)")
        for rule in preset["rules"]:
            click.echo(f"  {rule['parent_type']:<18} -> {rule['child_type']}")


@hierarchy_group.command('apply-preset')
@click.argument('rule_set_name')
@click.option('--preset', help='Preset to copy (defaults to RULE_SET_NAME)')
@with_appcontext
def apply_preset_cli(rule_set_name, preset):
    try:
        rules = default_engine.apply_preset(rule_set_name, preset)
    except HierarchyError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"PASS {rule_set_name}: {len(rules)} rules from preset {preset or rule_set_name}")


@hierarchy_group.command('check')
@click.argument('rule_set_name')
@click.argument('parent_type')
@click.argument('child_type')
@with_appcontext
def check_placement_cli(rule_set_name, parent_type, child_type):
    try:
        allowed = default_engine.is_allowed(rule_set_name, parent_type, child_type)
    except ValueError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{parent_type.upper()} -> {child_type.upper()}: {'ALLOWED' if allowed else 'NOT ALLOWED'}")


@click.group('households')
def households_group():
    """Household commands."""


@households_group.command('create')
@click.option('--name', required=True, help='Household name')
@click.option('--preset', default='standard', show_default=True, help='Rule preset to start from')
@with_appcontext
def create_household_cli(name, preset):
    try:
        household = household_service.create_household(name, preset=preset)
    except (HierarchyError, household_service.HouseholdError) as exc:
        raise click.ClickException(str(exc))
    click.echo(f"PASS Created household {household.name} (ID: {household.id}, rule-set: {household.rule_set_name})")


@households_group.command('list')
@with_appcontext
def list_households_cli():
    for household in household_service.list_households():
        status = "active" if household.is_active else "inactive"
        click.echo(f"{household.id:>4}  {household.name:<30} {household.rule_set_name or '-':<20} {status}")


@click.group('locations')
def locations_group():
    """Location inspection commands."""


@locations_group.command('tree')
@click.argument('household_id', type=int)
@with_appcontext
def location_tree_cli(household_id):
    try:
        tree = location_service.get_location_tree(household_id)
    except HierarchyError as exc:
        raise click.ClickException(str(exc))

    def _echo(node, depth=0):
        location = node["location"]
        click.echo(f"{'  ' * depth}{location['name']}  [{location['type']}] #{location['id']}")
        for child in node["children"]:
            _echo(child, depth + 1)

    for root in tree:
        _echo(root)


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(hierarchy_group)
    app.cli.add_command(households_group)
    app.cli.add_command(locations_group)
