import click
from flask import current_app
from flask.cli import with_appcontext

from .config import MosaicConfig
from .mosaic.catalog import DEFAULT_MODULES
from .mosaic.graph import ModuleDescriptor, validate_catalog
from .wizard.definitions import WIZARDS


def echo_header(title):
    """
    Print a formatted header with title and underline.

    Args:
        title: Title text to display
    """
    click.echo(click.style(title, fg="green"))
    click.echo(click.style("-" * len(title), fg="green"))


def _app_modules():
    config = MosaicConfig.from_app_config(current_app.config)
    return config.modules or DEFAULT_MODULES


@click.command("list-modules")
@with_appcontext
def list_modules():
    """List the mosaic modules with prices and dependencies."""
    echo_header("Mosaic Modules")

    for data in _app_modules():
        module = ModuleDescriptor.from_dict(data)
        flags = []
        if module.required:
            flags.append("required")
        if module.locked:
            flags.append("locked")
        depends = ", ".join(module.dependencies) or "-"
        suffix = f" [{', '.join(flags)}]" if flags else ""
        click.echo(f"{module.id}: {module.title}, price {module.price:g}, depends on {depends}{suffix}")


@click.command("check-catalog")
@with_appcontext
def check_catalog():
    """Check that the configured module catalog is a valid dependency graph."""
    echo_header("Mosaic Catalog Check")

    try:
        modules = [ModuleDescriptor.from_dict(data) for data in _app_modules()]
    except (ValueError, KeyError) as e:
        raise click.ClickException(f"Invalid mosaic configuration: {e}")

    errors = validate_catalog(modules)
    if errors:
        for error in errors:
            click.echo(click.style(error, fg="red"))
        raise click.ClickException(f"{len(errors)} catalog error(s) found")

    click.echo(click.style(f"Catalog OK: {len(modules)} modules", fg="green"))


@click.command("list-wizards")
def list_wizards():
    """List the wizards and their steps."""
    echo_header("Mosaic Wizards")

    for wizard in WIZARDS.values():
        stage = wizard.stage.name if wizard.stage else "-"
        click.echo(f"{wizard.wizard_id}: {wizard.title} (final stage: {stage})")
        for index, step in enumerate(wizard.steps, 1):
            step_stage = f", stage {step.stage.name}" if step.stage else ""
            click.echo(f"  {index}. {step.name}: {step.title}{step_stage}")


@click.group()
def mosaic():
    """Mosaic workflow commands."""
    pass


mosaic.add_command(list_modules)
mosaic.add_command(check_catalog)
mosaic.add_command(list_wizards)
