"""
Config command group for the Arbor CLI.

Commands for viewing and editing settings stored in .arbor/config.json.
"""
import json

import click
from pydantic import ValidationError as PydanticValidationError

from arbor.exceptions import StorageError
from arbor.managers.storage_manager import StorageManager
from arbor.models.files import ConfigFile


@click.group()
def config():
    """View and edit configuration.

    Configuration is stored in .arbor/config.json.
    """
    pass


def _storage(ctx: click.Context) -> StorageManager:
    return StorageManager((ctx.find_root().obj or {}).get("arbor_dir"))


@config.command(name="show")
@click.pass_context
def show_config(ctx: click.Context):
    """Show current configuration."""
    try:
        current = _storage(ctx).load_config()
    except StorageError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(current.model_dump(mode="json"), indent=2))


@config.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite an existing config.json.")
@click.pass_context
def init_config(ctx: click.Context, force: bool):
    """Write config.json with default values."""
    storage = _storage(ctx)
    path = storage.arbor_dir / "config.json"
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists. Use --force to overwrite.")
    storage.save_config(ConfigFile())
    click.echo(f"Wrote {path}.")


@config.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_config(ctx: click.Context, key: str, value: str):
    """Set a configuration value."""
    if key not in ConfigFile.model_fields or key == "schema_version":
        raise click.ClickException(f"Unknown config key '{key}'.")
    storage = _storage(ctx)
    try:
        current = storage.load_config().model_dump()
        current[key] = value
        updated = ConfigFile.model_validate(current)
    except StorageError as e:
        raise click.ClickException(str(e))
    except PydanticValidationError as e:
        raise click.ClickException(f"Validation Error: invalid value for '{key}': {e.errors()[0]['msg']}")
    storage.save_config(updated)
    click.echo(f"Set {key} = {getattr(updated, key)}")
