"""
CLI for Arbor using .arbor/ folder-based storage.

Global options select the storage directory and the owner whose document
tree the commands operate on.
"""
from pathlib import Path
from typing import Optional

import click

from arbor.commands.config import config
from arbor.commands.doc import doc
from arbor.commands.note import note
from arbor.logging_config import configure_logging


@click.group()
@click.option(
    "--dir", "arbor_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Storage directory (default: .arbor in the current directory).",
)
@click.option("--owner", default="default", show_default=True, help="Owner of the document tree.")
@click.option("-v", "--verbose", is_flag=True, help="Log every tree mutation to stderr.")
@click.pass_context
def cli(ctx: click.Context, arbor_dir: Optional[Path], owner: str, verbose: bool):
    """Organize notes in folders and edit each note as an outline."""
    configure_logging(verbose=verbose)
    ctx.obj = {"arbor_dir": arbor_dir, "owner": owner}


cli.add_command(doc)
cli.add_command(note)
cli.add_command(config)


if __name__ == '__main__':
    cli()
