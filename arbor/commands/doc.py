"""
Document tree commands for the Arbor CLI.

Folders and leaves are addressed by key. Commands that take a parent default
to the root of the owner's tree.
"""
import json
from typing import Optional

import click

from arbor.commands import get_core, unwrap
from arbor.constants import VALID_KINDS
from arbor.models.container import ContainerNode


@click.group()
def doc():
    """Manage folders and notes in the document tree."""
    pass


def _display_tree(node: ContainerNode, depth: int = 0) -> None:
    marker = "/" if node.is_folder else ""
    flag = " (deleted)" if node.deleted else ""
    click.echo(f"{'  ' * depth}{node.title}{marker} [{node.key}]{flag}")
    for child in node.child_nodes():
        _display_tree(child, depth + 1)


@doc.command(name="tree")
@click.option("-a", "--all", "show_all", is_flag=True, help="Include soft-deleted nodes.")
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def show_tree(ctx: click.Context, show_all: bool, json_output: bool):
    """Show the document tree."""
    core = get_core(ctx)
    tree = unwrap(core.document_tree(include_deleted=show_all))
    if json_output:
        click.echo(json.dumps(tree.to_document(), indent=2, ensure_ascii=False))
    else:
        _display_tree(tree)


@doc.command()
@click.argument("title")
@click.option("-k", "--kind", type=click.Choice(VALID_KINDS), default="leaf", show_default=True)
@click.option("-p", "--parent", "parent_key", help="Parent folder key (default: root).")
@click.pass_context
def create(ctx: click.Context, title: str, kind: str, parent_key: Optional[str]):
    """Create a folder or note."""
    core = get_core(ctx)
    node = unwrap(core.create(parent_key or core.owner, title, kind))
    click.echo(f"Created {kind} '{node.title}' [{node.key}].")


@doc.command()
@click.argument("key")
@click.argument("title")
@click.pass_context
def rename(ctx: click.Context, key: str, title: str):
    """Rename a folder or note."""
    node = unwrap(get_core(ctx).rename(key, title))
    click.echo(f"Renamed [{node.key}] to '{node.title}'.")


@doc.command()
@click.argument("key")
@click.argument("parent_key")
@click.option("--position", type=int, help="Index among the new siblings (default: last).")
@click.pass_context
def move(ctx: click.Context, key: str, parent_key: str, position: Optional[int]):
    """Move a node into another folder."""
    unwrap(get_core(ctx).move(key, parent_key, position))
    click.echo(f"Moved [{key}] into [{parent_key}].")


@doc.command()
@click.argument("key")
@click.pass_context
def duplicate(ctx: click.Context, key: str):
    """Duplicate a node with its whole subtree and notes."""
    node = unwrap(get_core(ctx).duplicate(key))
    click.echo(f"Duplicated [{key}] as '{node.title}' [{node.key}].")


@doc.command()
@click.argument("key")
@click.pass_context
def delete(ctx: click.Context, key: str):
    """Move a node to the trash."""
    unwrap(get_core(ctx).soft_delete(key))
    click.echo(f"Moved [{key}] to the trash.")


@doc.command()
@click.argument("key")
@click.confirmation_option(prompt="Are you sure you want to permanently delete this node?")
@click.pass_context
def purge(ctx: click.Context, key: str):
    """Permanently delete a trashed node and its notes."""
    unwrap(get_core(ctx).hard_delete(key))
    click.echo(f"Permanently deleted [{key}].")


@doc.command()
@click.argument("key")
@click.pass_context
def restore(ctx: click.Context, key: str):
    """Restore a node from the trash."""
    unwrap(get_core(ctx).restore(key))
    click.echo(f"Restored [{key}].")


@doc.command()
@click.pass_context
def trash(ctx: click.Context):
    """List trashed nodes."""
    nodes = unwrap(get_core(ctx).trash())
    if not nodes:
        click.echo("Trash is empty.")
        return
    for node in nodes:
        click.echo(f"{node.title} [{node.key}]")
