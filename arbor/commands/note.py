"""
Note (outline) commands for the Arbor CLI.

A note is addressed by the key of its leaf; nodes inside it by their id.
"""
import json
from typing import Optional

import click

from arbor.commands import get_core, unwrap
from arbor.constants import VALID_MODES
from arbor.models.content import ContentNode


@click.group()
def note():
    """Read, import and edit note outlines."""
    pass


def _display_outline(node: ContentNode, depth: int = 0) -> None:
    fold = " [+]" if node.collapsed else ""
    click.echo(f"{'  ' * depth}- {node.text} ({node.id}){fold}")
    for child in node.children:
        _display_outline(child, depth + 1)


@note.command()
@click.argument("key")
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def show(ctx: click.Context, key: str, json_output: bool):
    """Show a note with node ids."""
    tree = unwrap(get_core(ctx).get_note(key))
    if json_output:
        click.echo(json.dumps(tree.to_document(), indent=2, ensure_ascii=False))
    else:
        _display_outline(tree)


@note.command()
@click.argument("key")
@click.option("-m", "--mode", type=click.Choice(VALID_MODES), default="markdown", show_default=True)
@click.pass_context
def export(ctx: click.Context, key: str, mode: str):
    """Export a note as markdown or minimal JSON."""
    click.echo(unwrap(get_core(ctx).export_note(key, mode)), nl=False)


@note.command(name="import")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("-p", "--parent", "parent_key", help="Parent folder key (default: root).")
@click.option("-t", "--title", help="Note title (default: the outline's first line).")
@click.option("-f", "--format", "fmt", type=click.Choice(VALID_MODES), default="markdown", show_default=True)
@click.pass_context
def import_note(ctx: click.Context, source, parent_key: Optional[str], title: Optional[str], fmt: str):
    """Create a note from a markdown list or outline JSON file ('-' for stdin)."""
    core = get_core(ctx)
    leaf = unwrap(core.import_note(parent_key or core.owner, source.read(), title=title, format=fmt))
    click.echo(f"Imported '{leaf.title}' [{leaf.key}].")


@note.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("-p", "--parent", "parent_key", help="Parent folder key (default: root).")
@click.option("-t", "--title", help="Note title (default: the outline's title).")
@click.pass_context
def generate(ctx: click.Context, source, parent_key: Optional[str], title: Optional[str]):
    """Create a note from generated outline output ('-' for stdin)."""
    core = get_core(ctx)
    leaf = unwrap(core.generate_note(parent_key or core.owner, source.read(), title=title))
    click.echo(f"Generated '{leaf.title}' [{leaf.key}].")


@note.command()
@click.argument("key")
@click.argument("parent_id")
@click.option("-t", "--text", help="Node text.")
@click.pass_context
def add(ctx: click.Context, key: str, parent_id: str, text: Optional[str]):
    """Add a child node."""
    node = unwrap(get_core(ctx).add_child(key, parent_id, text))
    click.echo(f"Added ({node.id}).")


@note.command()
@click.argument("key")
@click.argument("node_id")
@click.option("-t", "--text", help="Node text.")
@click.pass_context
def sibling(ctx: click.Context, key: str, node_id: str, text: Optional[str]):
    """Add a node right after another one."""
    node = unwrap(get_core(ctx).add_sibling(key, node_id, text))
    click.echo(f"Added ({node.id}).")


@note.command()
@click.argument("key")
@click.argument("node_id")
@click.argument("text")
@click.pass_context
def edit(ctx: click.Context, key: str, node_id: str, text: str):
    """Replace a node's text."""
    node = unwrap(get_core(ctx).edit_text(key, node_id, text))
    click.echo(f"Updated ({node.id}).")


@note.command()
@click.argument("key")
@click.argument("node_id")
@click.pass_context
def toggle(ctx: click.Context, key: str, node_id: str):
    """Collapse or expand a node."""
    node = unwrap(get_core(ctx).toggle_collapse(key, node_id))
    click.echo(f"({node.id}) is now {'collapsed' if node.collapsed else 'expanded'}.")


@note.command()
@click.argument("key")
@click.argument("node_id")
@click.pass_context
def remove(ctx: click.Context, key: str, node_id: str):
    """Delete a node and its children."""
    unwrap(get_core(ctx).delete_node(key, node_id))
    click.echo(f"Removed ({node_id}).")


def _structural(name: str, help_text: str):
    """Build a KEY NODE_ID command that calls the facade method of the same name."""

    @note.command(name=name.replace("_", "-"), help=help_text)
    @click.argument("key")
    @click.argument("node_id")
    @click.pass_context
    def command(ctx: click.Context, key: str, node_id: str):
        unwrap(getattr(get_core(ctx), name)(key, node_id))
        click.echo(f"Done ({node_id}).")

    return command


demote = _structural("demote", "Indent a node under its previous sibling.")
promote = _structural("promote", "Outdent a node to follow its parent.")
move_up = _structural("move_up", "Swap a node with its previous sibling.")
move_down = _structural("move_down", "Swap a node with its next sibling.")
