"""Render content trees for export."""

import io
import json
from typing import Any, Dict, Optional

from arbor.constants import (
    JSON_MODE,
    MARKDOWN_MODE,
    VALIDATION_INVALID_MODE,
    get_export_indent,
)
from arbor.exceptions import ValidationError
from arbor.models.content import ContentNode
from arbor.text import single_line


def to_minimal(tree: ContentNode) -> Dict[str, Any]:
    """Project a tree onto ``text`` and ``children`` only.

    Ids, parent ids and collapse state are dropped; ``children`` is omitted
    on nodes that have none.
    """
    node: Dict[str, Any] = {"text": tree.text}
    if tree.children:
        node["children"] = [to_minimal(child) for child in tree.children]
    return node


def to_markdown(tree: ContentNode, indent: Optional[int] = None) -> str:
    """Render the tree as an indented bullet list, one node per line.

    Line breaks inside a node's text are joined with spaces so every node
    stays on its own bullet.

    Args:
        tree: Root of the content tree.
        indent: Spaces per depth level (default 4).

    Returns:
        Markdown text ending with a newline.
    """
    width = indent if indent is not None else get_export_indent()
    out = io.StringIO()
    for node, depth in tree.walk_with_depth():
        out.write(f"{' ' * (width * depth)}- {single_line(node.text)}\n")
    return out.getvalue()


def serialize(tree: ContentNode, mode: str, indent: Optional[int] = None) -> str:
    """Serialize a content tree.

    Args:
        tree: Root of the content tree.
        mode: "json" for the minimal projection, "markdown" for a bullet list.
        indent: Markdown spaces per depth level (default 4).

    Raises:
        ValidationError: If the mode is unknown.
    """
    if mode == JSON_MODE:
        return json.dumps(to_minimal(tree), indent=2, ensure_ascii=False)
    if mode == MARKDOWN_MODE:
        return to_markdown(tree, indent)
    raise ValidationError(f"Invalid mode: '{mode}'. {VALIDATION_INVALID_MODE}")
