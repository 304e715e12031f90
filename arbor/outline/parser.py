"""
Indentation-driven outline parser.

Rebuilds a content tree from flat, line-oriented text such as pasted notes
or an exported markdown list. Bulleted lines (``-``, ``+`` or ``*`` followed
by whitespace or ending the line) nest according to their indentation; a bare
marker is a bullet with empty text. Any other line is a plain line and becomes
a leaf under the most recent bullet.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from loguru import logger

from arbor.constants import DEFAULT_IMPORT_TITLE, TAB_WIDTH, get_default_indent_unit
from arbor.ids import IdFactory, fresh_id, unique_id
from arbor.models.content import ContentNode
from arbor.text import cap_text

BULLET_PATTERN = re.compile(r"^(\s*)[-+*](?:\s+(.*))?$")


@dataclass
class OutlineLine:
    """One non-blank input line after classification.

    Attributes:
        text: Line text without indentation or bullet marker, trimmed.
        indent: Leading whitespace width, tabs expanded.
        bulleted: True for list items, False for plain text lines.
    """

    text: str
    indent: int
    bulleted: bool


def classify_lines(text: str) -> List[OutlineLine]:
    """Split text into non-blank lines and classify each one."""
    lines: List[OutlineLine] = []
    for raw in text.splitlines():
        if not raw.strip():
            continue
        match = BULLET_PATTERN.match(raw)
        if match:
            indent = len(match.group(1).expandtabs(TAB_WIDTH))
            text = (match.group(2) or "").strip()
            lines.append(OutlineLine(text=text, indent=indent, bulleted=True))
        else:
            lines.append(OutlineLine(text=raw.strip(), indent=0, bulleted=False))
    return lines


def infer_indent_unit(lines: List[OutlineLine], default: Optional[int] = None) -> int:
    """Infer how many columns make one nesting level.

    The first indented bullet decides: an even width means 2, otherwise
    widths up to 2 mean 2 and wider ones mean 4. When every indented bullet
    in the document is a multiple of 4 the unit is 4. Without any indented
    bullet the default (4) applies.
    """
    fallback = default if default is not None else get_default_indent_unit()
    widths = [line.indent for line in lines if line.bulleted and line.indent > 0]
    if not widths:
        return fallback

    first = widths[0]
    if all(width % 4 == 0 for width in widths):
        return 4
    if first % 2 == 0:
        return 2
    return 2 if first <= 2 else 4


class OutlineParser:
    """
    Stack-based reconstruction of a content tree from indented text.

    Usage:
        parser = OutlineParser()
        tree = parser.parse("- Topic\\n  - Sub")
        parser.indent_unit  # 2
    """

    def __init__(
        self,
        id_factory: IdFactory = fresh_id,
        default_unit: Optional[int] = None,
        empty_title: str = DEFAULT_IMPORT_TITLE,
        max_length: Optional[int] = None,
    ) -> None:
        """
        Initialize OutlineParser.

        Args:
            id_factory: Source of fresh node ids.
            default_unit: Indentation unit when none can be inferred.
            empty_title: Root text used for empty input.
            max_length: Text cap; defaults to the configured cap (100).
        """
        self._id_factory = id_factory
        self._default_unit = default_unit
        self._empty_title = empty_title
        self._max_length = max_length
        self._taken: Set[str] = set()
        self.indent_unit: Optional[int] = None

    def _node(self, text: str, parent_id: Optional[str] = None) -> ContentNode:
        node_id = unique_id(self._taken, self._id_factory)
        self._taken.add(node_id)
        return ContentNode(
            id=node_id, text=cap_text(text, self._max_length), parent_id=parent_id or node_id
        )

    def parse(self, text: str) -> ContentNode:
        """Parse text into a content tree.

        Args:
            text: Raw multi-line text.

        Returns:
            Root of the rebuilt tree. Empty input yields a single placeholder
            root with no children.
        """
        self._taken = set()
        lines = classify_lines(text or "")
        if not lines:
            self.indent_unit = None
            return self._node(self._empty_title)

        self.indent_unit = infer_indent_unit(lines, self._default_unit)
        root, start = self._select_root(lines)

        stack: List[Tuple[ContentNode, int]] = [(root, 1)]
        for line in lines[start:]:
            if line.bulleted:
                level = line.indent // self.indent_unit + 1
                while len(stack) > 1 and stack[-1][1] >= level:
                    stack.pop()
                parent = stack[-1][0]
                node = self._node(line.text, parent.id)
                parent.children.append(node)
                stack.append((node, level))
            else:
                parent = stack[-1][0]
                parent.children.append(self._node(line.text, parent.id))

        logger.debug(
            f"Parsed {len(lines)} lines with indent unit {self.indent_unit} "
            f"into root {root.text!r}"
        )
        return root

    def _select_root(self, lines: List[OutlineLine]) -> Tuple[ContentNode, int]:
        """Pick the root line; everything before it is discarded.

        Returns:
            (root node, index of the first line after the root)
        """
        for position, line in enumerate(lines):
            if line.bulleted:
                if position:
                    logger.debug(f"Discarding {position} line(s) before the first bullet")
                return self._node(line.text), position + 1
        return self._node(lines[0].text), 1


def parse_outline(text: str, id_factory: IdFactory = fresh_id) -> ContentNode:
    """Parse indented text into a content tree."""
    return OutlineParser(id_factory=id_factory).parse(text)
