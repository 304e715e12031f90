"""
Outline normalizer for externally generated candidates.

A text generator returns a loosely shaped outline: a node object, a
``{"title", "nodes"}`` result, a bare array of nodes, or a raw string that
should contain one of those as JSON. The normalizer turns any of them into a
canonical content tree with fresh ids, wired parent ids, capped text and
children that are always lists.

Parsing is lenient: malformed fragments are coerced into empty
nodes instead of rejected, so a partly broken generation still yields a
usable outline. Every coercion is logged at debug level.
"""

import json
from typing import Any, Optional, Set

from loguru import logger

from arbor.constants import DEFAULT_CANDIDATE_TITLE, get_text_max_length
from arbor.ids import IdFactory, fresh_id, unique_id
from arbor.models.candidate import MalformedCandidate, classify_fragment
from arbor.models.content import ContentNode
from arbor.text import cap_text


def extract_json(content: str) -> Any:
    """Decode provider output that should contain JSON.

    Tries the whole string first, then the outermost ``{...}`` substring.

    Returns:
        The decoded value, or None when neither attempt decodes.
    """
    try:
        return json.loads(content)
    except (TypeError, ValueError):
        pass

    start = content.find("{")
    end = content.rfind("}")
    if start >= 0 and end > start:
        try:
            return json.loads(content[start : end + 1])
        except ValueError:
            pass
    return None


class OutlineNormalizer:
    """
    Converts untrusted candidates into canonical content trees.

    Coercion rules for a malformed fragment:
    - not an object -> empty text, no children
    - text missing or null -> empty text
    - text of another scalar type -> its string form
    - children not a list -> no children
    """

    def __init__(
        self,
        id_factory: IdFactory = fresh_id,
        max_length: Optional[int] = None,
        default_title: str = DEFAULT_CANDIDATE_TITLE,
    ) -> None:
        """
        Initialize OutlineNormalizer.

        Args:
            id_factory: Source of fresh node ids.
            max_length: Text cap; defaults to the configured cap (100).
            default_title: Root text when the candidate carries none.
        """
        self._id_factory = id_factory
        self._max_length = max_length
        self._default_title = default_title
        self._taken: Set[str] = set()

    @property
    def max_length(self) -> int:
        return self._max_length if self._max_length is not None else get_text_max_length()

    def normalize(self, candidate: Any, title: Optional[str] = None) -> ContentNode:
        """Normalize a candidate outline.

        Args:
            candidate: Node object, ``{"title", "nodes"}`` object, list of
                nodes, or raw provider text.
            title: Root text used when the candidate is a bare list.

        Returns:
            Canonical content tree.
        """
        self._taken = set()
        root_title = title if title is not None else self._default_title

        if isinstance(candidate, str):
            decoded = extract_json(candidate)
            if decoded is None:
                logger.warning("Candidate text is not JSON; using an empty outline")
            candidate = decoded

        if isinstance(candidate, list):
            return self._build({"text": root_title, "children": candidate}, None)

        if isinstance(candidate, dict) and "text" not in candidate and (
            "title" in candidate or "nodes" in candidate
        ):
            nodes = candidate.get("nodes")
            return self._build(
                {"text": candidate.get("title") or root_title, "children": nodes},
                None,
            )

        if not isinstance(candidate, dict):
            logger.debug(f"Unusable candidate of type {type(candidate).__name__}; empty outline")
            return self._build({"text": root_title, "children": []}, None)

        return self._build(candidate, None)

    def _build(self, raw: Any, parent_id: Optional[str]) -> ContentNode:
        fragment = classify_fragment(raw)
        if isinstance(fragment, MalformedCandidate):
            logger.debug(f"Coercing malformed outline fragment: {fragment.reason}")
            text, children = self._coerce(raw)
        else:
            text, children = fragment.text, fragment.children

        node_id = unique_id(self._taken, self._id_factory)
        self._taken.add(node_id)
        node = ContentNode(
            id=node_id,
            text=cap_text(text, self.max_length),
            parent_id=parent_id or node_id,
        )
        node.children = [self._build(child, node_id) for child in children]
        return node

    @staticmethod
    def _coerce(raw: Any):
        if not isinstance(raw, dict):
            return "", []
        text = raw.get("text")
        children = raw.get("children")
        return (
            "" if text is None else str(text),
            children if isinstance(children, list) else [],
        )


def normalize_outline(
    candidate: Any,
    title: Optional[str] = None,
    id_factory: IdFactory = fresh_id,
    max_length: Optional[int] = None,
) -> ContentNode:
    """Normalize a loosely shaped candidate into a canonical content tree."""
    normalizer = OutlineNormalizer(id_factory=id_factory, max_length=max_length)
    return normalizer.normalize(candidate, title=title)
