"""
Candidate outline fragments produced by an external text generator.

Provider output is untrusted, so each raw fragment is classified into a
tagged union before normalization: a well-formed node with string text and a
list of children, or a malformed fragment carrying the raw value and the
reason it failed classification. The normalizer coerces both into canonical
ContentNodes.
"""

from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, Field


class WellFormedCandidate(BaseModel):
    """Fragment shaped like ``{"text": str, "children": [...]}``."""

    kind: Literal["node"] = "node"
    text: str
    children: List[Any] = Field(default_factory=list)


class MalformedCandidate(BaseModel):
    """Fragment that does not match the node shape."""

    kind: Literal["malformed"] = "malformed"
    raw: Any = None
    reason: str


CandidateFragment = Annotated[
    Union[WellFormedCandidate, MalformedCandidate], Field(discriminator="kind")
]


def classify_fragment(raw: Any) -> CandidateFragment:
    """Classify one raw fragment.

    Args:
        raw: Any decoded JSON value.

    Returns:
        WellFormedCandidate when ``raw`` is an object with string ``text`` and
        a list (or absent) ``children``; MalformedCandidate otherwise.
    """
    if not isinstance(raw, dict):
        return MalformedCandidate(raw=raw, reason=f"expected object, got {type(raw).__name__}")

    text = raw.get("text")
    children = raw.get("children", [])
    if children is None:
        children = []

    if not isinstance(text, str):
        reason = "missing text" if text is None else f"text is {type(text).__name__}"
        return MalformedCandidate(raw=raw, reason=reason)
    if not isinstance(children, list):
        return MalformedCandidate(raw=raw, reason=f"children is {type(children).__name__}")

    return WellFormedCandidate(text=text, children=children)
