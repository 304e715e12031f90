"""
Content node model for the per-leaf outline tree.
"""

from typing import List

from pydantic import Field

from arbor.models.base import TreeNode


class ContentNode(TreeNode):
    """
    Outline element.

    The root's ``parent_id`` equals its own ``id``; it is a self-reference,
    not a real parent. ``collapsed`` is view state only.
    """

    id: str
    text: str = ""
    collapsed: bool = False
    parent_id: str = Field(alias="parentId")
    children: List["ContentNode"] = Field(default_factory=list)

    @property
    def node_id(self) -> str:
        return self.id

    def child_nodes(self) -> List["ContentNode"]:
        return self.children

    @property
    def is_root(self) -> bool:
        return self.parent_id == self.id

    def to_document(self) -> dict:
        """Dump to the external JSON shape (``parentId`` spelled as stored)."""
        return self.model_dump(mode="json", by_alias=True)
