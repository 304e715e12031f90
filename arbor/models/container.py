"""
Container node model for the document tree.

Folders hold ordered children; leaves own exactly one content tree and hold
no children.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from arbor.models.base import TreeNode


class NodeKind(str, Enum):
    """Valid kinds for document tree nodes."""

    FOLDER = "folder"
    LEAF = "leaf"


class ContainerNode(TreeNode):
    """
    Document tree element.

    Fields:
    - key: Unique within one document tree
    - title: Non-empty display title
    - kind: folder or leaf
    - deleted: Soft-delete flag; the node and its subtree stay in the tree
    - children: Ordered children; [] for folders, None for leaves
    """

    key: str
    title: str
    kind: NodeKind
    deleted: bool = False
    children: Optional[List["ContainerNode"]] = Field(default=None)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Titles must not be blank."""
        if not v or not v.strip():
            raise ValueError("Title cannot be blank")
        return v.strip()

    @model_validator(mode="after")
    def ensure_folder_children(self) -> "ContainerNode":
        """Folders always carry a children list."""
        if self.kind is NodeKind.FOLDER and self.children is None:
            self.children = []
        return self

    @property
    def node_id(self) -> str:
        return self.key

    @property
    def is_folder(self) -> bool:
        return self.kind is NodeKind.FOLDER

    def child_nodes(self) -> List["ContainerNode"]:
        return self.children if self.children is not None else []

    def to_document(self) -> dict:
        """Dump to the external JSON shape."""
        return self.model_dump(mode="json", exclude_none=True)
