"""
Shared recursive-container abstraction for both Arbor trees.

Container nodes (document tree) and content nodes (outline) differ in their
fields but share the same shape: an identifier and an ordered list of
children. TreeIndex and the mutation managers work against this base.
"""

from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class TreeNode(BaseModel):
    """
    Base model for all tree nodes.

    Subclasses expose their identifier through ``node_id`` and their children
    through ``child_nodes()``. Children order is significant: insertion order
    is display order.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    @property
    def node_id(self) -> str:
        """Identifier that is unique within one tree."""
        raise NotImplementedError

    def child_nodes(self) -> List["TreeNode"]:
        """Ordered children (empty list when the node holds none)."""
        raise NotImplementedError

    def walk(self) -> Iterator["TreeNode"]:
        """Yield this node and all descendants in depth-first pre-order."""
        stack: List[TreeNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.child_nodes()))

    def walk_with_depth(self, depth: int = 0) -> Iterator[Tuple["TreeNode", int]]:
        """Yield (node, depth) pairs in pre-order, this node at ``depth``."""
        yield self, depth
        for child in self.child_nodes():
            yield from child.walk_with_depth(depth + 1)

    def iter_ids(self) -> Iterator[str]:
        """Yield every identifier in the subtree."""
        for node in self.walk():
            yield node.node_id

    def find_child_index(self, node_id: str) -> Optional[int]:
        """Position of a direct child by id, or None."""
        for index, child in enumerate(self.child_nodes()):
            if child.node_id == node_id:
                return index
        return None
