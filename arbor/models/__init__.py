"""
Data models for Arbor.

Import models explicitly from their modules:
    from arbor.models.base import TreeNode
    from arbor.models.container import ContainerNode, NodeKind
    from arbor.models.content import ContentNode
    from arbor.models.candidate import WellFormedCandidate, MalformedCandidate
    from arbor.models.files import DocumentFile, NoteFile, ConfigFile
"""

from .container import ContainerNode, NodeKind
from .content import ContentNode

ContainerNode.model_rebuild()
ContentNode.model_rebuild()
