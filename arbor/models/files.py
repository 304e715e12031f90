"""
File models for Arbor.

Models representing the structure of JSON files in the .arbor/ directory.
Each stored tree carries a version that increases on every replace, which is
what the expected-version precondition compares against.
"""

from typing import Optional

from pydantic import BaseModel

from arbor.constants import (
    DEFAULT_CONFLICT_RETRIES,
    DEFAULT_EXPORT_INDENT,
    DEFAULT_ID_LENGTH,
    DEFAULT_INDENT_UNIT,
    DEFAULT_STRICT_VERSIONING,
    DEFAULT_TEXT_MAX_LENGTH,
)

from .container import ContainerNode
from .content import ContentNode


class DocumentFile(BaseModel):
    """Model for documents/<owner>.json.

    One document tree per owner.
    """

    owner: str
    version: int = 0
    tree: Optional[ContainerNode] = None


class NoteFile(BaseModel):
    """Model for notes/<doc_key>.json.

    One content tree per leaf; ``doc_key`` is the owning leaf's key.
    """

    doc_key: str
    version: int = 0
    tree: Optional[ContentNode] = None


class ConfigFile(BaseModel):
    """Model for config.json file."""

    schema_version: str = "0.1.0"

    text_max_length: int = DEFAULT_TEXT_MAX_LENGTH
    id_length: int = DEFAULT_ID_LENGTH
    default_indent_unit: int = DEFAULT_INDENT_UNIT
    export_indent: int = DEFAULT_EXPORT_INDENT

    strict_versioning: bool = DEFAULT_STRICT_VERSIONING
    conflict_retries: int = DEFAULT_CONFLICT_RETRIES
