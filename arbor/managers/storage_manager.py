"""
Storage manager for Arbor.

Handles loading and whole-tree replacement of the JSON files in the .arbor/
directory:
- documents/<owner>.json: one document tree per owner
- notes/<doc_key>.json: one content tree per leaf
- config.json: settings
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import ValidationError

from arbor.constants import DEFAULT_ARBOR_DIR
from arbor.exceptions import PersistenceConflictError, StorageError
from arbor.models.container import ContainerNode
from arbor.models.content import ContentNode
from arbor.models.files import ConfigFile, DocumentFile, NoteFile

_SAFE_NAME = re.compile(r"^[A-Za-z0-9_.-]+$")


def is_storage_name(name: str) -> bool:
    """True when ``name`` can be used as a file stem under .arbor/."""
    return bool(_SAFE_NAME.match(name)) and name not in (".", "..")


class StorageManager:
    """
    Manages persistence of trees to JSON files in the .arbor/ directory.

    Handles atomic writes to prevent data corruption and checks the
    expected-version precondition before every replace. Satisfies the
    TreeStore protocol.
    """

    def __init__(self, arbor_dir: Optional[Path] = None) -> None:
        """
        Initialize the StorageManager with a .arbor/ directory path.

        Args:
            arbor_dir: Path to the .arbor/ directory. Defaults to .arbor/ in current directory.
        """
        self.arbor_dir = arbor_dir if arbor_dir else Path(DEFAULT_ARBOR_DIR)
        self.documents_dir = self.arbor_dir / "documents"
        self.notes_dir = self.arbor_dir / "notes"
        self._ensure_arbor_dir()

    def _ensure_arbor_dir(self) -> None:
        """Create the .arbor/ directory and its subdirectories if they don't exist."""
        self.arbor_dir.mkdir(parents=True, exist_ok=True)
        self.documents_dir.mkdir(exist_ok=True)
        self.notes_dir.mkdir(exist_ok=True)

    def _atomic_write(self, file_path: Path, data: Dict[str, Any]) -> None:
        """Write data to a JSON file atomically to prevent corruption.

        Args:
            file_path: Path to the file to write.
            data: Dictionary data to write as JSON.

        Raises:
            StorageError: If writing to file fails.
        """
        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.arbor_dir, prefix=".tmp_arbor_", suffix=".json"
        )

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as temp_file:
                json.dump(data, temp_file, indent=2, ensure_ascii=False)
            os.replace(temp_path, file_path)
        except Exception as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StorageError(f"Failed to write to {file_path}: {e}")

    def _read_json(self, file_path: Path) -> Optional[Dict[str, Any]]:
        if not file_path.exists():
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Failed to load {file_path.name}: {e}")

    @staticmethod
    def _file_name(name: str) -> str:
        if not is_storage_name(name):
            raise StorageError(f"Unsafe storage name: {name!r}")
        return f"{name}.json"

    @staticmethod
    def _check_version(what: str, current: int, expected: Optional[int]) -> None:
        if expected is not None and expected != current:
            logger.warning(f"Rejected write to {what}: expected version {expected}, found {current}")
            raise PersistenceConflictError(
                f"{what} changed since it was loaded (expected version {expected}, "
                f"found {current}). Reload and apply the change again."
            )

    # =========================================================================
    # Document trees
    # =========================================================================

    def load_document(self, owner: str) -> DocumentFile:
        """Load documents/<owner>.json and return as DocumentFile model."""
        data = self._read_json(self.documents_dir / self._file_name(owner))
        if data is None:
            return DocumentFile(owner=owner)
        try:
            return DocumentFile.model_validate(data)
        except ValidationError as e:
            raise StorageError(f"Failed to load document tree for '{owner}': {e}")

    def replace_document(
        self, owner: str, tree: ContainerNode, expected_version: Optional[int] = None
    ) -> int:
        """Replace the whole document tree of ``owner``.

        Raises:
            PersistenceConflictError: If ``expected_version`` is stale.
        """
        current = self.load_document(owner)
        self._check_version(f"Document tree of '{owner}'", current.version, expected_version)
        new_version = current.version + 1
        payload = DocumentFile(owner=owner, version=new_version, tree=tree)
        self._atomic_write(
            self.documents_dir / self._file_name(owner),
            payload.model_dump(mode="json", exclude_none=True),
        )
        return new_version

    # =========================================================================
    # Note (content) trees
    # =========================================================================

    def load_note(self, doc_key: str) -> NoteFile:
        """Load notes/<doc_key>.json and return as NoteFile model."""
        data = self._read_json(self.notes_dir / self._file_name(doc_key))
        if data is None:
            return NoteFile(doc_key=doc_key)
        try:
            return NoteFile.model_validate(data)
        except ValidationError as e:
            raise StorageError(f"Failed to load note '{doc_key}': {e}")

    def replace_note(
        self, doc_key: str, tree: ContentNode, expected_version: Optional[int] = None
    ) -> int:
        """Replace the whole content tree of leaf ``doc_key``.

        Raises:
            PersistenceConflictError: If ``expected_version`` is stale.
        """
        current = self.load_note(doc_key)
        self._check_version(f"Note '{doc_key}'", current.version, expected_version)
        new_version = current.version + 1
        payload = NoteFile(doc_key=doc_key, version=new_version, tree=tree)
        self._atomic_write(
            self.notes_dir / self._file_name(doc_key),
            payload.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return new_version

    def delete_note(self, doc_key: str) -> None:
        """Remove notes/<doc_key>.json if it exists."""
        file_path = self.notes_dir / self._file_name(doc_key)
        try:
            file_path.unlink()
        except FileNotFoundError:
            pass

    # =========================================================================
    # Config File
    # =========================================================================

    def load_config(self) -> ConfigFile:
        """Load config.json and return as ConfigFile model."""
        data = self._read_json(self.arbor_dir / "config.json")
        if data is None:
            return ConfigFile()
        try:
            return ConfigFile.model_validate(data)
        except ValidationError as e:
            raise StorageError(f"Failed to load config.json: {e}")

    def save_config(self, data: ConfigFile) -> None:
        """Save ConfigFile model to config.json."""
        self._atomic_write(self.arbor_dir / "config.json", data.model_dump(mode="json"))
