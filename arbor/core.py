"""
ArborCore - Facade over the document and content trees.

Every entry point follows the same flow: load the whole tree from the
store, index it, apply one operation through a manager, then write the whole
tree back as a single replace. Expected failures come back as an
OperationResult instead of an exception.
"""

from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from arbor.constants import (
    DEFAULT_ARBOR_DIR,
    DEFAULT_CONFLICT_RETRIES,
    DEFAULT_EXPORT_INDENT,
    DEFAULT_ID_LENGTH,
    DEFAULT_IMPORT_TITLE,
    DEFAULT_INDENT_UNIT,
    DEFAULT_ROOT_TITLE,
    DEFAULT_STRICT_VERSIONING,
    DEFAULT_TEXT_MAX_LENGTH,
    JSON_MODE,
    MARKDOWN_MODE,
    VALIDATION_INVALID_MODE,
    ConfigManager,
)
from arbor.exceptions import (
    ArborError,
    InvalidOperationError,
    PersistenceConflictError,
    ValidationError,
)
from arbor.ids import IdFactory, fresh_id
from arbor.managers import (
    DocumentManager,
    NoteManager,
    StorageManager,
    clone_content_tree,
    default_note,
    rebind_root,
)
from arbor.managers.storage_manager import is_storage_name
from arbor.models.container import ContainerNode, NodeKind
from arbor.models.content import ContentNode
from arbor.outline import OutlineParser, normalize_outline, serialize
from arbor.protocols import TreeStore
from arbor.result import OperationResult
from arbor.text import cap_text


class ArborCore:
    """
    Entry points for one owner's document tree and its notes.

    Orchestrates:
    - TreeStore (StorageManager by default): whole-tree load/replace
    - DocumentManager: structural operations on the document tree
    - NoteManager: editing inside one leaf's content tree
    - OutlineParser / normalize_outline: building notes from text

    Concurrency contract: callers are expected to be single writers per
    tree. With ``strict_versioning`` on (the default), every replace carries
    the version that was loaded; when another writer got there first the
    store rejects the write, the operation is reloaded and reapplied up to
    ``conflict_retries`` times, and if it still conflicts the result carries
    ``persistence_conflict``. With ``strict_versioning`` off, replaces are
    unconditional and the last writer wins on the whole tree.
    """

    def __init__(
        self,
        arbor_dir: Optional[Path] = None,
        owner: str = "default",
        store: Optional[TreeStore] = None,
        id_factory: Optional[IdFactory] = None,
        strict_versioning: Optional[bool] = None,
        conflict_retries: Optional[int] = None,
    ) -> None:
        """
        Initialize ArborCore.

        Args:
            arbor_dir: Path to the .arbor/ directory. Defaults to .arbor/ in current directory.
            owner: Owner whose document tree is operated on.
            store: Persistence collaborator. Defaults to a StorageManager on arbor_dir.
            id_factory: Source of fresh keys and ids. Defaults to random ids of
                the configured length.
            strict_versioning: Override the configured versioning mode.
            conflict_retries: Override the configured retry count.
        """
        self.arbor_dir = arbor_dir if arbor_dir else Path(DEFAULT_ARBOR_DIR)
        self.owner = owner
        self.store: TreeStore = store if store is not None else StorageManager(self.arbor_dir)
        config = ConfigManager(arbor_dir=self.arbor_dir)
        self.text_max_length = config.get_int("text_max_length", DEFAULT_TEXT_MAX_LENGTH)
        self.default_indent_unit = config.get_int("default_indent_unit", DEFAULT_INDENT_UNIT)
        self.export_indent = config.get_int("export_indent", DEFAULT_EXPORT_INDENT)
        self._id_factory: IdFactory = (
            id_factory
            if id_factory is not None
            else partial(fresh_id, config.get_int("id_length", DEFAULT_ID_LENGTH))
        )
        self.strict_versioning = (
            strict_versioning
            if strict_versioning is not None
            else config.get_bool("strict_versioning", DEFAULT_STRICT_VERSIONING)
        )
        self.conflict_retries = (
            conflict_retries
            if conflict_retries is not None
            else config.get_int("conflict_retries", DEFAULT_CONFLICT_RETRIES)
        )

    # =========================================================================
    # Load / replace plumbing
    # =========================================================================

    def _default_tree(self) -> ContainerNode:
        return ContainerNode(
            key=self.owner, title=DEFAULT_ROOT_TITLE, kind=NodeKind.FOLDER, children=[]
        )

    def _expected(self, version: int) -> Optional[int]:
        return version if self.strict_versioning else None

    def _load_document(self) -> Tuple[ContainerNode, int]:
        if not is_storage_name(self.owner):
            raise ValidationError(
                f"Invalid owner: '{self.owner}'. Use letters, digits, '_', '.' or '-'."
            )
        document = self.store.load_document(self.owner)
        tree = document.tree if document.tree is not None else self._default_tree()
        return tree, document.version

    def _run(self, label: str, attempt: Callable[[], Any]) -> OperationResult:
        """Run one load-apply-replace attempt, retrying on version conflicts."""
        attempts = 1 + (max(self.conflict_retries, 0) if self.strict_versioning else 0)
        conflict: Optional[PersistenceConflictError] = None
        for number in range(1, attempts + 1):
            try:
                return OperationResult.success(attempt())
            except PersistenceConflictError as e:
                conflict = e
                logger.warning(f"{label}: version conflict (attempt {number}/{attempts})")
            except ArborError as e:
                logger.debug(f"{label} failed: {e}")
                return OperationResult.from_exception(e)
        return OperationResult.from_exception(conflict)

    def _mutate_document(
        self,
        label: str,
        operation: Callable[[DocumentManager], Any],
        after: Optional[Callable[[Any], Any]] = None,
    ) -> OperationResult:
        """Apply ``operation`` to a fresh copy of the document tree and replace it.

        ``after`` runs only once the replace has applied, receives the
        operation's return value and produces the final result value.
        """

        def attempt() -> Any:
            tree, version = self._load_document()
            manager = DocumentManager(tree, id_factory=self._id_factory)
            value = operation(manager)
            self.store.replace_document(self.owner, manager.tree, self._expected(version))
            return after(value) if after is not None else value

        return self._run(label, attempt)

    def _resolve_leaf(self, doc_key: str) -> ContainerNode:
        if not is_storage_name(doc_key):
            raise ValidationError(f"Invalid document key: '{doc_key}'.")
        tree, _ = self._load_document()
        node = DocumentManager(tree).get(doc_key)
        if node.is_folder:
            raise InvalidOperationError(f"'{doc_key}' is a folder. Only leaves hold notes.")
        return node

    def _load_note(self, leaf: ContainerNode) -> Tuple[ContentNode, int, bool]:
        """Return (tree, version, stored) for a leaf, defaulting when absent."""
        note = self.store.load_note(leaf.key)
        if note.tree is None:
            return default_note(leaf.key, leaf.title, self.text_max_length), note.version, False
        return note.tree, note.version, True

    def _mutate_note(
        self, doc_key: str, label: str, operation: Callable[[NoteManager], Any]
    ) -> OperationResult:
        def attempt() -> Any:
            leaf = self._resolve_leaf(doc_key)
            tree, version, _ = self._load_note(leaf)
            manager = NoteManager(
                tree, id_factory=self._id_factory, max_length=self.text_max_length
            )
            value = operation(manager)
            self.store.replace_note(doc_key, manager.tree, self._expected(version))
            return value

        return self._run(label, attempt)

    # =========================================================================
    # Document tree
    # =========================================================================

    def document_tree(self, include_deleted: bool = True) -> OperationResult:
        """Return the owner's document tree (a default one for a new owner).

        Args:
            include_deleted: When False, soft-deleted subtrees are pruned.
        """

        def attempt() -> ContainerNode:
            tree, _ = self._load_document()
            if include_deleted:
                return tree
            return DocumentManager(tree).visible_tree()

        return self._run("document_tree", attempt)

    def get(self, key: str) -> OperationResult:
        """Return one node of the document tree."""
        return self._run("get", lambda: DocumentManager(self._load_document()[0]).get(key))

    def trash(self) -> OperationResult:
        """Return the soft-deleted nodes in pre-order."""
        return self._run(
            "trash", lambda: DocumentManager(self._load_document()[0]).deleted_nodes()
        )

    def create(self, parent_key: str, title: str, kind: Union[str, NodeKind]) -> OperationResult:
        """Create a folder or leaf as the last child of ``parent_key``."""
        return self._mutate_document(
            "create", lambda manager: manager.create(parent_key, title, kind)
        )

    def rename(self, key: str, title: str) -> OperationResult:
        return self._mutate_document("rename", lambda manager: manager.rename(key, title))

    def move(self, key: str, new_parent_key: str, position: Optional[int] = None) -> OperationResult:
        """Move a node under a folder, at ``position`` (default: end)."""
        return self._mutate_document(
            "move", lambda manager: manager.move(key, new_parent_key, position)
        )

    def duplicate(self, key: str) -> OperationResult:
        """Clone a subtree next to the original, cloning the notes of its leaves.

        Leaves without a stored note get none; their default note is created
        on first access like any other leaf.
        """

        def clone_notes(outcome) -> ContainerNode:
            for old_key in outcome.leaf_keys:
                note = self.store.load_note(old_key)
                if note.tree is None:
                    continue
                new_key = outcome.key_map[old_key]
                self.store.replace_note(
                    new_key, clone_content_tree(note.tree, new_key, self._id_factory)
                )
            return outcome.node

        return self._mutate_document(
            "duplicate", lambda manager: manager.duplicate(key), after=clone_notes
        )

    def soft_delete(self, key: str) -> OperationResult:
        return self._mutate_document("soft_delete", lambda manager: manager.soft_delete(key))

    def hard_delete(self, key: str) -> OperationResult:
        """Permanently remove a soft-deleted subtree and the notes of its leaves."""

        def drop_notes(removed: ContainerNode) -> ContainerNode:
            for node in removed.walk():
                if not node.is_folder:
                    self.store.delete_note(node.key)
            return removed

        return self._mutate_document(
            "hard_delete", lambda manager: manager.hard_delete(key), after=drop_notes
        )

    def restore(self, key: str) -> OperationResult:
        return self._mutate_document("restore", lambda manager: manager.restore(key))

    # =========================================================================
    # Notes (content trees)
    # =========================================================================

    def get_note(self, doc_key: str) -> OperationResult:
        """Return a leaf's content tree, creating the default note if it has none."""

        def attempt() -> ContentNode:
            leaf = self._resolve_leaf(doc_key)
            tree, version, stored = self._load_note(leaf)
            if not stored:
                self.store.replace_note(doc_key, tree, self._expected(version))
                logger.debug(f"Created default note for '{doc_key}'")
            return tree

        return self._run("get_note", attempt)

    def replace_note(
        self, doc_key: str, tree: Union[ContentNode, Dict[str, Any]]
    ) -> OperationResult:
        """Replace a leaf's whole content tree.

        The tree is brought to canonical shape first: root id bound to the
        leaf key, parent ids rewired to the real parents, text capped.
        """

        def attempt() -> ContentNode:
            leaf = self._resolve_leaf(doc_key)
            canonical = _canonical_note(leaf.key, tree, self.text_max_length)
            version = self.store.load_note(leaf.key).version
            self.store.replace_note(leaf.key, canonical, self._expected(version))
            return canonical

        return self._run("replace_note", attempt)

    def import_note(
        self,
        parent_key: str,
        content: str,
        title: Optional[str] = None,
        format: str = MARKDOWN_MODE,
    ) -> OperationResult:
        """Create a leaf under ``parent_key`` whose note is built from text.

        Args:
            parent_key: Folder receiving the new leaf.
            content: Markdown list or loose outline JSON.
            title: Leaf title; defaults to the outline's root text.
            format: "markdown" or "json".

        Returns:
            Result whose value is the new leaf.
        """
        if format == MARKDOWN_MODE:
            parser = OutlineParser(
                id_factory=self._id_factory,
                default_unit=self.default_indent_unit,
                max_length=self.text_max_length,
            )
            build = partial(parser.parse, content)
        elif format == JSON_MODE:
            build = partial(self._normalize, content, title)
        else:
            return OperationResult.from_exception(
                ValidationError(f"Invalid format: '{format}'. {VALIDATION_INVALID_MODE}")
            )
        return self._create_leaf_with_note("import_note", parent_key, title, build)

    def generate_note(
        self, parent_key: str, candidate: Any, title: Optional[str] = None
    ) -> OperationResult:
        """Create a leaf from a generated outline candidate (object, list or raw text)."""
        return self._create_leaf_with_note(
            "generate_note",
            parent_key,
            title,
            partial(self._normalize, candidate, title),
        )

    def _normalize(self, candidate: Any, title: Optional[str]) -> ContentNode:
        return normalize_outline(
            candidate, title=title, id_factory=self._id_factory, max_length=self.text_max_length
        )

    def _create_leaf_with_note(
        self,
        label: str,
        parent_key: str,
        title: Optional[str],
        build: Callable[[], ContentNode],
    ) -> OperationResult:
        tree = build()
        leaf_title = title if title and title.strip() else (tree.text or DEFAULT_IMPORT_TITLE)

        def store_note(leaf: ContainerNode) -> ContainerNode:
            self.store.replace_note(leaf.key, rebind_root(tree, leaf.key))
            return leaf

        return self._mutate_document(
            label,
            lambda manager: manager.create(parent_key, leaf_title, NodeKind.LEAF),
            after=store_note,
        )

    def export_note(self, doc_key: str, mode: str = MARKDOWN_MODE) -> OperationResult:
        """Render a leaf's note as minimal JSON or a markdown list."""

        def attempt() -> str:
            leaf = self._resolve_leaf(doc_key)
            tree, _, _ = self._load_note(leaf)
            return serialize(tree, mode, indent=self.export_indent)

        return self._run("export_note", attempt)

    def add_child(self, doc_key: str, parent_id: str, text: Optional[str] = None) -> OperationResult:
        return self._mutate_note(doc_key, "add_child", lambda m: m.add_child(parent_id, text))

    def add_sibling(self, doc_key: str, node_id: str, text: Optional[str] = None) -> OperationResult:
        return self._mutate_note(doc_key, "add_sibling", lambda m: m.add_sibling(node_id, text))

    def edit_text(self, doc_key: str, node_id: str, text: str) -> OperationResult:
        return self._mutate_note(doc_key, "edit_text", lambda m: m.edit_text(node_id, text))

    def toggle_collapse(self, doc_key: str, node_id: str) -> OperationResult:
        return self._mutate_note(doc_key, "toggle_collapse", lambda m: m.toggle_collapse(node_id))

    def delete_node(self, doc_key: str, node_id: str) -> OperationResult:
        return self._mutate_note(doc_key, "delete_node", lambda m: m.delete(node_id))

    def demote(self, doc_key: str, node_id: str) -> OperationResult:
        return self._mutate_note(doc_key, "demote", lambda m: m.demote(node_id))

    def promote(self, doc_key: str, node_id: str) -> OperationResult:
        return self._mutate_note(doc_key, "promote", lambda m: m.promote(node_id))

    def move_up(self, doc_key: str, node_id: str) -> OperationResult:
        return self._mutate_note(doc_key, "move_up", lambda m: m.move_up(node_id))

    def move_down(self, doc_key: str, node_id: str) -> OperationResult:
        return self._mutate_note(doc_key, "move_down", lambda m: m.move_down(node_id))


def _canonical_note(
    doc_key: str, tree: Union[ContentNode, Dict[str, Any]], limit: Optional[int] = None
) -> ContentNode:
    """Validate a caller-supplied content tree and bring it to canonical shape.

    Raises:
        ValidationError: If the tree is malformed or repeats an id.
    """
    if isinstance(tree, ContentNode):
        root = tree.model_copy(deep=True)
    else:
        try:
            root = ContentNode.model_validate(tree)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid content tree: {e}")

    seen: List[str] = list(root.iter_ids())
    if len(seen) != len(set(seen)):
        raise ValidationError("Invalid content tree: node ids must be unique.")
    if doc_key in seen[1:]:
        raise ValidationError(f"Invalid content tree: '{doc_key}' is reserved for the root.")

    rebind_root(root, doc_key)
    for node in root.walk():
        node.text = cap_text(node.text, limit)
        for child in node.children:
            child.parent_id = node.id
    return root
