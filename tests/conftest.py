"""
Test fixtures for the Arbor test suite.

Provides:
- Temporary directory fixtures (isolated from any real .arbor/)
- Deterministic id factories
- Builders for sample document and content trees
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest

from arbor.constants import reset_config_manager
from arbor.core import ArborCore
from arbor.managers.storage_manager import StorageManager
from arbor.models.container import ContainerNode, NodeKind
from arbor.models.content import ContentNode


# =============================================================================
# Temporary Directory Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every test from an empty directory so no real config.json is read."""
    monkeypatch.chdir(tmp_path)
    reset_config_manager()
    yield
    reset_config_manager()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test isolation."""
    temp_path = Path(tempfile.mkdtemp(prefix="arbor_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def arbor_dir(temp_dir: Path) -> Path:
    """Path to a not-yet-created .arbor/ directory."""
    return temp_dir / ".arbor"


# =============================================================================
# Id Factories
# =============================================================================


class SequentialIds:
    """Deterministic id factory: id001, id002, ..."""

    def __init__(self, prefix: str = "id") -> None:
        self.prefix = prefix
        self.issued: List[str] = []

    def __call__(self) -> str:
        value = f"{self.prefix}{len(self.issued) + 1:03d}"
        self.issued.append(value)
        return value


class ReplayIds:
    """Id factory that replays a fixed sequence, then continues sequentially."""

    def __init__(self, values: List[str]) -> None:
        self._values = list(values)
        self._fallback = SequentialIds("zz")

    def __call__(self) -> str:
        if self._values:
            return self._values.pop(0)
        return self._fallback()


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def replay_ids():
    """Factory fixture: replay_ids(["a", "a", "b"]) builds a ReplayIds."""
    return ReplayIds


# =============================================================================
# Tree Builders
# =============================================================================


class TreeBuilder:
    """Helper class for building sample trees for testing."""

    @staticmethod
    def folder(key: str, title: str, *children: ContainerNode, deleted: bool = False) -> ContainerNode:
        return ContainerNode(
            key=key, title=title, kind=NodeKind.FOLDER, deleted=deleted, children=list(children)
        )

    @staticmethod
    def leaf(key: str, title: str, deleted: bool = False) -> ContainerNode:
        return ContainerNode(key=key, title=title, kind=NodeKind.LEAF, deleted=deleted)

    @staticmethod
    def node(node_id: str, text: str, *children: ContentNode) -> ContentNode:
        return ContentNode(id=node_id, text=text, parent_id=node_id, children=list(children))

    @staticmethod
    def content(node: ContentNode) -> ContentNode:
        """Wire every parent_id of a tree built with ``node``."""
        for current in node.walk():
            for child in current.children:
                child.parent_id = current.id
        return node


class TreeChecks:
    """Invariant checks shared by the tree tests."""

    @staticmethod
    def consistent(tree: ContentNode) -> None:
        """Every parent_id matches the real parent; the root self-references."""
        assert tree.parent_id == tree.id
        for node in tree.walk():
            for child in node.children:
                assert child.parent_id == node.id

    @staticmethod
    def unique(tree) -> None:
        ids = list(tree.iter_ids())
        assert len(ids) == len(set(ids))


@pytest.fixture
def checks() -> TreeChecks:
    return TreeChecks()


@pytest.fixture
def builder() -> TreeBuilder:
    return TreeBuilder()


@pytest.fixture
def sample_document() -> ContainerNode:
    """Document tree used across tests.

    root/
      projects/ (p)
        plan (l1)
        archive/ (a)
          old (l2)
      inbox (l3)
    """
    b = TreeBuilder
    return b.folder(
        "root",
        "My Documents",
        b.folder("p", "Projects", b.leaf("l1", "Plan"), b.folder("a", "Archive", b.leaf("l2", "Old"))),
        b.leaf("l3", "Inbox"),
    )


@pytest.fixture
def sample_note() -> ContentNode:
    """Content tree owned by leaf l1.

    - Plan (l1)
        - Goals (g)
            - Ship (g1)
        - Risks (r)
        - Budget (b)
    """
    b = TreeBuilder
    return b.content(
        b.node("l1", "Plan", b.node("g", "Goals", b.node("g1", "Ship")), b.node("r", "Risks"), b.node("b", "Budget"))
    )


# =============================================================================
# Storage / Core Fixtures
# =============================================================================


@pytest.fixture
def storage(arbor_dir: Path) -> StorageManager:
    return StorageManager(arbor_dir)


@pytest.fixture
def core(arbor_dir: Path, ids: SequentialIds) -> ArborCore:
    """ArborCore for owner 'alice' on an empty temporary .arbor/."""
    return ArborCore(arbor_dir=arbor_dir, owner="alice", id_factory=ids)
