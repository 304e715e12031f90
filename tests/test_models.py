"""
Tests for the Arbor node models and candidate classification.
"""
import pytest
from pydantic import TypeAdapter, ValidationError

from arbor.models.candidate import (
    CandidateFragment,
    MalformedCandidate,
    WellFormedCandidate,
    classify_fragment,
)
from arbor.models.container import ContainerNode, NodeKind
from arbor.models.content import ContentNode
from arbor.models.files import ConfigFile, DocumentFile, NoteFile


class TestContainerNode:
    """Test the document tree node model."""

    def test_folder_gets_empty_children(self):
        node = ContainerNode(key="f", title="Folder", kind="folder")
        assert node.children == []
        assert node.is_folder

    def test_leaf_has_no_children(self):
        node = ContainerNode(key="l", title="Leaf", kind="leaf")
        assert node.children is None
        assert node.child_nodes() == []
        assert not node.is_folder

    def test_title_is_stripped(self):
        node = ContainerNode(key="l", title="  Leaf  ", kind=NodeKind.LEAF)
        assert node.title == "Leaf"

    @pytest.mark.parametrize("title", ["", "   "])
    def test_blank_title_rejected(self, title):
        with pytest.raises(ValidationError):
            ContainerNode(key="l", title=title, kind="leaf")

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            ContainerNode(key="x", title="X", kind="file")

    def test_to_document_shape(self, sample_document):
        data = sample_document.to_document()
        assert set(data) == {"key", "title", "kind", "deleted", "children"}
        leaf = data["children"][1]
        assert leaf == {"key": "l3", "title": "Inbox", "kind": "leaf", "deleted": False}

    def test_walk_is_preorder(self, sample_document):
        assert list(sample_document.iter_ids()) == ["root", "p", "l1", "a", "l2", "l3"]

    def test_walk_with_depth(self, sample_document):
        depths = {node.node_id: depth for node, depth in sample_document.walk_with_depth()}
        assert depths == {"root": 0, "p": 1, "l1": 2, "a": 2, "l2": 3, "l3": 1}

    def test_find_child_index(self, sample_document):
        assert sample_document.find_child_index("l3") == 1
        assert sample_document.find_child_index("l1") is None


class TestContentNode:
    """Test the outline node model."""

    def test_parent_id_alias(self):
        node = ContentNode.model_validate({"id": "a", "text": "A", "parentId": "a"})
        assert node.parent_id == "a"
        assert node.is_root
        assert node.children == []
        assert node.collapsed is False

    def test_to_document_uses_alias(self, sample_note):
        data = sample_note.to_document()
        assert data["parentId"] == "l1"
        assert data["children"][0]["parentId"] == "l1"
        assert data["children"][0]["children"][0]["parentId"] == "g"

    def test_child_is_not_root(self, sample_note):
        assert not sample_note.children[0].is_root


class TestCandidateClassification:
    """Test classification of untrusted outline fragments."""

    def test_well_formed(self):
        fragment = classify_fragment({"text": "A", "children": [{"text": "B"}]})
        assert isinstance(fragment, WellFormedCandidate)
        assert fragment.children == [{"text": "B"}]

    def test_missing_children_is_well_formed(self):
        fragment = classify_fragment({"text": "A"})
        assert isinstance(fragment, WellFormedCandidate)
        assert fragment.children == []

    def test_null_children_is_well_formed(self):
        fragment = classify_fragment({"text": "A", "children": None})
        assert isinstance(fragment, WellFormedCandidate)
        assert fragment.children == []

    @pytest.mark.parametrize(
        "raw, reason",
        [
            ("just text", "expected object, got str"),
            (42, "expected object, got int"),
            ({"children": []}, "missing text"),
            ({"text": 7}, "text is int"),
            ({"text": "A", "children": "B"}, "children is str"),
        ],
    )
    def test_malformed(self, raw, reason):
        fragment = classify_fragment(raw)
        assert isinstance(fragment, MalformedCandidate)
        assert fragment.reason == reason
        assert fragment.raw == raw

    def test_union_discriminates_on_kind(self):
        adapter = TypeAdapter(CandidateFragment)
        assert isinstance(adapter.validate_python({"kind": "node", "text": "A"}), WellFormedCandidate)
        assert isinstance(
            adapter.validate_python({"kind": "malformed", "raw": 1, "reason": "x"}),
            MalformedCandidate,
        )


class TestFileModels:
    """Test the stored file models."""

    def test_document_file_defaults(self):
        document = DocumentFile(owner="alice")
        assert document.version == 0
        assert document.tree is None

    def test_note_file_round_trips_alias(self, sample_note):
        dumped = NoteFile(doc_key="l1", version=3, tree=sample_note).model_dump(
            mode="json", by_alias=True
        )
        loaded = NoteFile.model_validate(dumped)
        assert loaded.version == 3
        assert loaded.tree.children[0].parent_id == "l1"

    def test_config_defaults(self):
        config = ConfigFile()
        assert config.text_max_length == 100
        assert config.id_length == 8
        assert config.strict_versioning is True
        assert config.conflict_retries == 2
