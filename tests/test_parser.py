"""
Tests for the indentation-driven outline parser.
"""
import pytest

from arbor.managers.note_manager import NoteManager
from arbor.outline.parser import OutlineParser, classify_lines, infer_indent_unit, parse_outline
from arbor.outline.serializer import serialize, to_minimal


@pytest.fixture
def parser(ids):
    return OutlineParser(id_factory=ids)


def shape(node):
    return to_minimal(node)


class TestIndentInference:
    """Test how the nesting unit is chosen."""

    @pytest.mark.parametrize(
        "text, unit",
        [
            ("- A\n  - B\n    - C", 2),
            ("- A\n    - B\n        - C", 4),
            ("- A\n    - B\n      - C", 2),
            ("- A\n - B", 2),
            ("- A\n   - B", 4),
            ("- A\n- B", 4),
            ("plain\ntext", 4),
        ],
    )
    def test_infer(self, text, unit):
        assert infer_indent_unit(classify_lines(text)) == unit

    def test_tabs_count_as_four_columns(self):
        lines = classify_lines("- A\n\t- B\n\t\t- C")
        assert [line.indent for line in lines] == [0, 4, 8]
        assert infer_indent_unit(lines) == 4

    def test_default_when_no_indentation(self):
        assert infer_indent_unit(classify_lines("- A\n- B"), default=2) == 2


class TestParse:
    """Test tree reconstruction."""

    def test_two_space_outline(self, parser, checks):
        tree = parser.parse("- Topic\n  - Sub1\n  - Sub2\n    - Sub2a")
        assert parser.indent_unit == 2
        assert tree.text == "Topic"
        assert [child.text for child in tree.children] == ["Sub1", "Sub2"]
        assert [child.text for child in tree.children[1].children] == ["Sub2a"]
        checks.consistent(tree)
        checks.unique(tree)

    def test_four_space_outline(self, parser):
        tree = parser.parse("- A\n    - B\n        - C\n    - D")
        assert parser.indent_unit == 4
        assert shape(tree) == {
            "text": "A",
            "children": [{"text": "B", "children": [{"text": "C"}]}, {"text": "D"}],
        }

    def test_same_shape_in_both_units(self, ids):
        two = parse_outline("- A\n  - B\n    - C\n  - D", id_factory=ids)
        four = parse_outline("- A\n    - B\n        - C\n    - D", id_factory=ids)
        assert shape(two) == shape(four)

    def test_all_bullet_markers(self, parser):
        tree = parser.parse("* A\n  + B\n  - C")
        assert [child.text for child in tree.children] == ["B", "C"]

    def test_top_level_siblings_attach_to_root(self, parser):
        tree = parser.parse("- A\n  - B\n- C")
        assert [child.text for child in tree.children] == ["B", "C"]

    def test_lines_before_first_bullet_are_discarded(self, parser):
        tree = parser.parse("Notes from today\n\n- Root\n  - Child")
        assert tree.text == "Root"
        assert [child.text for child in tree.children] == ["Child"]

    def test_plain_lines_become_leaves_under_top(self, parser):
        tree = parser.parse("- A\n  - B\nsome detail\n  - C")
        b = tree.children[0]
        assert [child.text for child in b.children] == ["some detail"]
        assert [child.text for child in tree.children] == ["B", "C"]

    def test_no_bullets(self, parser):
        tree = parser.parse("Title\nfirst line\n   second line  ")
        assert tree.text == "Title"
        assert [child.text for child in tree.children] == ["first line", "second line"]
        assert parser.indent_unit == 4

    @pytest.mark.parametrize("text", ["", "   \n\n\t\n"])
    def test_empty_input(self, parser, text):
        tree = parser.parse(text)
        assert tree.text == "Imported Note"
        assert tree.children == []
        assert tree.is_root
        assert parser.indent_unit is None

    def test_dedent_never_pops_root(self, parser):
        tree = parser.parse("  - A\n- B\n- C")
        assert tree.text == "A"
        assert [child.text for child in tree.children] == ["B", "C"]

    def test_indent_jump_nests_under_current(self, parser):
        tree = parser.parse("- A\n            - B\n- C")
        assert [child.text for child in tree.children] == ["B", "C"]

    def test_dash_without_space_is_plain(self, parser):
        tree = parser.parse("- A\n-not a bullet")
        assert [child.text for child in tree.children] == ["-not a bullet"]

    @pytest.mark.parametrize("line", ["  - ", "  -", "  *\t"])
    def test_bare_marker_is_empty_bullet(self, parser, line):
        tree = parser.parse(f"- A\n{line}\n    - B")
        assert shape(tree) == {"text": "A", "children": [{"text": "", "children": [{"text": "B"}]}]}

    def test_bullet_text_is_capped(self, ids):
        tree = OutlineParser(id_factory=ids, max_length=4).parse("- abcdefgh\n  - xy")
        assert tree.text == "abcd"
        assert tree.children[0].text == "xy"

    def test_root_self_references(self, parser):
        tree = parser.parse("- A\n  - B")
        assert tree.parent_id == tree.id
        assert tree.children[0].parent_id == tree.id


class TestRoundTrip:
    """Parsing exported markdown rebuilds the same shape."""

    def test_markdown_round_trip(self, sample_note, ids):
        rebuilt = parse_outline(serialize(sample_note, "markdown"), id_factory=ids)
        assert shape(rebuilt) == shape(sample_note)

    def test_deep_round_trip(self, builder, ids):
        b = builder
        tree = b.content(
            b.node("r", "root", b.node("a", "a", b.node("b", "b", b.node("c", "c", b.node("d", "d")))), b.node("e", "e"))
        )
        rebuilt = parse_outline(serialize(tree, "markdown"), id_factory=ids)
        assert shape(rebuilt) == shape(tree)

    def test_round_trip_blank_and_padded_text(self, builder, ids):
        b = builder
        tree = b.content(
            b.node(
                "r",
                "Root",
                b.node("e", "", b.node("u", "Under blank")),
                b.node("w", "Wide", b.node("k", "kid")),
                b.node("s", "Spaces", b.node("t", "tail")),
                b.node("z", "Sibling"),
            )
        )
        manager = NoteManager(tree, id_factory=ids)
        manager.edit_text("w", "   padded\n  text  ")
        manager.edit_text("s", "   ")
        assert [child.text for child in tree.children] == ["", "padded text", "", "Sibling"]

        rebuilt = parse_outline(serialize(tree, "markdown"), id_factory=ids)
        assert shape(rebuilt) == shape(tree)
        assert rebuilt.children[0].children[0].text == "Under blank"

    def test_round_trip_of_raw_multiline_text(self, builder, ids):
        tree = builder.content(
            builder.node("r", "Root", builder.node("m", "two\nlines", builder.node("c", "child")))
        )
        rebuilt = parse_outline(serialize(tree, "markdown"), id_factory=ids)
        assert shape(rebuilt) == {
            "text": "Root",
            "children": [{"text": "two lines", "children": [{"text": "child"}]}],
        }
