"""
Tests for the node abstraction over Python ``ast`` trees.

Tests cover:
- Parsing: parent links, source text, parse errors
- Child slots: nodes, node-lists, absent slots, promoted primitives
- Text, positions and names
- Traversal order
- Transparent wrappers and member paths
"""

import ast

import pytest

from astmatch.config import MatchConfig
from astmatch.tree import nodes
from astmatch.utils.errors import PatternDefinitionError, SourceParseError

# =============================================================================
# Parsing
# =============================================================================


class TestParse:
    """Tests for parse() and SourceTree."""

    def test_parent_links(self, find_node) -> None:
        """Test that every node links to its parent."""
        call = find_node("x = foo(1)", "Call")

        assert isinstance(nodes.get_parent(call), ast.Assign)
        assert nodes.get_parent(call.func) is call

    def test_module_has_no_parent(self, parse_source) -> None:
        """Test that the module is the root of the parent chain."""
        tree = parse_source("x = 1")

        assert nodes.get_parent(tree.root) is None
        assert nodes.root_of(tree.root.body[0].value) is tree.root

    def test_syntax_error_raises_parse_error(self, parse_source) -> None:
        """Test that invalid source raises SourceParseError with a location."""
        with pytest.raises(SourceParseError) as exc_info:
            parse_source("def (:\n    pass\n")

        error = exc_info.value
        assert error.location is not None
        assert error.location.line == 1
        assert error.location.filename == "test.py"

    def test_walk_skips_context_singletons(self, parse_source) -> None:
        """Test that walking yields statement and expression nodes only."""
        tree = parse_source("x = y")

        assert [nodes.kind(node) for node in tree.walk()] == ["Assign", "Name", "Name"]

    def test_walk_is_preorder(self, parse_source) -> None:
        """Test that parents come before their children, left to right."""
        tree = parse_source("f(a, g(b))")
        names = [node.id for node in tree.walk() if isinstance(node, ast.Name)]

        assert names == ["f", "a", "g", "b"]


# =============================================================================
# Kinds
# =============================================================================


class TestKinds:
    """Tests for kind tags."""

    def test_kind_is_class_name(self, find_node) -> None:
        """Test that the kind tag is the ast class name."""
        assert nodes.kind(find_node("foo(1)", "Call")) == "Call"
        assert nodes.kind(find_node("from os import path", "alias")) == "alias"

    def test_resolve_kind_accepts_classes(self) -> None:
        """Test that kinds may be given as ast classes."""
        assert nodes.resolve_kind(ast.Call) == "Call"
        assert nodes.resolve_kind("Name") == "Name"

    @pytest.mark.parametrize("kind_ref", ["Nope", "parse", "", 42])
    def test_resolve_kind_rejects_unknown(self, kind_ref) -> None:
        """Test that non-node names are rejected."""
        with pytest.raises(PatternDefinitionError):
            nodes.resolve_kind(kind_ref)


# =============================================================================
# Child Slots
# =============================================================================


class TestChildSlots:
    """Tests for child slot access."""

    def test_node_and_list_slots(self, find_node) -> None:
        """Test that node and list slots are returned as stored."""
        call = find_node("foo(1, 2)", "Call")

        assert nodes.child_slot(call, "func") is call.func
        assert nodes.child_slot(call, "args") is call.args

    def test_absent_slot(self, find_node) -> None:
        """Test that None-valued slots are absent."""
        ret = find_node("def f():\n    return\n", "Return")

        assert nodes.child_slot(ret, "value") is nodes.ABSENT
        assert not nodes.ABSENT

    def test_unknown_slot_is_absent(self, find_node) -> None:
        """Test that names outside _fields are absent."""
        call = find_node("foo()", "Call")

        assert nodes.child_slot(call, "lineno") is nodes.ABSENT
        assert nodes.child_slot(call, "nope") is nodes.ABSENT

    def test_identifier_slot_promoted_to_name(self, find_node) -> None:
        """Test that identifier strings become synthetic Name nodes."""
        alias = find_node("from os import path", "alias")
        promoted = nodes.child_slot(alias, "name")

        assert isinstance(promoted, ast.Name)
        assert promoted.id == "path"
        assert nodes.get_parent(promoted) is alias
        assert nodes.text(promoted) == "path"

    def test_promotion_is_identity_stable(self, find_node) -> None:
        """Test that repeated reads return the same synthetic node."""
        attribute = find_node("foo.bar", "Attribute")

        assert nodes.child_slot(attribute, "attr") is nodes.child_slot(attribute, "attr")

    def test_number_slot_promoted_to_constant(self, find_node) -> None:
        """Test that numeric slots become synthetic Constant nodes."""
        import_from = find_node("from . import x", "ImportFrom")
        promoted = nodes.child_slot(import_from, "level")

        assert isinstance(promoted, ast.Constant)
        assert promoted.value == 1

    def test_none_literal_promoted(self, find_node) -> None:
        """Test that a None literal value is a promoted slot, not an absent one."""
        constant = find_node("x = None", "Constant")
        promoted = nodes.child_slot(constant, "value")

        assert isinstance(promoted, ast.Constant)
        assert promoted.value is None
        assert nodes.child_slot(constant, "value") is promoted


# =============================================================================
# Text, Positions and Names
# =============================================================================


class TestTextAndPosition:
    """Tests for text() and position()."""

    def test_text_is_source_segment(self, find_node) -> None:
        """Test that text() returns the exact source segment."""
        call = find_node("x = foo( 1 )", "Call")

        assert nodes.text(call) == "foo( 1 )"

    def test_text_of_unparsed_tree(self) -> None:
        """Test that plain ast trees fall back to unparsing."""
        module = ast.parse("foo( 1 )")

        assert nodes.text(module.body[0].value) == "foo(1)"

    def test_position_is_one_indexed(self, find_node) -> None:
        """Test that positions use 1-indexed lines and columns."""
        call = find_node("x = 1\ny = foo(1)", "Call")
        location = nodes.position(call)

        assert location.line == 2
        assert location.column == 5
        assert location.filename == "test.py"

    def test_position_without_location(self) -> None:
        """Test that nodes without location attributes have no position."""
        assert nodes.position(ast.Name(id="x", ctx=ast.Load())) is None

    def test_get_name(self, find_node) -> None:
        """Test intrinsic names of definitions, parameters and keywords."""
        assert nodes.get_name(find_node("def handler(): pass", "FunctionDef")) == "handler"
        assert nodes.get_name(find_node("def f(arg1): pass", "arg")) == "arg1"
        assert nodes.get_name(find_node("f(mode=1)", "keyword")) == "mode"
        assert nodes.get_name(find_node("x", "Name")) is None


# =============================================================================
# Wrappers and Member Paths
# =============================================================================


class TestUnwrap:
    """Tests for unwrap_expression() and member_path()."""

    @pytest.mark.parametrize(
        "source",
        [
            "cast(int, value)",
            "typing.cast(int, value)",
            "assert_type(value, int)",
            "(alias := value)",
            "cast(int, assert_type(cast(str, value), str))",
        ],
    )
    def test_unwraps_to_inner_expression(self, find_node, source) -> None:
        """Test that transparent wrappers are stripped recursively."""
        expression = find_node(source, "Expr").value
        unwrapped = nodes.unwrap_expression(expression)

        assert isinstance(unwrapped, ast.Name)
        assert unwrapped.id == "value"

    def test_plain_call_is_not_a_wrapper(self, find_node) -> None:
        """Test that unrelated calls are left alone."""
        call = find_node("convert(int, value)", "Call")

        assert nodes.unwrap_expression(call) is call

    def test_named_expressions_configurable(self, find_node) -> None:
        """Test that assignment expressions can be made opaque."""
        named = find_node("(alias := value)", "NamedExpr")
        config = MatchConfig(unwrap_named_expressions=False)

        assert nodes.unwrap_expression(named, config) is named

    def test_member_path_ignores_wrappers(self, find_node) -> None:
        """Test that wrappers are ignored at every hop of the path."""
        attribute = find_node("cast(Any, foo).bar.baz", "Attribute")

        assert nodes.member_path(attribute) == "foo.bar.baz"

    def test_member_path_requires_name_root(self, find_node) -> None:
        """Test that chains not starting from a name have no path."""
        attribute = find_node("foo().bar", "Attribute")

        assert nodes.member_path(attribute) is None
