"""
Tests for logical, transformation and navigation patterns.

Tests cover:
- union(), intersection(), negate()
- refine(), unwrap()
- member(), contains(), named redirection through union
"""

import ast

import pytest

from astmatch.config import MatchConfig
from astmatch.matching import (
    any_node,
    call,
    contains,
    identifier,
    intersection,
    kind,
    member,
    named,
    negate,
    node,
    number,
    refine,
    string,
    tuple_of,
    union,
    unwrap,
)
from astmatch.utils.errors import PatternDefinitionError

# =============================================================================
# union / intersection / negate
# =============================================================================


class TestUnion:
    """Tests for union()."""

    def test_any_member_matches(self, find_node) -> None:
        """Test that a union matches when one member matches."""
        pattern = union(number(), string())

        assert pattern.match(find_node("'a'", "Constant")) is not None
        assert pattern.match(find_node("foo", "Name")) is None

    def test_first_match_wins(self, find_node) -> None:
        """Test that later members are not evaluated after a success."""
        name = find_node("foo", "Name")
        first = identifier("foo")
        second = any_node()
        session = union(first, second).session()

        session.match(name)

        assert session.last_match_of(first) is name
        assert session.last_match_of(second) is None

    def test_redirects_to_member_match(self, find_node) -> None:
        """Test that the union's match is the winning member's match."""
        name = find_node("print(value)", "Name", index=1)

        matched = union(number(), named("value")).match(name)

        assert isinstance(matched, ast.Call)

    def test_requires_members(self) -> None:
        """Test that an empty union is rejected."""
        with pytest.raises(PatternDefinitionError):
            union()


class TestIntersection:
    """Tests for intersection()."""

    def test_all_members_must_match(self, find_node) -> None:
        """Test that every member must match the same input."""
        call_node = find_node("foo(1)", "Call")

        assert intersection(kind("Call"), call("foo")).match(call_node) is call_node
        assert intersection(kind("Call"), call("bar")).match(call_node) is None

    def test_records_every_member(self, find_node) -> None:
        """Test that all members record the input."""
        call_node = find_node("foo(1)", "Call")
        first = kind("Call")
        second = call("foo")
        session = intersection(first, second).session()

        session.match(call_node)

        assert session.last_match_of(first) is call_node
        assert session.last_match_of(second) is call_node


class TestNegate:
    """Tests for negate()."""

    def test_inverts(self, find_node) -> None:
        """Test that negation matches exactly when the inner pattern does not."""
        name = find_node("foo", "Name")

        assert negate(identifier("bar")).match(name) is name
        assert negate(identifier("foo")).match(name) is None

    def test_in_slot(self, find_node) -> None:
        """Test negation as a slot constraint."""
        pattern = node("Call", func=negate(identifier("print")))

        assert pattern.match(find_node("log(1)", "Call")) is not None
        assert pattern.match(find_node("print(1)", "Call")) is None


# =============================================================================
# refine / unwrap
# =============================================================================


class TestRefine:
    """Tests for refine()."""

    def test_transform_redirects(self, find_node) -> None:
        """Test that a node returned by the transform becomes the match."""
        call_node = find_node("foo(1)", "Call")

        assert refine(kind("Call"), lambda c: c.func).match(call_node) is call_node.func

    def test_transform_can_reject(self, find_node) -> None:
        """Test that a falsy transform result is a non-match."""
        call_node = find_node("foo(1)", "Call")

        assert refine(kind("Call"), lambda c: len(c.args) > 1).match(call_node) is None
        assert refine(kind("Call"), lambda c: len(c.args) == 1).match(call_node) is call_node

    def test_transform_receives_base_match(self, find_node) -> None:
        """Test that the transform receives the value the base matched."""
        name = find_node("print(value)", "Name", index=1)
        received = []

        refine(named("value"), lambda matched: received.append(matched) or True).match(name)

        assert isinstance(received[0], ast.Call)

    def test_base_must_match(self, find_node) -> None:
        """Test that the transform is not called when the base fails."""
        called = []

        refine(kind("Call"), called.append).match(find_node("foo", "Name"))

        assert called == []


class TestUnwrap:
    """Tests for unwrap()."""

    def test_strips_wrappers(self, find_node) -> None:
        """Test that wrapped expressions match their inner expression."""
        wrapped = find_node("cast(int, value)", "Call")
        matched = unwrap(identifier("value")).match(wrapped)

        assert isinstance(matched, ast.Name)
        assert matched.id == "value"

    def test_unwrapped_input(self, find_node) -> None:
        """Test that plain expressions are matched as they are."""
        name = find_node("value", "Name")

        assert unwrap(identifier("value")).match(name) is name

    @pytest.mark.parametrize(
        "source",
        ["value", "cast(int, value)", "(alias := assert_type(value, int))", "other"],
    )
    def test_idempotent(self, find_node, source) -> None:
        """Test that unwrapping twice equals unwrapping once."""
        expression = find_node(source, "Expr").value
        inner = identifier("value")

        assert unwrap(unwrap(inner)).match(expression) is unwrap(inner).match(expression)

    def test_wrapper_set_is_configurable(self, find_node) -> None:
        """Test that the session config decides which calls are wrappers."""
        pattern = unwrap(identifier("value"))
        config = MatchConfig(cast_functions=frozenset({"my_cast"}))

        custom = find_node("my_cast(int, value)", "Call")
        standard = find_node("cast(int, value)", "Call")

        assert pattern.session(config).match(custom) is not None
        assert pattern.session(config).match(standard) is None

    def test_unwrapped_list_pattern_is_a_single_argument(self, find_node) -> None:
        """Test that unwrap() is never treated as a list pattern."""
        wrapped_list = unwrap(tuple_of(number()))

        assert not wrapped_list.is_list_pattern
        assert repr(wrapped_list) == "Pattern<Unknown>"

        target = find_node("f(cast(int, value))", "Call")
        assert call("f", unwrap(identifier("value"))).match(target) is target


# =============================================================================
# member / contains
# =============================================================================


class TestMember:
    """Tests for member()."""

    def test_matches_dotted_path(self, find_node) -> None:
        """Test attribute access by dotted path."""
        attribute = find_node("foo.bar", "Attribute")

        assert member("foo.bar").match(attribute) is attribute
        assert member("foo.baz").match(attribute) is None

    def test_ignores_wrappers_and_spacing(self, find_node) -> None:
        """Test that wrappers and whitespace do not change the path."""
        assert member("foo.bar").match(find_node("cast(Any, foo).bar", "Attribute")) is not None
        assert member("foo.bar").match(find_node("foo . bar", "Attribute")) is not None

    def test_rejects_non_attributes(self, find_node) -> None:
        """Test that plain names are not member accesses."""
        assert member("foo").match(find_node("foo", "Name")) is None

    def test_pattern_target(self, find_node) -> None:
        """Test that a pattern is matched against the attribute node."""
        pattern = member(node("Attribute", attr=identifier("bar")))

        assert pattern.match(find_node("anything.bar", "Attribute")) is not None
        assert pattern.match(find_node("anything.baz", "Attribute")) is None


class TestContains:
    """Tests for contains()."""

    def test_finds_descendant(self, find_node) -> None:
        """Test that a matching descendant makes the node match."""
        function = find_node("def f():\n    return secret\n", "FunctionDef")

        assert contains(identifier("secret")).match(function) is function

    def test_node_itself_is_not_searched(self, find_node) -> None:
        """Test that only descendants are searched."""
        name = find_node("secret", "Name")

        assert contains(identifier("secret")).match(name) is None

    def test_until_prunes_subtrees(self, find_node) -> None:
        """Test that subtrees matching until are not entered."""
        function = find_node("def f():\n    return lambda: secret\n", "FunctionDef")
        pattern = contains(identifier("secret"), until=kind("Lambda"))

        assert pattern.match(function) is None
        assert contains(identifier("secret")).match(function) is function

    def test_session_skips_seen_nodes(self, collect) -> None:
        """Test that a descendant is found at most once per session."""
        source = """
        def outer():
            def inner():
                return secret
        """
        pattern = contains(identifier("secret"))
        session = collect(pattern, source)

        assert [function.name for function in session.matches] == ["outer"]

    def test_fresh_sessions_search_again(self, find_node) -> None:
        """Test that separate sessions do not share inspected nodes."""
        source = "def outer():\n    def inner():\n        return secret\n"
        pattern = contains(identifier("secret"))
        outer = find_node(source, "FunctionDef")
        inner = find_node(source, "FunctionDef", index=1)

        assert pattern.match(outer) is outer
        assert pattern.match(inner) is inner
