"""
End-to-end matching scenarios over real-looking Python modules.
"""

from astmatch import (
    any_node,
    call,
    contains,
    dict_of,
    identifier,
    import_from,
    kind,
    named,
    node,
    parse,
    rest,
    shape,
    some,
    string,
    union,
    unwrap,
)

# =============================================================================
# Calls with object literal arguments
# =============================================================================


class TestCallWithDict:
    """A call whose single argument is a dict with a given key."""

    def test_matches_call_with_dict_argument(self, traverse) -> None:
        """Test that find({"id": 1}) is found."""
        pattern = call("find", dict_of({"id": any_node()}))
        matched = traverse(pattern, 'find({"id": 1})\n')

        assert matched is not None
        assert matched.func.id == "find"

    def test_rejects_call_with_number(self, traverse) -> None:
        """Test that find(1) is not a match."""
        pattern = call("find", dict_of({"id": any_node()}))

        assert traverse(pattern, "find(1)\n") is None

    def test_captures_dict_value(self, collect) -> None:
        """Test capturing the value of the dict entry."""
        pattern = call("find", dict_of({"id": any_node().ref("id")}))
        session = collect(pattern, 'result = find({"id": user.id})\n')

        captured = session.collect_captures()["id"]
        assert captured.attr == "id"


# =============================================================================
# Imports with named bindings
# =============================================================================


class TestImportBindings:
    """A from-import with an exact list of bindings."""

    SOURCE = "from with_bindings import aaa, bbb, ccc\n"

    def test_exact_bindings(self, traverse) -> None:
        """Test that the exact binding list matches."""
        pattern = import_from("with_bindings", ["aaa", "bbb", "ccc"])

        assert traverse(pattern, self.SOURCE) is not None

    def test_extra_binding_fails(self, traverse) -> None:
        """Test that a fourth binding breaks the exact match."""
        pattern = import_from("with_bindings", ["aaa", "bbb", "ccc"])

        assert traverse(pattern, "from with_bindings import aaa, bbb, ccc, ddd\n") is None

    def test_extra_binding_with_rest(self, traverse) -> None:
        """Test that a trailing rest accepts the extra bindings."""
        pattern = import_from("with_bindings", ["aaa", "bbb", "ccc", rest(any_node())])

        assert traverse(pattern, "from with_bindings import aaa, bbb, ccc, ddd\n") is not None
        assert traverse(pattern, self.SOURCE) is not None

    def test_other_module_fails(self, traverse) -> None:
        """Test that the module name must match."""
        pattern = import_from("with_bindings", ["aaa", "bbb", "ccc"])

        assert traverse(pattern, "from other import aaa, bbb, ccc\n") is None


# =============================================================================
# Larger modules
# =============================================================================


MODULE = '''
import logging
from typing import cast

logger = logging.getLogger(__name__)


def load(path):
    with open(path, "rb") as handle:
        return handle.read()


async def save(path, data):
    config = cast(dict, data)
    logger.info("saving %s", path)
    with open(path, mode="w") as handle:
        handle.write(config)


class Store:
    def get(self, key):
        return self.cache[key]
'''


class TestModuleQueries:
    """Queries over a small but realistic module."""

    def test_functions_opening_files(self, collect) -> None:
        """Test finding every function that opens a file."""
        functions = union(kind("FunctionDef"), kind("AsyncFunctionDef"))
        pattern = shape(functions, body=some(contains(call("open"))))

        session = collect(pattern, MODULE)

        assert [function.name for function in session.matches] == ["load", "save"]

    def test_logger_calls_with_format_string(self, collect) -> None:
        """Test finding logger calls by dotted callee."""
        pattern = call("logger.info", string().ref("message"), rest(any_node()))
        session = collect(pattern, MODULE)

        assert len(session.matches) == 1
        assert session.collect_captures()["message"].value == "saving %s"

    def test_unwrapped_argument(self, collect) -> None:
        """Test matching through a cast wrapper."""
        pattern = node("Assign", value=unwrap(identifier("data")))
        session = collect(pattern, MODULE)

        assert len(session.matches) == 1

    def test_references_redirect_to_users(self, parse_source) -> None:
        """Test that named() finds the statements using a parameter."""
        tree = parse_source(MODULE)
        session = named("path").session()
        for target in tree.walk():
            session.match(target)

        kinds = sorted({type(match).__name__ for match in session.matches})
        assert kinds == ["Call", "arg"]

    def test_parse_from_package_root(self) -> None:
        """Test the top-level parse() entry point."""
        tree = parse(MODULE, "store.py")

        assert any(type(target).__name__ == "ClassDef" for target in tree.walk())
