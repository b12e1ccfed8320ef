"""
Pytest configuration and shared fixtures for astmatch tests.
"""

import textwrap
from typing import Any, Optional

import pytest

from astmatch.config import MatchConfig
from astmatch.matching.pattern import Pattern
from astmatch.matching.session import MatchSession
from astmatch.tree.nodes import SourceTree, kind, parse


@pytest.fixture
def parse_source():
    """Factory fixture for parsing (dedented) Python source."""

    def _parse(source: str, filename: str = "test.py") -> SourceTree:
        return parse(textwrap.dedent(source), filename)

    return _parse


@pytest.fixture
def find_node(parse_source):
    """Fixture returning the first node of a kind in some source."""

    def _find(source: str, kind_name: str, index: int = 0) -> Any:
        tree = parse_source(source)
        found = [node for node in tree.walk() if kind(node) == kind_name]
        return found[index]

    return _find


@pytest.fixture
def traverse(parse_source):
    """Fixture returning the first match of a pattern while walking some source."""

    def _traverse(
        pattern: Pattern, source: str, session: Optional[MatchSession] = None
    ) -> Any:
        tree = parse_source(source)
        session = session or pattern.session()
        for node in tree.walk():
            matched = session.match(node)
            if matched is not None:
                return matched
        return None

    return _traverse


@pytest.fixture
def collect(parse_source):
    """Fixture matching a pattern against every node of some source."""

    def _collect(
        pattern: Pattern,
        source: str,
        config: Optional[MatchConfig] = None,
        session: Optional[MatchSession] = None,
    ) -> MatchSession:
        tree = parse_source(source)
        session = session or pattern.session(config)
        for node in tree.walk():
            session.match(node)
        return session

    return _collect
