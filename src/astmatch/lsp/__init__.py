"""
astmatch LSP Package.

Converts pattern matches into Language Server Protocol diagnostics.
"""

from astmatch.lsp.diagnostics import DiagnosticProvider, MatchRule, node_range

__all__ = [
    "DiagnosticProvider",
    "MatchRule",
    "node_range",
]
