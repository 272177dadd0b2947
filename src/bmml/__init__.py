"""
bmml - Business Model Markup Language tooling.

Checks business-model documents (customer segments, value propositions,
fits, channels, relationships, revenue streams, resources, activities,
partnerships and costs) for internal consistency and derives which
customer segments every entity ultimately serves.

Both document generations are supported: the legacy flat-reference shape
(``version: "1.0"``) and the current typed-relation shape
(``version: "2.0"``).

Example usage:
    from pathlib import Path

    from bmml import build_connection_graph, lint, load_document

    doc = load_document(Path("model.bmml.yaml"))
    result = lint(doc)
    for issue in result.errors:
        print(issue.rule, issue.path, issue.message)

    graph = build_connection_graph(doc)
"""

from bmml.detect import detect_version
from bmml.graph import ConnectionGraph, build_connection_graph, get_segment_order, is_orphaned
from bmml.index import EntityIndex, build_index
from bmml.lint import LintIssue, LintResult, lint, lint_is_valid
from bmml.loader import DocumentLoader, DocumentParseError, LoadedDocument, load_document
from bmml.types import DocumentVersion, EntityKind, Severity, kind_of
from bmml.validator import ValidationReport, validate, validate_file

__version__ = "0.1.0"
__all__ = [
    "detect_version",
    "build_index",
    "EntityIndex",
    "lint",
    "lint_is_valid",
    "LintIssue",
    "LintResult",
    "build_connection_graph",
    "get_segment_order",
    "is_orphaned",
    "ConnectionGraph",
    "DocumentLoader",
    "DocumentParseError",
    "LoadedDocument",
    "load_document",
    "validate",
    "validate_file",
    "ValidationReport",
    "DocumentVersion",
    "EntityKind",
    "Severity",
    "kind_of",
    "__version__",
]
