"""
JSON Schema validation for BMML documents.

Validates parsed documents against the draft 2020-12 schemas shipped in
``bmml/schemas/`` (one per document generation) and returns a structured
report.  Structural validation is independent of the reference linter: a
document can be schema-valid and still contain dangling references.

Usage::

    from bmml.validator import validate, validate_file

    report = validate(doc)            # version auto-detected
    report = validate(doc, DocumentVersion.V2)
    for issue in report.errors:
        print(issue.path, issue.message)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import jsonschema
from jsonschema import Draft202012Validator

from bmml.config import get_config
from bmml.detect import detect_version
from bmml.loader import DocumentParseError, load_document
from bmml.types import DocumentVersion

logger = logging.getLogger(__name__)

SCHEMA_FILES: dict[DocumentVersion, str] = {
    DocumentVersion.V1: "bmml-v1.schema.json",
    DocumentVersion.V2: "bmml-v2.schema.json",
}

_PACKAGE_SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"


class SchemaNotFoundError(FileNotFoundError):
    """The JSON schema for a document generation is missing."""


# ---------------------------------------------------------------------------
# Schema resolution
# ---------------------------------------------------------------------------


def _schema_dir() -> Path:
    return get_config().get_schema_dir() or _PACKAGE_SCHEMA_DIR


def load_schema(version: DocumentVersion, schema_dir: Optional[Path] = None) -> dict[str, Any]:
    """Load and return the JSON schema for *version*."""
    path = (schema_dir or _schema_dir()) / SCHEMA_FILES[version]
    if not path.exists():
        raise SchemaNotFoundError(f"Schema file not found: {path}")
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


# Cache compiled validators per (schema file, version)
_VALIDATORS: dict[tuple[str, DocumentVersion], Draft202012Validator] = {}


def _get_validator(
    version: DocumentVersion, schema_dir: Optional[Path] = None
) -> Draft202012Validator:
    """Return a cached ``Draft202012Validator`` for *version*."""
    directory = schema_dir or _schema_dir()
    key = (str(directory), version)
    if key not in _VALIDATORS:
        schema = load_schema(version, directory)
        Draft202012Validator.check_schema(schema)
        _VALIDATORS[key] = Draft202012Validator(schema)
    return _VALIDATORS[key]


def clear_validator_cache() -> None:
    """Drop compiled validators (useful in tests)."""
    _VALIDATORS.clear()


# ---------------------------------------------------------------------------
# Report models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationIssue:
    """One schema violation.

    Attributes:
        path: JSON pointer to the offending field (``/`` for the root).
        message: Human-readable description of the failure.
        code: Machine-readable error code (e.g. ``UNKNOWN_FIELD``).
    """

    path: str
    message: str
    code: str = "SCHEMA_ERROR"

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message, "code": self.code}


@dataclass
class ValidationReport:
    """Aggregated result of validating one document."""

    valid: bool
    version: DocumentVersion
    errors: list[ValidationIssue] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Error-code classification helpers
# ---------------------------------------------------------------------------


_ERROR_CODES: dict[str, str] = {
    "required": "MISSING_REQUIRED_FIELD",
    "additionalProperties": "UNKNOWN_FIELD",
    "enum": "ENUM_MISMATCH",
    "const": "CONST_VIOLATION",
    "type": "WRONG_TYPE",
    "pattern": "PATTERN_MISMATCH",
    "minLength": "MIN_LENGTH_VIOLATION",
    "minItems": "WRONG_LENGTH",
    "maxItems": "WRONG_LENGTH",
    "items": "WRONG_LENGTH",
}


def _error_code_for(error: jsonschema.ValidationError) -> str:
    """Derive a machine-readable error code from a ``jsonschema`` error."""
    return _ERROR_CODES.get(str(error.validator), "SCHEMA_ERROR")


def _json_pointer(path: list[str | int]) -> str:
    """Convert a jsonschema path deque to a JSON pointer string."""
    if not path:
        return "/"
    escaped = (str(p).replace("~", "~0").replace("/", "~1") for p in path)
    return "/" + "/".join(escaped)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate(
    doc: Any,
    version: Optional[DocumentVersion] = None,
    schema_dir: Optional[Path] = None,
) -> ValidationReport:
    """Validate *doc* against the schema of its (or the given) generation.

    Args:
        doc: Parsed document tree.
        version: Force a schema instead of detecting one.
        schema_dir: Directory holding the schema files; defaults to the
            configured ``schema_dir`` or the packaged schemas.

    Raises:
        SchemaNotFoundError: If the schema file for the generation is missing.
    """
    resolved = version if version is not None else detect_version(doc)
    schema_validator = _get_validator(resolved, schema_dir)

    issues = [
        ValidationIssue(
            path=_json_pointer(list(error.absolute_path)),
            message=error.message,
            code=_error_code_for(error),
        )
        for error in schema_validator.iter_errors(doc)
    ]
    issues.sort(key=lambda issue: (issue.path, issue.message))

    if issues:
        logger.debug(
            "Validation failed for %s document: %d error(s)",
            resolved.value,
            len(issues),
        )
    return ValidationReport(valid=not issues, version=resolved, errors=issues)


def validate_file(path: Path, version: Optional[DocumentVersion] = None) -> ValidationReport:
    """Load and validate a document file.

    Unreadable files and YAML errors are reported as a single error rather
    than raised.
    """
    try:
        doc = load_document(Path(path))
    except FileNotFoundError:
        return _single_error(f"File not found: {path}", version)
    except DocumentParseError as exc:
        return _single_error(str(exc), version)
    return validate(doc, version)


def _single_error(message: str, version: Optional[DocumentVersion]) -> ValidationReport:
    return ValidationReport(
        valid=False,
        version=version or DocumentVersion.V1,
        errors=[ValidationIssue(path="/", message=message, code="PARSE_ERROR")],
    )
