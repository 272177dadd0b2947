"""
YAML document loader with per-path caching.

Centralises:

- File existence checks
- YAML parsing (``yaml.safe_load``) with mapping-root validation
- Version detection, so callers receive a ``LoadedDocument`` ready for the
  validator, the linter and the graph builder

YAML syntax errors surface as ``DocumentParseError`` carrying the line and
column reported by the parser.

Usage::

    from bmml.loader import DocumentLoader

    loaded = DocumentLoader().load(Path("model.bmml.yaml"))
    loaded.version   # DocumentVersion.V2
    loaded.data      # parsed mapping
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Optional

import yaml

from bmml.detect import detect_version
from bmml.types import DocumentVersion

logger = logging.getLogger(__name__)


class DocumentParseError(ValueError):
    """A document could not be read as a YAML mapping."""

    def __init__(
        self,
        message: str,
        path: str = "/",
        line: Optional[int] = None,
        column: Optional[int] = None,
        source: str = "",
    ) -> None:
        self.message = message
        self.path = path
        self.line = line
        self.column = column
        self.source = source
        super().__init__(self._format())

    def _format(self) -> str:
        where = self.source or "<string>"
        if self.line is not None:
            where = f"{where}:{self.line}"
            if self.column is not None:
                where = f"{where}:{self.column}"
        return f"{where}: {self.message}"


@dataclass(frozen=True)
class LoadedDocument:
    """A parsed document and its detected schema generation."""

    data: dict[str, Any]
    version: DocumentVersion
    source: str = ""


def parse_yaml(text: str, source: str = "") -> Any:
    """Parse YAML *text*, converting syntax errors to ``DocumentParseError``."""
    try:
        return yaml.safe_load(text)
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark
        raise DocumentParseError(
            f"YAML parse error: {exc.problem or exc}",
            # Marks are zero-based.
            line=mark.line + 1 if mark is not None else None,
            column=mark.column + 1 if mark is not None else None,
            source=source,
        ) from exc
    except yaml.YAMLError as exc:
        raise DocumentParseError(f"YAML parse error: {exc}", source=source) from exc


def load_document(path: Path) -> dict[str, Any]:
    """Read *path* and return its mapping root.

    Raises:
        FileNotFoundError: If the file does not exist.
        DocumentParseError: If the file is unreadable, is not valid YAML or
            its root is not a mapping.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Document not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentParseError(f"Failed to read file: {exc}", source=str(path)) from exc
    return _require_mapping(parse_yaml(text, source=str(path)), source=str(path))


class DocumentLoader:
    """Loads BMML documents from files or strings."""

    _cache: ClassVar[dict[str, LoadedDocument]] = {}

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the document cache (useful in tests)."""
        cls._cache.clear()

    def load(self, path: Path) -> LoadedDocument:
        """Load and version-detect a document file.

        Raises:
            FileNotFoundError: If the file does not exist.
            DocumentParseError: If the file cannot be parsed as a mapping.
        """
        path = Path(path)
        key = str(path.resolve())
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("DocumentLoader cache hit: %s", key)
            return cached

        data = load_document(path)
        loaded = LoadedDocument(data=data, version=detect_version(data), source=str(path))
        self._cache[key] = loaded
        logger.debug("Loaded %s document from %s", loaded.version.value, key)
        return loaded

    def load_from_string(self, yaml_str: str) -> LoadedDocument:
        """Load a document from a YAML string (convenience for testing)."""
        data = _require_mapping(parse_yaml(yaml_str))
        return LoadedDocument(data=data, version=detect_version(data))


def _require_mapping(raw: Any, source: str = "") -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise DocumentParseError(
            f"Expected YAML mapping at document root, got {type(raw).__name__}",
            source=source,
        )
    return raw
