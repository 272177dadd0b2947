"""
Structured logging for lint, validation and graph events.

Outputs one JSON object per line on stderr, so the CLI's stdout stays
parseable.  Only run-level events are logged; per-issue detail lives in the
results and in span events.

Logged events:
- lint.completed
- validation.failed
- graph.built

Usage:
    from bmml.logger import LintLogger, configure_logging

    configure_logging("info")
    events = LintLogger(source="model.bmml.yaml")
    events.log_lint_completed(result)
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from bmml.lint.schema import LintResult
    from bmml.validator import ValidationReport

# Structured event logger
_event_logger = logging.getLogger("bmml.events")
_event_logger.setLevel(logging.INFO)
_event_logger.propagate = False

if not _event_logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    _event_logger.addHandler(handler)

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(level: str = "warning") -> None:
    """Set the level of the ``bmml`` loggers.

    Installs a stderr handler on the root logger unless one is configured.
    Run-level events stay at INFO or below, so ``lint.completed`` and
    ``graph.built`` are emitted whatever *level* is.
    """
    numeric = _LEVELS.get(level.lower(), logging.WARNING)
    logging.basicConfig(
        level=numeric,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("bmml").setLevel(numeric)
    _event_logger.setLevel(min(numeric, logging.INFO))


class LintLogger:
    """
    Structured logger for run-level events.

    Each entry carries the event name, the document source and
    event-specific counts.
    """

    def __init__(self, source: str = "", service_name: str = "bmml"):
        self.source = source
        self.service_name = service_name
        self._logger = _event_logger

    def _emit(self, event: str, level: str = "info", **extra_fields: Any) -> None:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "event": event,
            "service": self.service_name,
        }
        if self.source:
            entry["source"] = self.source
        entry.update(extra_fields)

        log_line = json.dumps(entry, default=str)

        if level == "error":
            self._logger.error(log_line)
        elif level == "warn":
            self._logger.warning(log_line)
        else:
            self._logger.info(log_line)

    def log_lint_completed(self, result: LintResult) -> None:
        """Log a finished lint run; runs with errors log at warn."""
        self._emit(
            event="lint.completed",
            level="info" if result.passed else "warn",
            version=result.version.value,
            passed=result.passed,
            error_count=len(result.errors),
            warning_count=len(result.warnings),
        )

    def log_validation_failed(self, report: ValidationReport) -> None:
        self._emit(
            event="validation.failed",
            level="error",
            version=report.version.value,
            error_count=len(report.errors),
            first_error=report.errors[0].message if report.errors else None,
        )

    def log_graph_built(
        self,
        graph: Mapping[str, set[str]],
        orphaned: Optional[list[str]] = None,
    ) -> None:
        self._emit(
            event="graph.built",
            entity_count=len(graph),
            orphaned_count=len(orphaned or []),
        )
