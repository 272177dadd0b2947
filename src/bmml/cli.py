"""
bmml CLI - Validate, lint and graph Business Model Markup Language files.

Commands:
    bmml validate   Validate a document against its JSON schema
    bmml lint       Validate, then check cross-entity references
    bmml graph      Show which customer segments each entity serves

Every command accepts ``--format text|json``.  Text results go to stdout
(``OK`` on success) and problems to stderr; JSON results always go to
stdout.
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional

import click

from bmml.config import get_config
from bmml.graph import (
    build_connection_graph,
    emit_graph_built,
    get_segment_order,
    orphaned_entities,
)
from bmml.lint import emit_lint_result, lint
from bmml.loader import DocumentLoader, DocumentParseError, LoadedDocument
from bmml.logger import LintLogger, configure_logging
from bmml.types import DocumentVersion, Severity
from bmml.validator import ValidationReport, validate_file

_ICONS = {
    Severity.ERROR.value: "✗",
    Severity.WARNING.value: "!",
    Severity.INFO.value: "i",
}

_format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Output format (defaults to BMML_OUTPUT_FORMAT or text)",
)


@click.group()
@click.version_option(package_name="bmml")
def main():
    """bmml - Business Model Markup Language validator and linter."""
    configure_logging(get_config().log_level)


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _resolve_format(output_format: Optional[str]) -> str:
    return output_format or get_config().output_format


def _display_path(path: str) -> str:
    return "(root)" if path == "/" else path


def _format_validation_error(error: dict[str, Any]) -> str:
    return f"  {_display_path(error['path'])}: {error['message']}"


def _format_lint_issue(issue: dict[str, Any]) -> str:
    icon = _ICONS.get(issue["severity"], "i")
    return f"  {icon} [{issue['rule']}] {_display_path(issue['path'])}: {issue['message']}"


def _output_result(
    success: bool,
    version: DocumentVersion,
    validation_errors: list[dict[str, Any]],
    lint_issues: list[dict[str, Any]],
    output_format: str,
) -> None:
    if output_format == "json":
        click.echo(
            json.dumps(
                {
                    "success": success,
                    "version": version.value,
                    "validation_errors": validation_errors,
                    "lint_issues": lint_issues,
                },
                indent=2,
            )
        )
        return

    if validation_errors:
        click.echo("Validation errors:", err=True)
        for error in validation_errors:
            click.echo(_format_validation_error(error), err=True)

    if lint_issues:
        if validation_errors:
            click.echo("", err=True)
        click.echo("Lint issues:", err=True)
        for issue in lint_issues:
            click.echo(_format_lint_issue(issue), err=True)

    if success:
        click.echo("OK")


def _validation_errors(report: ValidationReport) -> list[dict[str, Any]]:
    return [{"path": e.path, "message": e.message} for e in report.errors]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@main.command("validate")
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@_format_option
def validate_cmd(file: Path, output_format: Optional[str]):
    """Validate FILE against the BMML JSON schema.

    Example:
        bmml validate model.bmml
    """
    report = validate_file(file)
    if not report.valid:
        LintLogger(source=str(file)).log_validation_failed(report)

    _output_result(
        success=report.valid,
        version=report.version,
        validation_errors=_validation_errors(report),
        lint_issues=[],
        output_format=_resolve_format(output_format),
    )
    if not report.valid:
        sys.exit(1)


@main.command("lint")
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@_format_option
@click.option("--strict", is_flag=True, help="Fail on warnings as well as errors")
def lint_cmd(file: Path, output_format: Optional[str], strict: bool):
    """Validate FILE, then check its cross-entity references.

    Reports dangling references and type-incompatible fit mappings as
    errors, and coverage gaps (segments without fits, pains never
    relieved, ...) as warnings.

    Example:
        bmml lint model.bmml --format json
    """
    output_format = _resolve_format(output_format)
    fail_on_warnings = strict or get_config().fail_on_warnings
    events = LintLogger(source=str(file))

    report = validate_file(file)
    if not report.valid:
        events.log_validation_failed(report)
        _output_result(False, report.version, _validation_errors(report), [], output_format)
        sys.exit(1)

    loaded = _load(file)
    result = lint(loaded.data, loaded.version)
    emit_lint_result(result, source=str(file))
    events.log_lint_completed(result)

    success = result.passed and not (fail_on_warnings and result.warnings)
    _output_result(success, result.version, [], result.to_dicts(), output_format)
    if not success:
        sys.exit(1)


@main.command("graph")
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@_format_option
def graph_cmd(file: Path, output_format: Optional[str]):
    """Show the customer segments each entity of FILE is connected to.

    Requires a v2 (typed-relation) document.  Entities that reach no
    segment are listed as orphaned.

    Example:
        bmml graph model.bmml
    """
    loaded = _load(file)
    if loaded.version is not DocumentVersion.V2:
        raise click.ClickException(
            f"{file}: connection graphs require a v2 document (version: \"2.0\")"
        )

    graph = build_connection_graph(loaded.data)
    segments = get_segment_order(loaded.data)
    orphaned = orphaned_entities(graph)
    emit_graph_built(graph, source=str(file))
    LintLogger(source=str(file)).log_graph_built(graph, orphaned)

    if _resolve_format(output_format) == "json":
        click.echo(
            json.dumps(
                {
                    "version": loaded.version.value,
                    "segments": segments,
                    "graph": {k: sorted(v) for k, v in graph.items()},
                    "orphaned": orphaned,
                },
                indent=2,
            )
        )
        return

    click.echo(f"Segments: {', '.join(segments) if segments else '(none)'}")
    for entity_id, connected in graph.items():
        targets = ", ".join(sorted(connected)) if connected else "(none)"
        click.echo(f"  {entity_id} -> {targets}")
    if orphaned:
        click.echo("Orphaned:")
        for entity_id in orphaned:
            click.echo(f"  {entity_id}")


def _load(file: Path) -> LoadedDocument:
    try:
        return DocumentLoader().load(file)
    except (FileNotFoundError, DocumentParseError) as exc:
        raise click.ClickException(str(exc)) from exc


if __name__ == "__main__":
    main()
