"""catalint CLI - lint Gradle version catalogs before the build reads them.

The CLI is a thin wrapper around the Python API (see validation/).
All rule logic lives in the library; the CLI handles settings and display.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from catalint.config import OUTPUT_FORMATS, Settings, resolve_settings
from catalint.constants import DEFAULT_CATALOG_PATH, KEY_SCOPES
from catalint.errors import ConfigError
from catalint.json_output import ErrorDetail, OutputEnvelope, error_envelope, result_envelope
from catalint.output import detail, error, info, success, warn
from catalint.validation import CatalogValidator, Severity, ValidationResult


def output_json_envelope(envelope: OutputEnvelope) -> None:
    """Output a JSON envelope to stdout."""
    click.echo(envelope.to_json())


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@click.group()
@click.version_option(package_name="catalint", prog_name="catalint")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(list(OUTPUT_FORMATS)),
    default=None,
    help="Output format (json for machine parsing, text for humans).",
)
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v info, -vv debug).")
@click.pass_context
def cli(ctx: click.Context, output_format: str | None, verbose: int) -> None:
    """catalint - validate Gradle dependency version catalogs."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["format"] = output_format


def _output_check_json(path: Path, result: ValidationResult, settings: Settings) -> None:
    """Output check results as JSON envelope."""
    extra = {"path": str(path), "key_scope": settings.key_scope, "strict": settings.strict}
    output_json_envelope(result_envelope("check", result, strict=settings.strict, extra=extra))


def _print_findings(result: ValidationResult, *, show_hints: bool) -> None:
    """Print each finding with appropriate formatting."""
    for finding in result.findings:
        if finding.severity == Severity.ERROR:
            error(finding.message)
        elif finding.severity == Severity.WARNING:
            warn(finding.message)
        else:
            info(finding.message)
        if show_hints and finding.fix_hint:
            detail(f"  Hint: {finding.fix_hint}")


def _print_check_summary(path: Path, result: ValidationResult, settings: Settings) -> None:
    """Print check summary message."""
    error_count = len(result.errors)
    warning_count = len(result.warnings)
    parts = []
    if error_count:
        parts.append(f"{error_count} error{'s' if error_count != 1 else ''}")
    if warning_count:
        parts.append(f"{warning_count} warning{'s' if warning_count != 1 else ''}")

    if _passed(result, settings):
        suffix = f" ({', '.join(parts)})" if parts else ""
        success(f"{path} is valid{suffix}")
    else:
        error(f"Validation failed: {', '.join(parts)}")


def _passed(result: ValidationResult, settings: Settings) -> bool:
    if settings.strict:
        return result.is_valid and not result.warnings
    return result.is_valid


@cli.command()
@click.argument("path", type=click.Path(path_type=Path), default=DEFAULT_CATALOG_PATH)
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.option(
    "--strict/--no-strict",
    default=None,
    help="Treat warnings as failures for the exit code.",
)
@click.option(
    "--key-scope",
    type=click.Choice(list(KEY_SCOPES)),
    default=None,
    help="Scope of version-format and duplicate-key checks.",
)
@click.option("--hints/--no-hints", default=True, help="Show a fix hint under each finding.")
@click.pass_context
def check(
    ctx: click.Context,
    path: Path,
    json_output: bool,
    strict: bool | None,
    key_scope: str | None,
    hints: bool,
) -> None:
    """Validate a version catalog.

    PATH is the libs.versions.toml file (default: gradle/libs.versions.toml).
    Exits with 1 if the catalog has errors (or warnings, with --strict).
    """
    global_format = (ctx.find_root().obj or {}).get("format")
    requested_format = "json" if json_output else global_format

    try:
        settings = resolve_settings(
            path.parent,
            key_scope=key_scope,
            strict=strict,
            output_format=requested_format,
        )
    except ConfigError as err:
        if requested_format == "json":
            output_json_envelope(error_envelope("check", [ErrorDetail.from_error(err)]))
        else:
            error(err.message)
        raise SystemExit(1) from err

    result = CatalogValidator(path, key_scope=settings.key_scope).validate()

    if settings.format == "json":
        _output_check_json(path, result, settings)
    else:
        _print_findings(result, show_hints=hints)
        _print_check_summary(path, result, settings)

    # Exit code: 1 if any errors (or warnings in strict mode)
    if not _passed(result, settings):
        raise SystemExit(1)
