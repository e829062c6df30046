"""Validation runner that executes all rules against a catalog.

Every entry point here returns a ValidationResult; malformed input,
unreadable files and unexpected failures are all folded into the result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from pathlib import Path

from catalint.builder import build_catalog
from catalint.constants import DEFAULT_KEY_SCOPE, KEY_SCOPES
from catalint.errors import InvalidSettingError, TomlSyntaxError
from catalint.extractor import extract_entries
from catalint.validation.results import Finding, ValidationResult
from catalint.validation.rules import (
    BundleReferencesRule,
    CriticalDependenciesRule,
    DuplicateKeysRule,
    EmptySectionsRule,
    ModuleFormatRule,
    PluginIdFormatRule,
    RequiredSectionsRule,
    RuleContext,
    ValidationRule,
    VersionCompatibilityRule,
    VersionFormatRule,
    VersionReferencesRule,
    VulnerableVersionsRule,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Fixed execution order; message order in results follows it.
DEFAULT_RULES: tuple[ValidationRule, ...] = (
    RequiredSectionsRule(),
    EmptySectionsRule(),
    VersionFormatRule(),
    DuplicateKeysRule(),
    VersionReferencesRule(),
    ModuleFormatRule(),
    PluginIdFormatRule(),
    CriticalDependenciesRule(),
    VersionCompatibilityRule(),
    BundleReferencesRule(),
    VulnerableVersionsRule(),
)

EMPTY_FILE_MESSAGE = "Empty or invalid TOML file"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_key_scope(key_scope: str) -> None:
    if key_scope not in KEY_SCOPES:
        raise InvalidSettingError("key_scope", key_scope, KEY_SCOPES)


def validate_text(
    text: str,
    *,
    rules: Sequence[ValidationRule] | None = None,
    key_scope: str = DEFAULT_KEY_SCOPE,
    clock: Clock | None = None,
) -> ValidationResult:
    """Validate catalog text.

    Args:
        text: Full catalog document.
        rules: Optional sequence of rules to run. Defaults to DEFAULT_RULES.
        key_scope: "namespace" (default) or "document".
        clock: Source of the result timestamp. Defaults to UTC now.

    Returns:
        ValidationResult; a syntax error short-circuits to a single error.

    Raises:
        InvalidSettingError: If key_scope is not a known scope.
    """
    _check_key_scope(key_scope)
    if rules is None:
        rules = DEFAULT_RULES
    now = clock or _utcnow

    if not text.strip():
        return ValidationResult.failure(
            EMPTY_FILE_MESSAGE,
            rule_name="source",
            timestamp=now(),
            fix_hint="Add [versions] and [libraries] sections",
        )

    findings: list[Finding] = []
    try:
        document = extract_entries(text)
        catalog = build_catalog(document)
        context = RuleContext(text=text, catalog=catalog, key_scope=key_scope)
        for rule in rules:
            findings.extend(rule.check(context))
    except TomlSyntaxError as err:
        logger.debug("Catalog is not parseable: %s", err.detail)
        return ValidationResult.failure(
            f"Syntax error: {err.detail}",
            rule_name="syntax",
            timestamp=now(),
            fix_hint="Fix the catalog structure; no further checks were run",
        )
    except Exception as err:  # noqa: BLE001 - validate() must never raise
        logger.exception("Unexpected failure while validating catalog")
        return ValidationResult.failure(
            f"Syntax error: {err}",
            rule_name="syntax",
            timestamp=now(),
        )

    result = ValidationResult.from_findings(findings, timestamp=now())
    logger.debug(
        "Ran %d rules: %d errors, %d warnings",
        len(rules),
        len(result.errors),
        len(result.warnings),
    )
    return result


class CatalogValidator:
    """Validator bound to one catalog file.

    Holds no state between calls: every validate() re-reads the file and
    builds a fresh model, so one instance may be shared between threads.
    """

    def __init__(
        self,
        path: Path,
        *,
        key_scope: str = DEFAULT_KEY_SCOPE,
        rules: Sequence[ValidationRule] | None = None,
        clock: Clock | None = None,
    ) -> None:
        _check_key_scope(key_scope)
        self.path = Path(path)
        self.key_scope = key_scope
        self.rules = tuple(rules) if rules is not None else DEFAULT_RULES
        self.clock = clock or _utcnow

    def validate(self) -> ValidationResult:
        """Read the catalog once and validate it. Never raises."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return ValidationResult.failure(
                f"TOML file does not exist: {self.path}",
                rule_name="source",
                timestamp=self.clock(),
                fix_hint="Check the catalog path",
            )
        except OSError as err:
            return ValidationResult.failure(
                f"Cannot read TOML file: {self.path}: {err.strerror or err}",
                rule_name="source",
                timestamp=self.clock(),
                fix_hint="Check file permissions",
            )

        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as err:
            return ValidationResult.failure(
                f"Syntax error: invalid UTF-8 encoding at byte {err.start}",
                rule_name="syntax",
                timestamp=self.clock(),
                fix_hint="Save the catalog as UTF-8",
            )

        return validate_text(text, rules=self.rules, key_scope=self.key_scope, clock=self.clock)


def check(
    catalog_path: Path,
    *,
    key_scope: str = DEFAULT_KEY_SCOPE,
    rules: Sequence[ValidationRule] | None = None,
) -> ValidationResult:
    """Validate the catalog file at ``catalog_path``.

    Args:
        catalog_path: Path to a libs.versions.toml file.
        key_scope: "namespace" (default) or "document".
        rules: Optional sequence of rules to run. Defaults to DEFAULT_RULES.

    Returns:
        ValidationResult for the file.
    """
    return CatalogValidator(catalog_path, key_scope=key_scope, rules=rules).validate()
