"""Validation rule base class and built-in rules.

Each rule checks one aspect of catalog validity. Rules are independent
and read-only over the catalog model; some also scan the raw text for
patterns the model does not keep. Message templates are part of the
output contract: callers match on them.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from catalint.constants import (
    CRITICAL_DEPENDENCY_KEYWORDS,
    DEFAULT_KEY_SCOPE,
    REQUIRED_SECTIONS,
    VERSION_COMPATIBILITY,
    VULNERABLE_VERSIONS,
)
from catalint.grammars import (
    compare_versions,
    is_valid_module,
    is_valid_plugin_id,
    is_valid_version,
    parse_version,
)
from catalint.models.catalog import Catalog
from catalint.validation.results import Finding, Severity

# Whole-document patterns used in "document" key scope
_QUOTED_ASSIGNMENT_PATTERN = re.compile(r'(\w+)\s*=\s*"([^"]+)"')
_ANY_ASSIGNMENT_PATTERN = re.compile(r"(\w+)\s*=")


@dataclass(frozen=True)
class RuleContext:
    """Everything a rule may read.

    Attributes:
        text: The raw catalog text.
        catalog: The model built from the text.
        key_scope: "namespace" or "document" (see constants.KEY_SCOPES).
    """

    text: str
    catalog: Catalog
    key_scope: str = DEFAULT_KEY_SCOPE


class ValidationRule(ABC):
    """Base class for all validation rules.

    Subclasses must define:
        name: Unique identifier for the rule
        severity: Default severity of the rule's findings
        description: Human-readable explanation for --verbose

    Subclasses must implement:
        check(): Run the validation and return its findings
    """

    name: str
    severity: Severity
    description: str

    @abstractmethod
    def check(self, context: RuleContext) -> list[Finding]:
        """Run this validation rule against a catalog.

        Args:
            context: Raw text, catalog model and key scope.

        Returns:
            Findings in a deterministic order; empty if the rule passes.
        """
        ...

    def _fail(
        self,
        message: str,
        *,
        fix_hint: str | None = None,
        severity: Severity | None = None,
    ) -> Finding:
        """Helper to create a finding for this rule."""
        return Finding(
            rule_name=self.name,
            severity=severity or self.severity,
            message=message,
            fix_hint=fix_hint,
        )


class RequiredSectionsRule(ValidationRule):
    """Check that the [versions] and [libraries] headers exist.

    This is a plain substring test on the raw text, so section order does
    not matter and header case does ([Versions] is not [versions]).
    """

    name = "required_sections"
    severity = Severity.ERROR
    description = "Verify [versions] and [libraries] sections are present"

    def check(self, context: RuleContext) -> list[Finding]:
        return [
            self._fail(
                f"The {section} section is required",
                fix_hint=f"Add a [{section}] section (section names are lowercase)",
            )
            for section in REQUIRED_SECTIONS
            if f"[{section}]" not in context.text
        ]


class EmptySectionsRule(ValidationRule):
    """Warn when a required section is declared but holds no entries."""

    name = "empty_sections"
    severity = Severity.WARNING
    description = "Warn about required sections without entries"

    def check(self, context: RuleContext) -> list[Finding]:
        catalog = context.catalog
        return [
            self._fail(
                f"Empty section: {section}",
                fix_hint=f"Declare at least one entry under [{section}] or remove it",
            )
            for section in REQUIRED_SECTIONS
            if section in catalog.sections and not catalog.namespace(section)
        ]


class VersionFormatRule(ValidationRule):
    """Check that declared versions are semantic, wildcard or range versions."""

    name = "version_format"
    severity = Severity.ERROR
    description = "Verify version strings use a recognized format"

    def check(self, context: RuleContext) -> list[Finding]:
        if context.key_scope == "document":
            pairs = [
                (match.group(1), match.group(2))
                for match in _QUOTED_ASSIGNMENT_PATTERN.finditer(context.text)
            ]
        else:
            pairs = [(v.key, v.raw_value) for v in context.catalog.versions.values()]

        return [
            self._fail(
                f"Invalid version format: {value} for key {key}",
                fix_hint="Use MAJOR[.MINOR[.PATCH]][-pre][+build], MAJOR.MINOR.+ or a range like [1.0,2.0)",
            )
            for key, value in pairs
            if not is_valid_version(value)
        ]


class DuplicateKeysRule(ValidationRule):
    """Check that no key is bound twice within a namespace."""

    name = "duplicate_keys"
    severity = Severity.ERROR
    description = "Verify keys are declared only once"

    def check(self, context: RuleContext) -> list[Finding]:
        if context.key_scope == "document":
            seen: set[str] = set()
            repeated: list[str] = []
            for match in _ANY_ASSIGNMENT_PATTERN.finditer(context.text):
                key = match.group(1)
                if key in seen:
                    repeated.append(key)
                seen.add(key)
        else:
            repeated = [duplicate.key for duplicate in context.catalog.duplicates]

        return [
            self._fail(
                f"Duplicate key: {key}",
                fix_hint="Remove or rename the repeated declaration; the first one is used",
            )
            for key in repeated
        ]


class VersionReferencesRule(ValidationRule):
    """Check that every version.ref resolves, and flag unused versions.

    Missing references are errors; unreferenced versions are warnings.
    """

    name = "version_references"
    severity = Severity.ERROR
    description = "Verify version.ref targets exist in [versions]"

    def check(self, context: RuleContext) -> list[Finding]:
        catalog = context.catalog
        findings: list[Finding] = []
        referenced: set[str] = set()
        reported: set[str] = set()

        for _owner, ref in catalog.version_references():
            referenced.add(ref)
            if ref not in catalog.versions and ref not in reported:
                reported.add(ref)
                findings.append(
                    self._fail(
                        f"Missing version reference: {ref}",
                        fix_hint=f"Declare '{ref}' in [versions] or fix the reference",
                    )
                )

        for key in catalog.versions:
            if key not in referenced:
                findings.append(
                    self._fail(
                        f"Unreferenced version: {key}",
                        fix_hint="Remove the version or reference it with version.ref",
                        severity=Severity.WARNING,
                    )
                )

        return findings


class ModuleFormatRule(ValidationRule):
    """Check that every library ``module`` is ``group:artifact``."""

    name = "module_format"
    severity = Severity.ERROR
    description = "Verify library modules use group:artifact"

    def check(self, context: RuleContext) -> list[Finding]:
        return [
            self._fail(
                f"Invalid module format: {library.module}",
                fix_hint="Use exactly one ':' between non-empty group and artifact",
            )
            for library in context.catalog.libraries.values()
            if library.module is not None and not is_valid_module(library.module)
        ]


class PluginIdFormatRule(ValidationRule):
    """Check that every plugin ``id`` is dot-separated."""

    name = "plugin_id_format"
    severity = Severity.ERROR
    description = "Verify plugin IDs contain at least one dot"

    def check(self, context: RuleContext) -> list[Finding]:
        return [
            self._fail(
                f"Invalid plugin ID format: {plugin.plugin_id}",
                fix_hint="Plugin IDs look like 'org.example.plugin'",
            )
            for plugin in context.catalog.plugins.values()
            if plugin.plugin_id is not None and not is_valid_plugin_id(plugin.plugin_id)
        ]


class CriticalDependenciesRule(ValidationRule):
    """Warn when no well-known testing library is mentioned anywhere."""

    name = "critical_dependencies"
    severity = Severity.WARNING
    description = "Check that a testing library is declared"

    def check(self, context: RuleContext) -> list[Finding]:
        if any(keyword in context.text for keyword in CRITICAL_DEPENDENCY_KEYWORDS):
            return []
        return [
            self._fail(
                "Missing critical dependency: No testing dependencies found",
                fix_hint=f"Declare one of: {', '.join(CRITICAL_DEPENDENCY_KEYWORDS)}",
            )
        ]


class VersionCompatibilityRule(ValidationRule):
    """Check declared versions against the compatibility matrix."""

    name = "version_compatibility"
    severity = Severity.ERROR
    description = "Detect known-incompatible version pairs"

    def check(self, context: RuleContext) -> list[Finding]:
        versions = context.catalog.versions
        findings: list[Finding] = []

        for rule in VERSION_COMPATIBILITY:
            tool = versions.get(rule.tool)
            required = versions.get(rule.requires)
            if tool is None or required is None or tool.raw_value != rule.tool_version:
                continue

            actual = parse_version(required.raw_value)
            minimum = parse_version(rule.minimum)
            if actual is None or minimum is None:
                continue
            if compare_versions(actual, minimum) < 0:
                findings.append(
                    self._fail(
                        f"Version incompatibility: {rule.tool_label} {tool.raw_value} "
                        f"requires {rule.requires_label} {rule.minimum}+",
                        fix_hint=f"Upgrade '{rule.requires}' to {rule.minimum} or later",
                    )
                )

        return findings


class BundleReferencesRule(ValidationRule):
    """Check that bundle members are library keys.

    Bundles do not compose: a member naming another bundle is rejected
    like any other unknown library.
    """

    name = "bundle_references"
    severity = Severity.ERROR
    description = "Verify bundle members name declared libraries"

    def check(self, context: RuleContext) -> list[Finding]:
        catalog = context.catalog
        findings: list[Finding] = []

        for bundle in catalog.bundles.values():
            for member in bundle.members:
                if member in catalog.libraries:
                    continue
                if member in catalog.bundles:
                    hint = "Bundles cannot contain other bundles; list the libraries instead"
                else:
                    hint = f"Declare '{member}' in [libraries] or remove it from the bundle"
                findings.append(
                    self._fail(
                        f"Invalid bundle reference: {member} in bundle {bundle.key}",
                        fix_hint=hint,
                    )
                )

        return findings


class VulnerableVersionsRule(ValidationRule):
    """Warn about versions listed in the known-vulnerable table.

    A dependency matches when it is a version key (``junit = "4.12"``) or
    a part of a library coordinate whose resolved version is listed.
    """

    name = "vulnerable_versions"
    severity = Severity.WARNING
    description = "Warn about versions with known vulnerabilities"

    def check(self, context: RuleContext) -> list[Finding]:
        catalog = context.catalog
        hits: list[tuple[str, str]] = []

        for dependency, bad_versions in VULNERABLE_VERSIONS.items():
            declared = catalog.versions.get(dependency)
            if declared is not None and declared.raw_value in bad_versions:
                hits.append((dependency, declared.raw_value))

            for library in catalog.libraries.values():
                coordinate = library.coordinate
                if coordinate is None or dependency not in coordinate.split(":"):
                    continue
                version = catalog.resolve_version(library)
                if version is not None and version in bad_versions:
                    hits.append((dependency, version))

        findings: list[Finding] = []
        for dependency, version in dict.fromkeys(hits):
            findings.append(
                self._fail(
                    f"Potentially vulnerable version: {dependency} {version}",
                    fix_hint=f"Upgrade {dependency} past {version}",
                )
            )
        return findings
