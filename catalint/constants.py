"""Shared constants and fixed knowledge tables for catalint.

The compatibility matrix, vulnerable-version table and critical-dependency
keywords are plain data. Extending them never requires touching the rules
that read them.
"""

from __future__ import annotations

from dataclasses import dataclass

# Sections whose headers must be present in every catalog
REQUIRED_SECTIONS: tuple[str, ...] = ("versions", "libraries")

# Sections that populate the catalog model; anything else is ignored
KNOWN_SECTIONS: tuple[str, ...] = ("versions", "libraries", "plugins", "bundles")

# Default catalog location relative to a Gradle project root
DEFAULT_CATALOG_PATH: str = "gradle/libs.versions.toml"

# Key scopes for the version-format and duplicate-key checks:
# - namespace: each check only looks at its own section
# - document: whole-text scan across every section
KEY_SCOPES: tuple[str, ...] = ("namespace", "document")
DEFAULT_KEY_SCOPE: str = "namespace"

# Name fragments of well-known testing libraries. A catalog mentioning none
# of them gets a "missing critical dependency" warning.
CRITICAL_DEPENDENCY_KEYWORDS: tuple[str, ...] = ("junit", "mockk", "androidx.test", "espresso")

# Dependency name -> versions with known security advisories
VULNERABLE_VERSIONS: dict[str, tuple[str, ...]] = {
    "junit": ("4.10", "4.11", "4.12"),
}


@dataclass(frozen=True)
class CompatibilityRule:
    """A known-incompatible pairing of two declared versions.

    When the versions namespace declares ``tool`` at exactly ``tool_version``
    and declares ``requires`` below ``minimum``, the catalog is rejected.

    Attributes:
        tool: Version key of the constraining tool (e.g. "agp").
        tool_label: Display name used in messages (e.g. "AGP").
        tool_version: Exact version of the tool the constraint applies to.
        requires: Version key of the constrained dependency (e.g. "kotlin").
        requires_label: Display name of the constrained dependency.
        minimum: Lowest acceptable version of the constrained dependency.
    """

    tool: str
    tool_label: str
    tool_version: str
    requires: str
    requires_label: str
    minimum: str


VERSION_COMPATIBILITY: tuple[CompatibilityRule, ...] = (
    CompatibilityRule(
        tool="agp",
        tool_label="AGP",
        tool_version="8.11.1",
        requires="kotlin",
        requires_label="Kotlin",
        minimum="1.9.0",
    ),
)

# Maximum number of parent directories searched for a config file
MAX_CONFIG_SEARCH_DEPTH: int = 20
