"""Format grammars for version strings, module coordinates and plugin IDs.

These are shape checks only: a range like ``[2.0,1.0)`` is accepted even
though its bounds are inverted, and ``999.0.0`` is as valid as ``1.0.0``.

Examples:
    >>> is_valid_version("1.2.3-alpha")
    True
    >>> is_valid_version("1.2.+")
    True
    >>> is_valid_version("[1.0,2.0)")
    True
    >>> is_valid_version("1.x.y")
    False
    >>> is_valid_module("com.example:lib")
    True
    >>> is_valid_plugin_id("com.android.application")
    True
"""

from __future__ import annotations

import re

# MAJOR[.MINOR[.PATCH]] followed by an optional -pre / +build suffix
SEMANTIC_VERSION_PATTERN = re.compile(r"^\d+(\.\d+(\.\d+)?)?([-+].+)?$")

# MAJOR.MINOR.+ (Gradle dynamic version)
WILDCARD_VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\+$")

# [low,high) style ranges; bounds are not compared
RANGE_VERSION_PATTERN = re.compile(r"^[\[(][\d.,]+[\])]$")

MODULE_PATTERN = re.compile(r"^[A-Za-z0-9._-]+:[A-Za-z0-9._-]+$")

PLUGIN_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]+\.[A-Za-z0-9._-]+$")

_RELEASE_PATTERN = re.compile(r"^(\d+(?:\.\d+)*)(?:[-+].*)?$")


def is_valid_version(version: str) -> bool:
    """Return True if ``version`` is a semantic, wildcard or range version."""
    return bool(
        SEMANTIC_VERSION_PATTERN.match(version)
        or WILDCARD_VERSION_PATTERN.match(version)
        or RANGE_VERSION_PATTERN.match(version)
    )


def is_valid_module(module: str) -> bool:
    """Return True if ``module`` is exactly ``group:artifact``."""
    return MODULE_PATTERN.match(module) is not None


def is_valid_plugin_id(plugin_id: str) -> bool:
    """Return True if ``plugin_id`` has at least one dot-separated segment pair."""
    return PLUGIN_ID_PATTERN.match(plugin_id) is not None


def parse_version(version: str) -> tuple[int, ...] | None:
    """Parse the numeric release part of a version string.

    Pre-release and build suffixes are stripped. Ranges, wildcards and
    anything else without a plain numeric release return None.

    Examples:
        >>> parse_version("1.9.0")
        (1, 9, 0)
        >>> parse_version("2.2.0-2.0.2")
        (2, 2, 0)
        >>> parse_version("1.2.+") is None
        True
    """
    match = _RELEASE_PATTERN.match(version.strip())
    if not match:
        return None
    return tuple(int(part) for part in match.group(1).split("."))


def compare_versions(left: tuple[int, ...], right: tuple[int, ...]) -> int:
    """Compare two parsed versions, padding the shorter one with zeros.

    Returns:
        Negative if left < right, zero if equal, positive if left > right.
    """
    width = max(len(left), len(right))
    padded_left = left + (0,) * (width - len(left))
    padded_right = right + (0,) * (width - len(right))
    return (padded_left > padded_right) - (padded_left < padded_right)
