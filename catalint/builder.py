"""Catalog model builder.

Turns extracted entries into the four catalog namespaces. Sections may come
in any order. The first binding of a key is kept for resolution; every later
binding of the same key in the same namespace is recorded as a duplicate.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from catalint.constants import KNOWN_SECTIONS
from catalint.extractor import ExtractedDocument, InlineTable, RawEntry, Value
from catalint.models.catalog import (
    BundleEntry,
    Catalog,
    DuplicateKey,
    LibraryEntry,
    PluginEntry,
    VersionEntry,
)

logger = logging.getLogger(__name__)

# Rich version fields, in order of preference, when a version is a table
_RICH_VERSION_FIELDS = ("require", "strictly", "prefer")


def build_catalog(document: ExtractedDocument) -> Catalog:
    """Build a Catalog from an extracted document.

    Args:
        document: Output of extract_entries().

    Returns:
        Catalog with versions, libraries, plugins, bundles and duplicates.
    """
    namespaces: dict[str, dict[str, object]] = {name: {} for name in KNOWN_SECTIONS}
    duplicates: list[DuplicateKey] = []

    for entry in document.entries:
        builder = _ENTRY_BUILDERS.get(entry.section)
        if builder is None:
            logger.debug("Ignoring '%s' in section [%s]", entry.key, entry.section)
            continue

        target = namespaces[entry.section]
        if entry.key in target:
            duplicates.append(DuplicateKey(entry.section, entry.key, entry.line))
            continue

        target[entry.key] = builder(entry)
        if isinstance(entry.value, InlineTable):
            duplicates.extend(
                DuplicateKey(entry.section, f"{entry.key}.{name}", entry.line)
                for name in entry.value.duplicate_fields()
            )

    logger.debug(
        "Built catalog: %d versions, %d libraries, %d plugins, %d bundles",
        len(namespaces["versions"]),
        len(namespaces["libraries"]),
        len(namespaces["plugins"]),
        len(namespaces["bundles"]),
    )
    return Catalog(
        versions=namespaces["versions"],  # type: ignore[arg-type]
        libraries=namespaces["libraries"],  # type: ignore[arg-type]
        plugins=namespaces["plugins"],  # type: ignore[arg-type]
        bundles=namespaces["bundles"],  # type: ignore[arg-type]
        duplicates=tuple(duplicates),
        sections=document.sections,
    )


def _as_text(value: Value | None) -> str | None:
    """Render a field value as text; arrays keep their bracketed form."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, tuple):
        return "[" + ", ".join(value) + "]"
    return None


def _rich_version(table: InlineTable, prefix: str = "") -> str | None:
    for name in _RICH_VERSION_FIELDS:
        value = table.get(f"{prefix}{name}")
        if isinstance(value, str):
            return value
    return None


def _build_version(entry: RawEntry) -> VersionEntry:
    value = entry.value
    if isinstance(value, InlineTable):
        raw = _rich_version(value) or ""
    else:
        raw = _as_text(value) or ""
    return VersionEntry(key=entry.key, raw_value=raw)


def _build_library(entry: RawEntry) -> LibraryEntry:
    value = entry.value
    if isinstance(value, str):
        # "group:artifact:version" shorthand
        parts = value.split(":")
        if len(parts) == 3:
            return LibraryEntry(
                key=entry.key, module=f"{parts[0]}:{parts[1]}", inline_version=parts[2]
            )
        return LibraryEntry(key=entry.key, module=value)
    if not isinstance(value, InlineTable):
        return LibraryEntry(key=entry.key)

    return LibraryEntry(
        key=entry.key,
        module=_as_text(value.get("module")),
        group=_as_text(value.get("group")),
        name=_as_text(value.get("name")),
        version_ref=_as_text(value.get("version.ref")),
        inline_version=_as_text(value.get("version")) or _rich_version(value, "version."),
    )


def _build_plugin(entry: RawEntry) -> PluginEntry:
    value = entry.value
    if isinstance(value, str):
        # "plugin.id:version" shorthand
        plugin_id, sep, version = value.partition(":")
        return PluginEntry(key=entry.key, plugin_id=plugin_id, inline_version=version if sep else None)
    if not isinstance(value, InlineTable):
        return PluginEntry(key=entry.key)

    return PluginEntry(
        key=entry.key,
        plugin_id=_as_text(value.get("id")),
        version_ref=_as_text(value.get("version.ref")),
        inline_version=_as_text(value.get("version")) or _rich_version(value, "version."),
    )


def _build_bundle(entry: RawEntry) -> BundleEntry:
    value = entry.value
    if isinstance(value, tuple):
        return BundleEntry(key=entry.key, members=value)
    if isinstance(value, str):
        return BundleEntry(key=entry.key, members=(value,))
    return BundleEntry(key=entry.key)


_ENTRY_BUILDERS: dict[str, Callable[[RawEntry], object]] = {
    "versions": _build_version,
    "libraries": _build_library,
    "plugins": _build_plugin,
    "bundles": _build_bundle,
}
