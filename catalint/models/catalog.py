"""Catalog model: the four namespaces of a version catalog.

The model is built fresh for every validation and is read-only once the
rule checks start; the namespace maps are exposed as read-only mappings.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class VersionEntry:
    """A named version string from ``[versions]``.

    Attributes:
        key: Version alias (e.g. "agp").
        raw_value: The declared version text, quotes removed.
    """

    key: str
    raw_value: str


@dataclass(frozen=True)
class LibraryEntry:
    """A library declaration from ``[libraries]``.

    Either ``module`` ("group:artifact") or separate ``group``/``name``
    fields may be present; both may coexist. Entries with neither are kept.

    Attributes:
        key: Library alias.
        module: The ``module`` coordinate, if declared.
        group: The ``group`` field, if declared.
        name: The ``name`` field, if declared.
        version_ref: Alias of a version in ``[versions]``, if referenced.
        inline_version: A version declared directly on the library.
    """

    key: str
    module: str | None = None
    group: str | None = None
    name: str | None = None
    version_ref: str | None = None
    inline_version: str | None = None

    @property
    def coordinate(self) -> str | None:
        """``group:artifact`` from whichever form the entry uses."""
        if self.module is not None:
            return self.module
        if self.group is not None and self.name is not None:
            return f"{self.group}:{self.name}"
        return None


@dataclass(frozen=True)
class PluginEntry:
    """A plugin declaration from ``[plugins]``.

    Attributes:
        key: Plugin alias.
        plugin_id: The ``id`` field, if declared.
        version_ref: Alias of a version in ``[versions]``, if referenced.
        inline_version: A version declared directly on the plugin.
    """

    key: str
    plugin_id: str | None = None
    version_ref: str | None = None
    inline_version: str | None = None


@dataclass(frozen=True)
class BundleEntry:
    """A named group of library aliases from ``[bundles]``."""

    key: str
    members: tuple[str, ...] = ()


@dataclass(frozen=True)
class DuplicateKey:
    """A key bound more than once within one namespace.

    Attributes:
        namespace: Section the key was declared in.
        key: The repeated key (``entry.field`` for fields repeated inside
            one inline table).
        line: 1-based line of the repeated occurrence.
    """

    namespace: str
    key: str
    line: int


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Catalog:
    """In-memory model of a version catalog.

    Attributes:
        versions: Version alias -> VersionEntry (first binding wins).
        libraries: Library alias -> LibraryEntry.
        plugins: Plugin alias -> PluginEntry.
        bundles: Bundle alias -> BundleEntry.
        duplicates: Every repeated binding, in document order.
        sections: Section headers in document order.
    """

    versions: Mapping[str, VersionEntry] = field(default_factory=dict)
    libraries: Mapping[str, LibraryEntry] = field(default_factory=dict)
    plugins: Mapping[str, PluginEntry] = field(default_factory=dict)
    bundles: Mapping[str, BundleEntry] = field(default_factory=dict)
    duplicates: tuple[DuplicateKey, ...] = ()
    sections: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # frozen dataclass: bypass __setattr__ to store read-only views
        object.__setattr__(self, "versions", _freeze(self.versions))
        object.__setattr__(self, "libraries", _freeze(self.libraries))
        object.__setattr__(self, "plugins", _freeze(self.plugins))
        object.__setattr__(self, "bundles", _freeze(self.bundles))

    def namespace(self, name: str) -> Mapping[str, Any]:
        """Return the namespace map for a section name (empty if unknown)."""
        namespaces: dict[str, Mapping[str, Any]] = {
            "versions": self.versions,
            "libraries": self.libraries,
            "plugins": self.plugins,
            "bundles": self.bundles,
        }
        return namespaces.get(name, MappingProxyType({}))

    def version_references(self) -> list[tuple[str, str]]:
        """All ``version.ref`` usages as (owner key, referenced alias) pairs."""
        refs: list[tuple[str, str]] = []
        for library in self.libraries.values():
            if library.version_ref is not None:
                refs.append((library.key, library.version_ref))
        for plugin in self.plugins.values():
            if plugin.version_ref is not None:
                refs.append((plugin.key, plugin.version_ref))
        return refs

    def resolve_version(self, entry: LibraryEntry | PluginEntry) -> str | None:
        """Return the effective version of a library or plugin, if known."""
        if entry.version_ref is not None:
            target = self.versions.get(entry.version_ref)
            return target.raw_value if target is not None else None
        return entry.inline_version
