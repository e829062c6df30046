"""Data models for catalint.

Models are frozen dataclasses built once per validation.
"""

from __future__ import annotations

from catalint.models.catalog import (
    BundleEntry,
    Catalog,
    DuplicateKey,
    LibraryEntry,
    PluginEntry,
    VersionEntry,
)

__all__ = [
    "BundleEntry",
    "Catalog",
    "DuplicateKey",
    "LibraryEntry",
    "PluginEntry",
    "VersionEntry",
]
