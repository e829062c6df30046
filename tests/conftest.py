"""Shared pytest fixtures for catalint tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import pytest

# =============================================================================
# Catalog documents
# =============================================================================

MINIMAL_CATALOG = """\
[versions]
junit = "5.8.2"

[libraries]
junit-core = { module = "org.junit.jupiter:junit-jupiter", version.ref = "junit" }
"""

COMPLETE_CATALOG = """\
[versions]
agp = "8.2.0"
kotlin = "1.9.0"
junit = "5.8.2"
mockk = "1.13.4"

[libraries]
junit-core = { module = "org.junit.jupiter:junit-jupiter", version.ref = "junit" }
mockk = { module = "io.mockk:mockk", version.ref = "mockk" }
android-core = { module = "androidx.core:core", version = "1.8.0" }

[plugins]
android-application = { id = "com.android.application", version.ref = "agp" }
kotlin-android = { id = "org.jetbrains.kotlin.android", version.ref = "kotlin" }

[bundles]
testing = ["junit-core", "mockk"]
"""

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def minimal_catalog() -> str:
    """Smallest catalog that passes every rule without warnings."""
    return MINIMAL_CATALOG


@pytest.fixture
def complete_catalog() -> str:
    """Catalog using all four sections, clean under the default key scope."""
    return COMPLETE_CATALOG


# =============================================================================
# Fixture Directory Access
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def real_catalog(fixtures_dir: Path) -> Path:
    """Path to a realistic Android project catalog."""
    return fixtures_dir / "catalogs" / "android.libs.versions.toml"


# =============================================================================
# Catalog writers
# =============================================================================


@pytest.fixture
def write_catalog(tmp_path: Path) -> Callable[[str], Path]:
    """Return a function that writes catalog text to a temp libs.versions.toml."""

    def _write(content: str, name: str = "libs.versions.toml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """A clock that always returns 2024-01-02T03:04:05Z."""
    return lambda: FIXED_TIME


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove CATALINT_* environment variables for the duration of a test."""
    for key in ("CATALINT_KEY_SCOPE", "CATALINT_STRICT", "CATALINT_FORMAT"):
        monkeypatch.delenv(key, raising=False)
