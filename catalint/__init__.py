"""catalint - Validate Gradle dependency version catalogs before the build reads them."""

from catalint.cli import cli
from catalint.validation import CatalogValidator, ValidationResult, check, validate_text

__all__ = [
    "CatalogValidator",
    "ValidationResult",
    "check",
    "cli",
    "validate_text",
]
