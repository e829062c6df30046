"""Validation framework for version catalogs.

This module provides the public API for validating catalogs:
- check(): Validate a catalog file
- validate_text(): Validate catalog text already in memory
- CatalogValidator: Validator bound to one file
- ValidationResult: The single value every validation produces
- ValidationRule: Base class for custom rules
"""

from catalint.validation.results import (
    Finding,
    Severity,
    ValidationResult,
)
from catalint.validation.rules import RuleContext, ValidationRule
from catalint.validation.runner import (
    DEFAULT_RULES,
    CatalogValidator,
    check,
    validate_text,
)

__all__ = [
    "DEFAULT_RULES",
    "CatalogValidator",
    "Finding",
    "RuleContext",
    "Severity",
    "ValidationResult",
    "ValidationRule",
    "check",
    "validate_text",
]
