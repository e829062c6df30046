"""Structured error codes for catalint.

All errors follow the format CTL-{category}{number}:
- CTL-SYN*: Catalog syntax errors
- CTL-CFG*: Configuration errors

These exceptions are raised inside the library and converted into
ValidationResult values (or CLI messages) at the boundaries; calling
``validate()`` never lets them escape.
"""

from __future__ import annotations

from typing import Any


class CatalintError(Exception):
    """Base class for all catalint errors.

    All errors have:
    - code: Structured error code (e.g., CTL-SYN001)
    - message: Human-readable error message
    """

    code: str = "CTL-000"

    # Reserved attribute names that cannot be overwritten by context
    _RESERVED_ATTRS = frozenset({"code", "message", "context", "args"})

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize a catalint error.

        Args:
            message: Human-readable error message.
            **context: Additional context stored as error attributes.
                Reserved keys (code, message, context, args) are ignored.
        """
        self.message = message
        self.context = context
        for key, value in context.items():
            if key not in self._RESERVED_ATTRS:
                setattr(self, key, value)
        super().__init__(f"[{self.code}] {message}")


# Syntax Errors (CTL-SYN*)
class TomlSyntaxError(CatalintError):
    """Raised when the catalog text cannot be split into sections and entries.

    Error code: CTL-SYN001

    ``detail`` is the user-facing cause; the validator reports it as
    ``Syntax error: <detail>``.
    """

    code = "CTL-SYN001"

    def __init__(self, reason: str, line: int | None = None) -> None:
        detail = reason if line is None else f"{reason} (line {line})"
        super().__init__(detail, reason=reason, line=line, detail=detail)


class DuplicateSectionError(TomlSyntaxError):
    """Raised when the same section header appears twice.

    Error code: CTL-SYN002
    """

    code = "CTL-SYN002"

    def __init__(self, section: str, line: int | None = None) -> None:
        super().__init__(f"Duplicate section: [{section}]", line=line)
        self.section = section


# Configuration Errors (CTL-CFG*)
class ConfigError(CatalintError):
    """Base class for configuration-related errors."""

    code = "CTL-CFG000"


class ConfigParseError(ConfigError):
    """Raised when a configuration file cannot be parsed.

    Error code: CTL-CFG001
    """

    code = "CTL-CFG001"

    def __init__(self, path: str, parse_error: str) -> None:
        super().__init__(
            f"Failed to parse config file {path}: {parse_error}",
            path=path,
            parse_error=parse_error,
        )


class InvalidSettingError(ConfigError):
    """Raised when a setting has a value outside its allowed choices.

    Error code: CTL-CFG002
    """

    code = "CTL-CFG002"

    def __init__(self, key: str, value: Any, choices: tuple[str, ...]) -> None:
        super().__init__(
            f"Invalid value for '{key}': {value!r} (expected one of: {', '.join(choices)})",
            key=key,
            value=value,
            choices=choices,
        )
