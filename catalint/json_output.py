"""JSON envelopes for ``--json`` / ``--format json`` output.

Every command prints exactly one envelope on stdout:

    {
        "success": true,
        "command": "check",
        "data": {"is_valid": true, "errors": [], "warnings": [], ...}
    }

Failed runs set ``success`` to false and add an ``errors`` array with one
object per failure. ``data`` is still filled in when a result exists, so
tools can read warnings and counts either way.

Usage:
    from catalint.json_output import result_envelope

    click.echo(result_envelope("check", result, strict=False).to_json())
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from catalint.errors import CatalintError
from catalint.validation import ValidationResult


@dataclass
class ErrorDetail:
    """One entry of the envelope's ``errors`` array.

    Attributes:
        type: "ValidationError" for findings, else the exception class name.
        message: The finding message or the error message.
        code: CTL-* code for raised errors; omitted for findings.
    """

    type: str
    message: str
    code: str | None = None

    @classmethod
    def from_error(cls, err: CatalintError) -> ErrorDetail:
        """Describe a raised catalint error."""
        return cls(type=type(err).__name__, message=err.message, code=err.code)

    def to_dict(self) -> dict[str, str]:
        d = {"type": self.type, "message": self.message}
        if self.code is not None:
            d["code"] = self.code
        return d


@dataclass
class OutputEnvelope:
    """Top-level JSON document printed by a command.

    Attributes:
        success: Whether the command's exit code is 0.
        command: Command name, e.g. "check".
        data: Command payload (empty dict when nothing was produced).
        errors: Failure details; None on success so the key is left out.
    """

    success: bool
    command: str
    data: dict[str, Any] | None
    errors: list[ErrorDetail] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
            "data": self.data,
        }
        if self.errors is not None:
            payload["errors"] = [e.to_dict() for e in self.errors]
        return payload

    def to_json(self, *, indent: int | None = 2) -> str:
        """Serialize; paths and messages keep their non-ASCII characters."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def success_envelope(command: str, data: dict[str, Any]) -> OutputEnvelope:
    return OutputEnvelope(success=True, command=command, data=data)


def error_envelope(
    command: str,
    errors: list[ErrorDetail],
    *,
    data: dict[str, Any] | None = None,
) -> OutputEnvelope:
    """Build a failed envelope.

    Args:
        command: Command name.
        errors: What went wrong, in report order.
        data: Payload gathered before the failure, if any.
    """
    return OutputEnvelope(success=False, command=command, data=data or {}, errors=errors)


def result_envelope(
    command: str,
    result: ValidationResult,
    *,
    strict: bool,
    extra: dict[str, Any] | None = None,
) -> OutputEnvelope:
    """Wrap a ValidationResult.

    The run fails when the result has errors, or, with ``strict``, warnings.
    Each failing message becomes a "ValidationError" entry.

    Args:
        command: Command name.
        result: The validation outcome.
        strict: Count warnings as failures.
        extra: Additional keys merged into ``data`` (path, settings).
    """
    data = result.to_dict()
    data.update(extra or {})

    failures = list(result.errors)
    if strict:
        failures.extend(result.warnings)
    if not failures:
        return success_envelope(command, data)
    return error_envelope(
        command,
        [ErrorDetail(type="ValidationError", message=message) for message in failures],
        data=data,
    )
