"""Validation result data structures.

Rules emit Findings; the runner folds them into a single immutable
ValidationResult for CLI display and JSON export.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Severity(Enum):
    """Severity level for findings.

    ERROR: Makes the catalog invalid
    WARNING: Advisory, never affects validity
    INFO: Suggestion for improvement (not surfaced in warnings)
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Finding:
    """A single problem reported by a validation rule.

    Attributes:
        rule_name: Identifier for the rule that produced this finding.
        severity: ERROR findings make the catalog invalid; WARNING ones don't.
        message: Human-readable description (part of the output contract).
        fix_hint: Optional suggestion for fixing the issue.
    """

    rule_name: str
    severity: Severity
    message: str
    fix_hint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        d: dict[str, Any] = {
            "rule_name": self.rule_name,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.fix_hint is not None:
            d["fix_hint"] = self.fix_hint
        return d


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one validate() call.

    ``is_valid`` is derived from ``errors`` so the two can never disagree.

    Attributes:
        errors: Error messages in rule order.
        warnings: Warning messages in rule order.
        timestamp: When the result was produced (timezone-aware).
        findings: The structured findings behind the messages.
    """

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=_utcnow)
    findings: tuple[Finding, ...] = field(default=(), compare=False)

    @property
    def is_valid(self) -> bool:
        """True if no errors were found."""
        return not self.errors

    @property
    def timestamp_ms(self) -> int:
        """Timestamp as integer epoch milliseconds."""
        return int(self.timestamp.timestamp() * 1000)

    @classmethod
    def from_findings(cls, findings: Iterable[Finding], *, timestamp: datetime) -> ValidationResult:
        """Fold findings into a result, keeping their order."""
        collected = tuple(findings)
        return cls(
            errors=tuple(f.message for f in collected if f.severity == Severity.ERROR),
            warnings=tuple(f.message for f in collected if f.severity == Severity.WARNING),
            timestamp=timestamp,
            findings=collected,
        )

    @classmethod
    def failure(
        cls,
        message: str,
        *,
        rule_name: str,
        timestamp: datetime,
        fix_hint: str | None = None,
    ) -> ValidationResult:
        """Create a result holding a single error and no warnings."""
        finding = Finding(
            rule_name=rule_name,
            severity=Severity.ERROR,
            message=message,
            fix_hint=fix_hint,
        )
        return cls.from_findings([finding], timestamp=timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict for --json output."""
        return {
            "is_valid": self.is_valid,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "timestamp": self.timestamp.isoformat(),
            "timestamp_ms": self.timestamp_ms,
            "findings": [f.to_dict() for f in self.findings],
        }
