"""Error taxonomy for the Document Review Pipeline.

Every failure that crosses the pipeline boundary is one of the
``PipelineError`` subclasses below. Vendor exceptions (HTTP client, JSON,
schema validation) are translated at the stage that meets them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from docreview.models.decision import DecisionCandidate


class ErrorKind(str, Enum):
    """Machine-readable failure kinds exposed to callers."""

    VALIDATION = "validation_error"
    AUTH = "auth_error"
    NOT_FOUND = "not_found_error"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    TRANSIENT = "transient_error"
    PARSE = "parse_error"
    CONTRACT_VIOLATION = "contract_violation"


class PipelineError(Exception):
    """Base class for every caller-visible pipeline failure."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def retryable(self) -> bool:
        """Whether the caller may retry the whole review call."""
        return False

    def to_dict(self) -> dict[str, Any]:
        """Error object for the outbound response."""
        return {"kind": self.kind.value, "message": self.message}


class ValidationError(PipelineError):
    """A submission or configuration problem caught before any network call."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class AuthError(PipelineError):
    """The reasoning service rejected credentials or permissions."""

    kind = ErrorKind.AUTH


class NotFoundError(PipelineError):
    """The requested model or region is unavailable."""

    kind = ErrorKind.NOT_FOUND


class PayloadTooLargeError(PipelineError):
    """The assembled request exceeds the reasoning service's limit."""

    kind = ErrorKind.PAYLOAD_TOO_LARGE


class TransientError(PipelineError):
    """Network, timeout or server-side failure."""

    kind = ErrorKind.TRANSIENT

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return True


class ParseError(PipelineError):
    """The reasoning service's answer could not be deserialized.

    The raw text is kept for diagnostics and is never serialized into the
    outbound error object.
    """

    kind = ErrorKind.PARSE

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


@dataclass(frozen=True)
class FieldViolation:
    """A single field that broke the status/field contract."""

    field: str
    rule: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "rule": self.rule, "message": self.message}


class ContractViolation(PipelineError):
    """The answer deserialized but broke a status/field invariant."""

    kind = ErrorKind.CONTRACT_VIOLATION

    def __init__(
        self,
        violations: list[FieldViolation],
        candidate: Optional["DecisionCandidate"] = None,
    ):
        fields = ", ".join(v.field for v in violations)
        super().__init__(f"Decision violates the status/field contract: {fields}")
        self.violations = violations
        self.candidate = candidate

    @property
    def fields(self) -> list[str]:
        """Names of the failing fields, in check order."""
        return [v.field for v in self.violations]

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["violations"] = [v.to_dict() for v in self.violations]
        return data
