"""Enforcement Stage - Validate a candidate against the status/field contract.

The reasoning service is non-deterministic, so its answer is checked
against an explicit per-status rule table before anything downstream sees
it. Violations are reported, never repaired.

Rules per field:
- REQUIRED: not null, and not empty (string or list)
- OPTIONAL: anything the structural schema allows
- EMPTY: exactly an empty list
- NULL: null
"""

import logging
from enum import Enum
from typing import Any

from pydantic import ValidationError as SchemaError

from docreview.errors import ContractViolation, FieldViolation
from docreview.models import (
    DECISION_ADAPTER,
    ApplicationStatus,
    DecisionCandidate,
    StructuredDecision,
)

logger = logging.getLogger(__name__)


class FieldRule(str, Enum):
    """Population requirement for one field under one status."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    EMPTY = "empty"
    NULL = "null"


R, O, E, N = FieldRule.REQUIRED, FieldRule.OPTIONAL, FieldRule.EMPTY, FieldRule.NULL

CONTRACT_FIELDS = (
    "admin_recommendations",
    "admin_patient_followup",
    "provider_recommendations",
    "provider_patient_followup",
    "provider_summary",
    "provider_visit_note",
    "qualifying_criteria",
)

# fmt: off
STATUS_RULES: dict[ApplicationStatus, dict[str, FieldRule]] = {
    status: dict(zip(CONTRACT_FIELDS, rules))
    for status, rules in {
        #                                  admin_recs admin_fu prov_recs prov_fu prov_sum visit_note qualifying
        ApplicationStatus.MISSING_DOCUMENTS: (R,        R,       N,        N,      N,       N,         E),
        ApplicationStatus.ADMIN_REVIEW:      (R,        O,       N,        N,      N,       N,         O),
        ApplicationStatus.PROVIDER_REVIEW:   (E,        N,       R,        O,      R,       R,         R),
        ApplicationStatus.DECLINE:           (R,        R,       N,        N,      N,       N,         E),
        ApplicationStatus.APPROVED:          (R,        N,       R,        O,      R,       R,         R),
    }.items()
}
# fmt: on

CONFIDENCE_RANGE = (0, 100)

RULE_PHRASES = {
    FieldRule.REQUIRED: "populated",
    FieldRule.OPTIONAL: "any value",
    FieldRule.EMPTY: "an empty list",
    FieldRule.NULL: "null",
}


def check_rule(value: Any, rule: FieldRule) -> bool:
    """Return True when ``value`` satisfies ``rule``."""
    if rule is FieldRule.OPTIONAL:
        return True
    if rule is FieldRule.NULL:
        return value is None
    if rule is FieldRule.EMPTY:
        return value == []
    # REQUIRED
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return len(value) > 0


def find_violations(candidate: DecisionCandidate) -> list[FieldViolation]:
    """Collect every contract violation of a candidate.

    Args:
        candidate: Structurally valid answer.

    Returns:
        Violations in check order; empty when the candidate is acceptable.
    """
    violations = []

    try:
        status = ApplicationStatus(candidate.application_status)
    except ValueError:
        allowed = ", ".join(s.value for s in ApplicationStatus)
        violations.append(
            FieldViolation(
                "application_status",
                "enum",
                f"{candidate.application_status!r} is not one of: {allowed}",
            )
        )
        status = None

    low, high = CONFIDENCE_RANGE
    if not low <= candidate.application_status_confidence <= high:
        violations.append(
            FieldViolation(
                "application_status_confidence",
                "range",
                f"{candidate.application_status_confidence} is outside [{low}, {high}]",
            )
        )

    if not candidate.analysis.strip():
        violations.append(FieldViolation("analysis", FieldRule.REQUIRED.value, "analysis is empty"))

    if status is None:
        return violations

    for field, rule in STATUS_RULES[status].items():
        value = getattr(candidate, field)
        if not check_rule(value, rule):
            violations.append(
                FieldViolation(
                    field,
                    rule.value,
                    f"must be {RULE_PHRASES[rule]} when status is {status.value}",
                )
            )

    return violations


def enforce(candidate: DecisionCandidate) -> StructuredDecision:
    """Accept a candidate as a StructuredDecision or reject it.

    Args:
        candidate: Output of the parsing stage.

    Returns:
        The status-specific StructuredDecision variant.

    Raises:
        ContractViolation: The candidate breaks at least one rule.
    """
    violations = find_violations(candidate)
    if violations:
        logger.warning(
            "Decision rejected (status=%s): %s",
            candidate.application_status,
            ", ".join(v.field for v in violations),
        )
        raise ContractViolation(violations, candidate)

    try:
        return DECISION_ADAPTER.validate_python(candidate.model_dump())
    except SchemaError as exc:
        violations = [
            FieldViolation(".".join(str(p) for p in err["loc"][1:]) or "decision", "schema", err["msg"])
            for err in exc.errors()
        ]
        logger.warning("Decision rejected by schema: %s", ", ".join(v.field for v in violations))
        raise ContractViolation(violations, candidate) from exc
