"""Decision IR models.

Two layers:

- ``DecisionCandidate`` is the structurally valid answer of the reasoning
  service. Its types are right but nothing about status/field consistency
  has been checked.
- ``StructuredDecision`` is a discriminated union keyed by
  ``application_status``. Each variant's field types require or forbid the
  admin/provider fields for that status, so an instance can be trusted
  without re-checking.

Field names are the wire keys of the JSON decision payload.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import ConfigDict, Field, TypeAdapter

from .base import ApplicationStatus, BaseIRModel


class DecisionCandidate(BaseIRModel):
    """Deserialized but unvalidated answer of the reasoning service.

    Strict: values of the wrong JSON type are rejected, never coerced.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", strict=True)

    application_status: str
    application_status_reasoning: str
    application_status_confidence: int

    warnings: list[str] = Field(default_factory=list)
    qualifying_criteria: list[str] = Field(default_factory=list)

    admin_recommendations: Optional[list[str]] = None
    admin_patient_followup: Optional[str] = None
    provider_recommendations: Optional[list[str]] = None
    provider_patient_followup: Optional[str] = None

    patient_profile: str
    admin_summary: str
    provider_summary: Optional[str] = None
    provider_visit_note: Optional[str] = None

    analysis: str


class _DecisionBase(BaseIRModel):
    """Fields every decision carries regardless of status."""

    application_status_reasoning: str
    application_status_confidence: int = Field(..., ge=0, le=100)

    warnings: list[str] = Field(default_factory=list)
    qualifying_criteria: list[str] = Field(default_factory=list)

    patient_profile: str
    admin_summary: str

    analysis: str = Field(..., min_length=1, description="Constrained-markup narrative")

    @property
    def status(self) -> ApplicationStatus:
        return ApplicationStatus(self.application_status)


class MissingDocumentsDecision(_DecisionBase):
    """Records cannot be evaluated; the patient must send more."""

    application_status: Literal["missing_documents"]
    admin_recommendations: list[str]
    admin_patient_followup: str
    provider_recommendations: None = None
    provider_patient_followup: None = None
    provider_summary: None = None
    provider_visit_note: None = None


class AdminReviewDecision(_DecisionBase):
    """Edge case that needs human judgment before routing."""

    application_status: Literal["admin_review"]
    admin_recommendations: list[str]
    admin_patient_followup: Optional[str] = None
    provider_recommendations: None = None
    provider_patient_followup: None = None
    provider_summary: None = None
    provider_visit_note: None = None


class ProviderReviewDecision(_DecisionBase):
    """Documentation is sufficient; a physician makes the determination."""

    application_status: Literal["provider_review"]
    admin_recommendations: list[str]
    admin_patient_followup: None = None
    provider_recommendations: list[str]
    provider_patient_followup: Optional[str] = None
    provider_summary: str
    provider_visit_note: str


class DeclineDecision(_DecisionBase):
    """No pathway to approval with the documented condition."""

    application_status: Literal["decline"]
    admin_recommendations: list[str]
    admin_patient_followup: str
    provider_recommendations: None = None
    provider_patient_followup: None = None
    provider_summary: None = None
    provider_visit_note: None = None


class ApprovedDecision(_DecisionBase):
    """Clear-cut case; provider signature is a formality."""

    application_status: Literal["approved"]
    admin_recommendations: list[str]
    admin_patient_followup: None = None
    provider_recommendations: list[str]
    provider_patient_followup: Optional[str] = None
    provider_summary: str
    provider_visit_note: str


StructuredDecision = Annotated[
    Union[
        MissingDocumentsDecision,
        AdminReviewDecision,
        ProviderReviewDecision,
        DeclineDecision,
        ApprovedDecision,
    ],
    Field(discriminator="application_status"),
]

DECISION_ADAPTER: TypeAdapter[StructuredDecision] = TypeAdapter(StructuredDecision)
