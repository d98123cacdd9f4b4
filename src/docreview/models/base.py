"""Base models and common types for the Document Review Pipeline."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class DocumentCategory(str, Enum):
    """Upload slot a document arrived in.

    Declaration order is the order documents appear in the review payload.
    """

    INTAKE = "intake"
    MEDICAL_RECORD = "medical_record"
    IDENTITY_PROOF = "identity_proof"

    @property
    def label(self) -> str:
        """Heading used when the document is inlined as text."""
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    DocumentCategory.INTAKE: "Intake Document",
    DocumentCategory.MEDICAL_RECORD: "Medical Record",
    DocumentCategory.IDENTITY_PROOF: "ID Document",
}


class ApplicationStatus(str, Enum):
    """Terminal classification of an application review."""

    MISSING_DOCUMENTS = "missing_documents"
    ADMIN_REVIEW = "admin_review"
    PROVIDER_REVIEW = "provider_review"
    DECLINE = "decline"
    APPROVED = "approved"


class MediaType(str, Enum):
    """Media types the reasoning service accepts as binary content."""

    JPEG = "image/jpeg"
    PNG = "image/png"
    GIF = "image/gif"
    WEBP = "image/webp"
    PDF = "application/pdf"

    @property
    def is_image(self) -> bool:
        return self.value.startswith("image/")




class BaseIRModel(BaseModel):
    """Base class for pipeline IR models.

    Models are immutable: every stage produces new values instead of
    mutating its input.
    """

    model_config = ConfigDict(frozen=True)
