"""IR (Intermediate Representation) models for the Document Review Pipeline.

This module defines the Pydantic models that represent data flowing through
the pipeline stages. All models are immutable and JSON-serializable.

Key Design Principles:
1. Stateless stages: no model is mutated after construction
2. Total normalization: every uploaded file maps to exactly one block
3. Trusted output: a StructuredDecision variant encodes its status rules

Model Hierarchy:
- InputDocument → ContentBlock (Image | Document | Text)
- ContentBlocks + instructions + PatientContext → ReviewRequest
- raw answer → DecisionCandidate → StructuredDecision
"""

from .base import (
    ApplicationStatus,
    BaseIRModel,
    DocumentCategory,
    MediaType,
)
from .block import (
    ContentBlock,
    DocumentBlock,
    ImageBlock,
    TextBlock,
)
from .decision import (
    DECISION_ADAPTER,
    AdminReviewDecision,
    ApprovedDecision,
    DecisionCandidate,
    DeclineDecision,
    MissingDocumentsDecision,
    ProviderReviewDecision,
    StructuredDecision,
)
from .document import (
    InputDocument,
    PatientContext,
    file_extension,
)
from .request import (
    InvocationResult,
    ReviewContext,
    ReviewRequest,
    ReviewResult,
    UsageStats,
)

__all__ = [
    # Base types
    "ApplicationStatus",
    "BaseIRModel",
    "DocumentCategory",
    "MediaType",
    # Documents
    "InputDocument",
    "file_extension",
    "PatientContext",
    # Blocks
    "ContentBlock",
    "DocumentBlock",
    "ImageBlock",
    "TextBlock",
    # Requests
    "InvocationResult",
    "ReviewContext",
    "ReviewRequest",
    "ReviewResult",
    "UsageStats",
    # Decisions
    "DECISION_ADAPTER",
    "AdminReviewDecision",
    "ApprovedDecision",
    "DecisionCandidate",
    "DeclineDecision",
    "MissingDocumentsDecision",
    "ProviderReviewDecision",
    "StructuredDecision",
]
