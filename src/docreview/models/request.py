"""Request, invocation and result models."""

from typing import Any, Optional

from pydantic import Field

from .base import BaseIRModel
from .block import ContentBlock
from .decision import StructuredDecision
from .document import PatientContext


class ReviewContext(BaseIRModel):
    """Per-call context supplied by the caller.

    ``instructions`` and ``criteria`` override the configured defaults when
    set; ``model`` overrides the configured model identifier.
    """

    patient: PatientContext = Field(default_factory=PatientContext)
    instructions: Optional[str] = None
    criteria: Optional[str] = None
    model: Optional[str] = None


class ReviewRequest(BaseIRModel):
    """
    Ordered payload for one reasoning-service call.

    Cached blocks always form a contiguous prefix of ``blocks``.
    """

    blocks: list[ContentBlock] = Field(..., min_length=1)
    instructions: str
    patient_context: PatientContext = Field(default_factory=PatientContext)

    @property
    def cached_prefix_length(self) -> int:
        """Number of leading blocks marked for caching."""
        count = 0
        for block in self.blocks:
            if not block.cache:
                break
            count += 1
        return count

    def to_messages(self) -> list[dict[str, Any]]:
        """Build the single-turn message list for the reasoning service."""
        return [
            {
                "role": "user",
                "content": [block.to_api() for block in self.blocks],
            }
        ]


class UsageStats(BaseIRModel):
    """Token accounting reported by the reasoning service. Diagnostic only."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0

    @classmethod
    def from_api(cls, usage: Any) -> "UsageStats":
        """Build from the service's usage object; absent counters are zero."""
        if usage is None:
            return cls()
        return cls(
            input_tokens=getattr(usage, "input_tokens", None) or 0,
            output_tokens=getattr(usage, "output_tokens", None) or 0,
            cache_creation_input_tokens=getattr(usage, "cache_creation_input_tokens", None) or 0,
            cache_read_input_tokens=getattr(usage, "cache_read_input_tokens", None) or 0,
        )

    @property
    def cache_hit(self) -> bool:
        return self.cache_read_input_tokens > 0

    @property
    def cache_created(self) -> bool:
        return self.cache_creation_input_tokens > 0

    @property
    def cache_status(self) -> str:
        """One of ``hit``, ``created`` or ``miss``."""
        if self.cache_hit:
            return "hit"
        if self.cache_created:
            return "created"
        return "miss"


class InvocationResult(BaseIRModel):
    """Raw answer of one reasoning-service call."""

    raw_text: str
    usage: UsageStats = Field(default_factory=UsageStats)
    model: Optional[str] = None
    stop_reason: Optional[str] = None


class ReviewResult(BaseIRModel):
    """A validated decision plus diagnostic metadata."""

    decision: StructuredDecision
    usage: UsageStats = Field(default_factory=UsageStats)
    model: Optional[str] = None
    stop_reason: Optional[str] = None
