"""Pipeline Orchestrator - One review call from uploads to a trusted decision.

Composes the stages:

    validate → normalize → assemble → invoke → parse → enforce

Every pre-flight check runs before the network call. The call is
all-or-nothing: it returns a ReviewResult or raises a PipelineError.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import Sequence
from typing import Optional

from docreview.config import SUPPORTED_MODELS, Settings, settings
from docreview.defaults import ReviewDefaults, load_defaults
from docreview.errors import ValidationError
from docreview.models import (
    ContentBlock,
    DocumentCategory,
    InputDocument,
    InvocationResult,
    ReviewContext,
    ReviewRequest,
    ReviewResult,
)
from docreview.pipeline.stage_assemble import assemble
from docreview.pipeline.stage_enforce import enforce
from docreview.pipeline.stage_invoke import ReasoningInvoker
from docreview.pipeline.stage_normalize import (
    check_document_size,
    check_media_type,
    normalize,
)
from docreview.pipeline.stage_parse import parse

logger = logging.getLogger(__name__)


def group_by_category(
    documents: Sequence[InputDocument],
) -> dict[DocumentCategory, list[InputDocument]]:
    """Group documents per upload category, keeping upload order."""
    grouped: dict[DocumentCategory, list[InputDocument]] = {c: [] for c in DocumentCategory}
    for doc in documents:
        grouped[doc.category].append(doc)
    return grouped


class ReviewPipeline:
    """Runs the document review pipeline.

    Holds only injected collaborators; concurrent calls share no mutable
    state beyond the network client.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        invoker: Optional[ReasoningInvoker] = None,
        defaults: Optional[ReviewDefaults] = None,
    ):
        """Initialize pipeline.

        Args:
            config: Settings (default: module settings).
            invoker: Reasoning invoker (default: built from settings).
            defaults: Default instructions and criteria (default: loaded from settings).
        """
        self.config = config or settings
        self.invoker = invoker or ReasoningInvoker(self.config)
        self.defaults = defaults or load_defaults(self.config)

    def _resolve_model(self, context: ReviewContext) -> str:
        model = context.model or self.config.model
        if model not in SUPPORTED_MODELS:
            raise ValidationError(
                f"Unsupported model {model!r}; accepted: {', '.join(sorted(SUPPORTED_MODELS))}",
                field="model",
            )
        return model

    def validate(self, documents: Sequence[InputDocument], context: ReviewContext) -> str:
        """Run pre-flight checks and return the model to call.

        Raises:
            ValidationError: unsupported model, oversized or untyped file.
        """
        model = self._resolve_model(context)
        for doc in documents:
            try:
                check_document_size(doc, self.config.max_file_size_bytes)
                if self.config.reject_unknown_media_types:
                    check_media_type(doc)
            except ValidationError as exc:
                logger.warning("Rejected upload in %s: %s", doc.category.value, exc.message)
                raise
        return model

    def build_request(
        self,
        blocks: dict[DocumentCategory, list[ContentBlock]],
        context: ReviewContext,
    ) -> ReviewRequest:
        """Assemble the request from normalized blocks and the active text."""
        return assemble(
            reference=context.criteria or self.defaults.criteria,
            instructions=context.instructions or self.defaults.instructions,
            patient_context=context.patient,
            documents=blocks,
        )

    def _finish(self, invocation: InvocationResult) -> ReviewResult:
        candidate = parse(invocation.raw_text)
        decision = enforce(candidate)
        logger.info(
            "Review complete: status=%s confidence=%d",
            decision.application_status,
            decision.application_status_confidence,
        )
        return ReviewResult(
            decision=decision,
            usage=invocation.usage,
            model=invocation.model,
            stop_reason=invocation.stop_reason,
        )

    def _log_start(self, documents: Sequence[InputDocument]) -> None:
        counts = Counter(doc.category.value for doc in documents)
        logger.info(
            "Starting review: intake=%d medical_record=%d identity_proof=%d",
            counts[DocumentCategory.INTAKE.value],
            counts[DocumentCategory.MEDICAL_RECORD.value],
            counts[DocumentCategory.IDENTITY_PROOF.value],
        )

    def review(
        self,
        documents: Sequence[InputDocument],
        context: Optional[ReviewContext] = None,
        timeout: Optional[float] = None,
    ) -> ReviewResult:
        """Review a submission.

        Args:
            documents: Uploaded files, in upload order.
            context: Patient context and per-call overrides.
            timeout: Seconds to wait for the reasoning service.

        Returns:
            ReviewResult with the validated decision and token usage.

        Raises:
            PipelineError: one of the kinds in docreview.errors.
        """
        context = context or ReviewContext()
        self._log_start(documents)

        model = self.validate(documents, context)
        # Resolve credentials before any work that leads to a network call
        _ = self.invoker.client

        blocks = {
            category: [normalize(doc) for doc in docs]
            for category, docs in group_by_category(documents).items()
        }
        request = self.build_request(blocks, context)

        invocation = self.invoker.invoke(request, model, timeout=timeout)
        return self._finish(invocation)

    async def _anormalize(self, doc: InputDocument) -> ContentBlock:
        if doc.size > self.config.offload_threshold_bytes:
            return await asyncio.to_thread(normalize, doc)
        return normalize(doc)

    async def areview(
        self,
        documents: Sequence[InputDocument],
        context: Optional[ReviewContext] = None,
        timeout: Optional[float] = None,
    ) -> ReviewResult:
        """Async variant of :meth:`review`.

        Large files are normalized in a worker thread. Cancelling the task
        cancels the in-flight service call; nothing is parsed afterwards.
        """
        context = context or ReviewContext()
        self._log_start(documents)

        model = self.validate(documents, context)
        _ = self.invoker.async_client

        blocks = {}
        for category, docs in group_by_category(documents).items():
            blocks[category] = [await self._anormalize(doc) for doc in docs]
        request = self.build_request(blocks, context)

        invocation = await self.invoker.ainvoke(request, model, timeout=timeout)
        return self._finish(invocation)
