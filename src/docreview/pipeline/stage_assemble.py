"""Assembly Stage - Order content blocks into a review request.

The block order is fixed:

1. Reference criteria (cached)
2. Anchor text explaining the reference (not cached)
3. Instructions
4. Patient context, when any field is present
5. Intake documents, in upload order
6. Medical records, in upload order
7. Identity documents, in upload order
8. Final output instruction

The reasoning service caches prefix-stable content only, so the reference
must be the first block and the only cached one. Blocks are never reordered
or deduplicated based on content.
"""

from collections.abc import Mapping, Sequence
from typing import Union

from docreview.models import (
    ContentBlock,
    DocumentBlock,
    DocumentCategory,
    PatientContext,
    ReviewRequest,
    TextBlock,
)

REFERENCE_HEADING = "# Reference: Qualification Criteria Matrix"
INSTRUCTIONS_HEADING = "# System Instructions"
PATIENT_CONTEXT_HEADING = "# Patient Context"

ANCHOR_TEXT = (
    "Above is the reference qualification criteria guide that you should use "
    "as context for reviewing the following files."
)

FINAL_INSTRUCTION = (
    "Please review the uploaded files (intake form, identity document, and "
    "medical records) and return ONLY valid JSON matching the specified schema. "
    "Do not include markdown code blocks or any text before or after the JSON."
)

Reference = Union[str, TextBlock, DocumentBlock]


def reference_block(reference: Reference) -> ContentBlock:
    """Build the cached reference block.

    Text references are wrapped under a heading; a PDF reference is sent as
    a document block.
    """
    if isinstance(reference, DocumentBlock):
        return reference.model_copy(update={"cache": True})
    body = reference.body if isinstance(reference, TextBlock) else reference
    return TextBlock(body=f"{REFERENCE_HEADING}\n\n{body}", cache=True)


def assemble(
    reference: Reference,
    instructions: str,
    patient_context: PatientContext,
    documents: Mapping[DocumentCategory, Sequence[ContentBlock]],
) -> ReviewRequest:
    """Assemble the ordered review request.

    Args:
        reference: Criteria material, as text or a PDF document block.
        instructions: Active instructions text.
        patient_context: Patient name/state/age; omitted when all are empty.
        documents: Normalized blocks per upload category, in upload order.

    Returns:
        ReviewRequest with a single cached block at the front.
    """
    blocks: list[ContentBlock] = [
        reference_block(reference),
        TextBlock(body=ANCHOR_TEXT),
        TextBlock(body=f"{INSTRUCTIONS_HEADING}\n\n{instructions}"),
    ]

    if not patient_context.is_empty:
        blocks.append(
            TextBlock(body=f"{PATIENT_CONTEXT_HEADING}\n\n{patient_context.render()}")
        )

    for category in DocumentCategory:
        for block in documents.get(category, ()):
            # Only the reference may carry a cache marker
            blocks.append(block.model_copy(update={"cache": False}) if block.cache else block)

    blocks.append(TextBlock(body=FINAL_INSTRUCTION))

    return ReviewRequest(
        blocks=blocks,
        instructions=instructions,
        patient_context=patient_context,
    )
