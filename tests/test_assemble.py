"""Tests for payload assembly stage."""

import pytest

from docreview.models import (
    DocumentBlock,
    DocumentCategory,
    ImageBlock,
    MediaType,
    PatientContext,
    TextBlock,
)
from docreview.pipeline.stage_assemble import (
    ANCHOR_TEXT,
    FINAL_INSTRUCTION,
    INSTRUCTIONS_HEADING,
    PATIENT_CONTEXT_HEADING,
    REFERENCE_HEADING,
    assemble,
)


@pytest.fixture
def documents():
    """One block per category, plus a second medical record."""
    return {
        DocumentCategory.IDENTITY_PROOF: [ImageBlock(media_type=MediaType.PNG, data="aWQ=")],
        DocumentCategory.INTAKE: [TextBlock(body="# Intake Document: intake.json\n\n{}")],
        DocumentCategory.MEDICAL_RECORD: [
            DocumentBlock(data="cmVjb3JkMQ=="),
            DocumentBlock(data="cmVjb3JkMg=="),
        ],
    }


class TestAssemble:
    """Tests for block ordering."""

    def test_full_order(self, documents):
        """Blocks follow the fixed order regardless of mapping order."""
        request = assemble(
            "Criteria text",
            "Instructions text",
            PatientContext(name="Jane Smith", state="FL", age="52"),
            documents,
        )
        blocks = request.blocks

        assert len(blocks) == 9
        assert blocks[0].body == f"{REFERENCE_HEADING}\n\nCriteria text"
        assert blocks[1].body == ANCHOR_TEXT
        assert blocks[2].body == f"{INSTRUCTIONS_HEADING}\n\nInstructions text"
        assert blocks[3].body == (
            f"{PATIENT_CONTEXT_HEADING}\n\nPatient Name: Jane Smith\nState: FL\nAge: 52"
        )
        assert blocks[4].body.startswith("# Intake Document")
        assert blocks[5].data == "cmVjb3JkMQ=="
        assert blocks[6].data == "cmVjb3JkMg=="
        assert isinstance(blocks[7], ImageBlock)
        assert blocks[8].body == FINAL_INSTRUCTION

    def test_patient_context_omitted_when_empty(self, documents):
        """No patient context block when no field is present."""
        request = assemble("Criteria", "Instructions", PatientContext(), documents)
        bodies = [b.body for b in request.blocks if isinstance(b, TextBlock)]

        assert not any(body.startswith(PATIENT_CONTEXT_HEADING) for body in bodies)
        assert len(request.blocks) == 8

    def test_partial_patient_context(self):
        """Only populated patient fields are rendered."""
        request = assemble("Criteria", "Instructions", PatientContext(state="TX"), {})
        assert request.blocks[3].body == f"{PATIENT_CONTEXT_HEADING}\n\nState: TX"

    def test_cached_prefix(self, documents):
        """Every cached block precedes every non-cached block; reference is first."""
        request = assemble("Criteria", "Instructions", PatientContext(name="A"), documents)
        flags = [b.cache for b in request.blocks]

        assert flags[0] is True
        assert request.cached_prefix_length == 1
        assert not any(flags[1:])

    def test_anchor_follows_reference_uncached(self, documents):
        """The anchor block directly follows the cached reference."""
        request = assemble("Criteria", "Instructions", PatientContext(), documents)
        assert request.blocks[1].body == ANCHOR_TEXT
        assert request.blocks[1].cache is False

    def test_pdf_reference(self):
        """A binary reference is sent as a cached document block."""
        reference = DocumentBlock(data="Y3JpdGVyaWE=")
        request = assemble(reference, "Instructions", PatientContext(), {})

        assert isinstance(request.blocks[0], DocumentBlock)
        assert request.blocks[0].cache is True
        assert reference.cache is False

    def test_document_cache_flags_cleared(self):
        """Uploaded blocks never extend the cached prefix."""
        cached_upload = DocumentBlock(data="eA==", cache=True)
        request = assemble(
            "Criteria", "Instructions", PatientContext(), {DocumentCategory.INTAKE: [cached_upload]}
        )
        assert request.cached_prefix_length == 1
        assert request.blocks[3].cache is False

    def test_no_deduplication(self):
        """Identical uploads are both kept."""
        block = DocumentBlock(data="c2FtZQ==")
        request = assemble(
            "Criteria",
            "Instructions",
            PatientContext(),
            {DocumentCategory.MEDICAL_RECORD: [block, block]},
        )
        assert len(request.blocks) == 6

    def test_deterministic(self, documents):
        """Same inputs produce the same request."""
        context = PatientContext(name="A", age="40")
        first = assemble("Criteria", "Instructions", context, documents)
        second = assemble("Criteria", "Instructions", context, documents)
        assert first == second


class TestToMessages:
    """Tests for the service message shape."""

    def test_single_user_message(self, documents):
        request = assemble("Criteria", "Instructions", PatientContext(), documents)
        messages = request.to_messages()

        assert len(messages) == 1
        assert messages[0]["role"] == "user"
        content = messages[0]["content"]
        assert content[0]["cache_control"] == {"type": "ephemeral"}
        assert "cache_control" not in content[1]

    def test_block_shapes(self):
        image = ImageBlock(media_type=MediaType.JPEG, data="aW1n").to_api()
        document = DocumentBlock(data="cGRm").to_api()
        text = TextBlock(body="hello").to_api()

        assert image == {
            "type": "image",
            "source": {"type": "base64", "media_type": "image/jpeg", "data": "aW1n"},
        }
        assert document["source"]["media_type"] == "application/pdf"
        assert document["type"] == "document"
        assert text == {"type": "text", "text": "hello"}
