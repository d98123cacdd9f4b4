"""Pytest configuration and fixtures."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from docreview.config import Settings
from docreview.defaults import ReviewDefaults
from docreview.models import DocumentCategory, InputDocument
from docreview.pipeline import ReasoningInvoker, ReviewPipeline

MODEL = "claude-sonnet-4-5"

_COMMON = {
    "application_status_reasoning": "Reasoning for the assigned status.",
    "application_status_confidence": 90,
    "warnings": [],
    "patient_profile": "57-year-old male from FL applying for a permanent placard.",
    "admin_summary": "Summary for the admin dashboard.",
    "analysis": "<h3>Patient Profile</h3><p>Details.</p>",
}

_NO_PROVIDER = {
    "provider_recommendations": None,
    "provider_patient_followup": None,
    "provider_summary": None,
    "provider_visit_note": None,
}

_PROVIDER = {
    "provider_recommendations": ["Approve for permanent permit (4 years)"],
    "provider_patient_followup": None,
    "provider_summary": "Patient with documented permanent wheelchair use.",
    "provider_visit_note": "CHART NOTE: DISABILITY PLACARD EVALUATION\nSUBJECTIVE: ...",
}

DECISION_PAYLOADS = {
    "missing_documents": {
        **_COMMON,
        **_NO_PROVIDER,
        "application_status": "missing_documents",
        "qualifying_criteria": [],
        "admin_recommendations": ["Request knee X-rays, MRI, or orthopedic notes"],
        "admin_patient_followup": "The lab work you sent does not document your knee condition.",
    },
    "admin_review": {
        **_COMMON,
        **_NO_PROVIDER,
        "application_status": "admin_review",
        "qualifying_criteria": [],
        "admin_recommendations": ["Decide whether to request updated documentation"],
        "admin_patient_followup": None,
    },
    "provider_review": {
        **_COMMON,
        **_PROVIDER,
        "application_status": "provider_review",
        "qualifying_criteria": ["Cannot walk 200 feet without stopping to rest (FL 320.0848)"],
        "admin_recommendations": [],
        "admin_patient_followup": None,
    },
    "decline": {
        **_COMMON,
        **_NO_PROVIDER,
        "application_status": "decline",
        "qualifying_criteria": [],
        "admin_recommendations": ["Decline application"],
        "admin_patient_followup": "Seasonal allergies do not meet Texas requirements.",
    },
    "approved": {
        **_COMMON,
        **_PROVIDER,
        "application_status": "approved",
        "qualifying_criteria": ["Cannot walk without a wheelchair (FL 320.0848)"],
        "admin_recommendations": ["Fast-track to provider signature"],
        "admin_patient_followup": None,
    },
}


@pytest.fixture
def decision_payload():
    """Return a fresh, valid decision payload for a status."""

    def _make(status: str, **overrides) -> dict:
        payload = json.loads(json.dumps(DECISION_PAYLOADS[status]))
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def make_document():
    """Factory for InputDocument instances."""

    def _make(
        filename: str = "record.pdf",
        category: DocumentCategory = DocumentCategory.MEDICAL_RECORD,
        declared_media_type=None,
        data: bytes = b"%PDF-1.4 test content",
    ) -> InputDocument:
        return InputDocument(
            category=category,
            filename=filename,
            declared_media_type=declared_media_type,
            data=data,
        )

    return _make


@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated from the environment."""
    credentials = tmp_path / "service-account.json"
    credentials.write_text(json.dumps({"project_id": "test-project"}))
    return Settings(
        _env_file=None,
        google_application_credentials=str(credentials),
        project_id=None,
        region="us-east5",
        model=MODEL,
        max_file_size_bytes=3 * 1024 * 1024,
    )


@pytest.fixture
def review_defaults():
    """Small fixed defaults."""
    return ReviewDefaults(instructions="Review the files.", criteria="Criteria matrix.")


def make_response(text: str, usage=None, stop_reason: str = "end_turn"):
    """Build an object shaped like a reasoning-service response."""
    if usage is None:
        usage = SimpleNamespace(
            input_tokens=1200,
            output_tokens=300,
            cache_creation_input_tokens=None,
            cache_read_input_tokens=1024,
        )
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)],
        usage=usage,
        model=MODEL,
        stop_reason=stop_reason,
    )


@pytest.fixture
def mock_client():
    """Synchronous client mock returning an approved decision."""
    client = MagicMock()
    client.messages.create.return_value = make_response(
        json.dumps(DECISION_PAYLOADS["approved"])
    )
    return client


@pytest.fixture
def pipeline(test_settings, mock_client, review_defaults):
    """Pipeline wired to the mock client."""
    invoker = ReasoningInvoker(test_settings, client=mock_client)
    return ReviewPipeline(test_settings, invoker=invoker, defaults=review_defaults)
