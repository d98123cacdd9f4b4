"""Tests for settings, Vertex target resolution and default texts."""

import pytest

from docreview.config import Settings, resolve_vertex_target
from docreview.defaults import ReviewDefaults, load_defaults
from docreview.errors import ValidationError


class TestResolveVertexTarget:
    """Tests for resolve_vertex_target()."""

    def test_project_from_credentials_file(self, test_settings):
        assert resolve_vertex_target(test_settings) == ("test-project", "us-east5")

    def test_explicit_project_wins(self, test_settings):
        config = test_settings.model_copy(update={"project_id": "other", "region": "europe-west1"})
        assert resolve_vertex_target(config) == ("other", "europe-west1")

    def test_missing_credentials(self):
        config = Settings(_env_file=None, google_application_credentials=None)
        with pytest.raises(ValidationError) as exc_info:
            resolve_vertex_target(config)
        assert exc_info.value.field == "google_application_credentials"

    def test_unreadable_credentials(self, tmp_path):
        config = Settings(
            _env_file=None,
            google_application_credentials=str(tmp_path / "missing.json"),
            project_id=None,
        )
        with pytest.raises(ValidationError) as exc_info:
            resolve_vertex_target(config)
        assert exc_info.value.field == "project_id"

    def test_credentials_without_project(self, tmp_path):
        path = tmp_path / "sa.json"
        path.write_text('{"type": "service_account"}')
        config = Settings(_env_file=None, google_application_credentials=str(path), project_id=None)
        with pytest.raises(ValidationError, match="project_id"):
            resolve_vertex_target(config)


class TestSettings:
    """Tests for environment-driven settings."""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("REGION", "us-central1")
        monkeypatch.setenv("MAX_FILE_SIZE_BYTES", "1024")
        monkeypatch.setenv("REJECT_UNKNOWN_MEDIA_TYPES", "true")
        config = Settings(_env_file=None)

        assert config.region == "us-central1"
        assert config.max_file_size_bytes == 1024
        assert config.reject_unknown_media_types is True


class TestLoadDefaults:
    """Tests for load_defaults()."""

    def test_packaged_defaults(self, test_settings):
        """Packaged texts carry the status set and the criteria matrix."""
        defaults = load_defaults(test_settings)

        assert isinstance(defaults, ReviewDefaults)
        for status in ("missing_documents", "admin_review", "provider_review", "decline", "approved"):
            assert status in defaults.instructions
        assert "qualifying_criteria" in defaults.instructions
        assert defaults.criteria.strip()

    def test_override_files(self, test_settings, tmp_path):
        instructions = tmp_path / "instructions.md"
        instructions.write_text("Custom instructions")
        criteria = tmp_path / "criteria.md"
        criteria.write_text("Custom criteria")
        config = test_settings.model_copy(
            update={"instructions_path": str(instructions), "criteria_path": str(criteria)}
        )

        defaults = load_defaults(config)

        assert defaults.instructions == "Custom instructions"
        assert defaults.criteria == "Custom criteria"

    def test_unreadable_override(self, test_settings, tmp_path):
        config = test_settings.model_copy(update={"criteria_path": str(tmp_path / "nope.md")})
        with pytest.raises(ValidationError) as exc_info:
            load_defaults(config)
        assert exc_info.value.field == "criteria_path"
