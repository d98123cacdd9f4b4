"""Configuration management for the Document Review Pipeline."""

import json
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

from docreview.errors import ValidationError

SUPPORTED_MODELS = frozenset({"claude-sonnet-4-5"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Google Cloud / Vertex AI
    google_application_credentials: Optional[str] = None
    project_id: Optional[str] = None
    region: str = "us-east5"

    # Reasoning service
    model: str = "claude-sonnet-4-5"
    max_tokens: int = 4096
    request_timeout: float = 300.0

    # Upload policy
    max_file_size_bytes: int = 3 * 1024 * 1024
    reject_unknown_media_types: bool = False

    # Files above this size are normalized off the event loop
    offload_threshold_bytes: int = 1024 * 1024

    # Default text overrides
    instructions_path: Optional[str] = None
    criteria_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def resolve_vertex_target(config: Settings) -> tuple[str, str]:
    """Resolve the Vertex AI project and region for the reasoning service.

    The project id falls back to the ``project_id`` entry of the service
    account file when it is not configured explicitly.

    Raises:
        ValidationError: credentials are not configured or unreadable.
    """
    credentials_path = config.google_application_credentials
    if not credentials_path:
        raise ValidationError(
            "Server configuration error: GOOGLE_APPLICATION_CREDENTIALS is not set",
            field="google_application_credentials",
        )

    project_id = config.project_id
    if not project_id:
        try:
            service_account = json.loads(Path(credentials_path).read_text(encoding="utf-8"))
            project_id = service_account["project_id"]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise ValidationError(
                f"Could not read project_id from service account file: {credentials_path}",
                field="project_id",
            ) from exc

    return project_id, config.region


settings = Settings()
