"""Default instructions and criteria text.

The pipeline receives these as an injected dependency. They come from the
files named in settings, or from the copies packaged with docreview.
"""

from importlib import resources
from pathlib import Path
from typing import Optional

from docreview.config import Settings, settings
from docreview.errors import ValidationError
from docreview.models import BaseIRModel

PACKAGED_INSTRUCTIONS = "instructions.md"
PACKAGED_CRITERIA = "criteria.md"


class ReviewDefaults(BaseIRModel):
    """Instructions and reference criteria used when a call does not override them."""

    instructions: str
    criteria: str


def _read_packaged(name: str) -> str:
    return resources.files("docreview.prompts").joinpath(name).read_text(encoding="utf-8")


def _read_override(path: str, field: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ValidationError(f"Could not read {field} file: {path}", field=field) from exc


def load_defaults(config: Optional[Settings] = None) -> ReviewDefaults:
    """Load default instructions and criteria.

    Args:
        config: Settings naming optional override files.

    Raises:
        ValidationError: A configured override file cannot be read.
    """
    config = config or settings

    if config.instructions_path:
        instructions = _read_override(config.instructions_path, "instructions_path")
    else:
        instructions = _read_packaged(PACKAGED_INSTRUCTIONS)

    if config.criteria_path:
        criteria = _read_override(config.criteria_path, "criteria_path")
    else:
        criteria = _read_packaged(PACKAGED_CRITERIA)

    return ReviewDefaults(instructions=instructions, criteria=criteria)
