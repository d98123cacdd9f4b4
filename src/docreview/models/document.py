"""Inbound document and patient context models."""

from pathlib import Path
from typing import Optional, Union

from pydantic import Field

from .base import BaseIRModel, DocumentCategory


def file_extension(filename: str) -> str:
    """Lower-cased extension of ``filename`` without the dot, or an empty string."""
    return Path(filename).suffix.lower().lstrip(".")


class InputDocument(BaseIRModel):
    """
    One uploaded file.

    The category comes from the upload slot, not from the content. The
    declared media type is whatever the upload transport reported and may
    be missing or wrong.
    """

    category: DocumentCategory
    filename: str = Field(..., description="Original filename as uploaded")
    declared_media_type: Optional[str] = Field(
        None, description="Media type reported by the upload transport"
    )
    data: bytes = Field(..., repr=False)

    @property
    def size(self) -> int:
        """Size of the raw content in bytes."""
        return len(self.data)

    @property
    def extension(self) -> str:
        """Lower-cased extension without the dot, or an empty string."""
        return file_extension(self.filename)

    @classmethod
    def from_path(
        cls,
        path: Union[str, Path],
        category: DocumentCategory,
        declared_media_type: Optional[str] = None,
    ) -> "InputDocument":
        """Read a document from disk."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Document not found: {path}")
        return cls(
            category=category,
            filename=path.name,
            declared_media_type=declared_media_type,
            data=path.read_bytes(),
        )


class PatientContext(BaseIRModel):
    """Free-text patient details supplied alongside the upload."""

    name: Optional[str] = None
    state: Optional[str] = None
    age: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.state or self.age)

    def render(self) -> str:
        """Render the populated fields as one line each."""
        lines = []
        if self.name:
            lines.append(f"Patient Name: {self.name}")
        if self.state:
            lines.append(f"State: {self.state}")
        if self.age:
            lines.append(f"Age: {self.age}")
        return "\n".join(lines)
