"""Normalization Stage - Convert uploaded files into content blocks.

First stage of the review pipeline. Classifies each file as image, PDF or
text and produces exactly one canonical ContentBlock for it.

Media type resolution order:
1. A recognized declared media type
2. The file extension
3. Fallback to PDF (best-effort binary document)

This stage is pure; the upload size policy is applied by the orchestrator
before normalization.
"""

import base64
from dataclasses import dataclass
from typing import Optional

from docreview.errors import ValidationError
from docreview.models import (
    ContentBlock,
    DocumentBlock,
    DocumentCategory,
    ImageBlock,
    InputDocument,
    MediaType,
    TextBlock,
    file_extension,
)

# Declared media types accepted as binary content
DECLARED_BINARY_TYPES = {
    "image/jpeg": MediaType.JPEG,
    "image/jpg": MediaType.JPEG,
    "image/png": MediaType.PNG,
    "image/gif": MediaType.GIF,
    "image/webp": MediaType.WEBP,
    "application/pdf": MediaType.PDF,
}

# Declared media types inlined as text, besides text/*
DECLARED_TEXT_TYPES = frozenset({"application/json"})

EXTENSION_BINARY_TYPES = {
    "jpg": MediaType.JPEG,
    "jpeg": MediaType.JPEG,
    "png": MediaType.PNG,
    "gif": MediaType.GIF,
    "webp": MediaType.WEBP,
    "pdf": MediaType.PDF,
}

EXTENSION_TEXT_TYPES = {
    "json": "application/json",
    "txt": "text/plain",
    "md": "text/markdown",
    "markdown": "text/markdown",
    "csv": "text/csv",
}

SOURCE_DECLARED = "declared"
SOURCE_EXTENSION = "extension"
SOURCE_FALLBACK = "fallback"


@dataclass(frozen=True)
class MediaResolution:
    """Outcome of media type resolution for one file."""

    media_type: str
    source: str  # "declared", "extension" or "fallback"

    @property
    def binary_type(self) -> Optional[MediaType]:
        """The binary media type, or None for text content."""
        try:
            return MediaType(self.media_type)
        except ValueError:
            return None

    @property
    def is_image(self) -> bool:
        binary = self.binary_type
        return binary is not None and binary.is_image

    @property
    def is_pdf(self) -> bool:
        return self.binary_type is MediaType.PDF

    @property
    def is_text(self) -> bool:
        return self.binary_type is None


def _normalize_declared(declared: Optional[str]) -> Optional[str]:
    """Lower-case a declared media type and drop parameters like charset."""
    if not declared:
        return None
    return declared.split(";", 1)[0].strip().lower() or None


def resolve_media_type(filename: str, declared_media_type: Optional[str] = None) -> MediaResolution:
    """Resolve the effective media type of an uploaded file.

    Args:
        filename: Original filename, used for the extension lookup.
        declared_media_type: Media type reported by the upload transport.

    Returns:
        MediaResolution naming the media type and which rule produced it.
    """
    declared = _normalize_declared(declared_media_type)
    if declared:
        if declared in DECLARED_BINARY_TYPES:
            return MediaResolution(DECLARED_BINARY_TYPES[declared].value, SOURCE_DECLARED)
        if declared.startswith("text/") or declared in DECLARED_TEXT_TYPES:
            return MediaResolution(declared, SOURCE_DECLARED)

    extension = file_extension(filename)
    if extension in EXTENSION_BINARY_TYPES:
        return MediaResolution(EXTENSION_BINARY_TYPES[extension].value, SOURCE_EXTENSION)
    if extension in EXTENSION_TEXT_TYPES:
        return MediaResolution(EXTENSION_TEXT_TYPES[extension], SOURCE_EXTENSION)

    return MediaResolution(MediaType.PDF.value, SOURCE_FALLBACK)


def resolve_document(doc: InputDocument) -> MediaResolution:
    """Resolve the media type of an InputDocument."""
    return resolve_media_type(doc.filename, doc.declared_media_type)


def text_header(category: DocumentCategory, filename: str) -> str:
    """Heading that attributes inlined text to its upload slot and file."""
    return f"# {category.label}: {filename}"


def normalize(doc: InputDocument) -> ContentBlock:
    """Convert one uploaded document into its content block.

    Text that is not valid UTF-8 is decoded lossily rather than rejected.

    Args:
        doc: The uploaded document.

    Returns:
        ImageBlock, DocumentBlock or TextBlock.
    """
    resolution = resolve_document(doc)

    if resolution.is_text:
        text = doc.data.decode("utf-8", errors="replace")
        return TextBlock(body=f"{text_header(doc.category, doc.filename)}\n\n{text}")

    encoded = base64.b64encode(doc.data).decode("ascii")
    if resolution.is_image:
        return ImageBlock(media_type=resolution.binary_type, data=encoded)
    return DocumentBlock(data=encoded)


def is_size_exempt(doc: InputDocument) -> bool:
    """Intake files typed as PDF are exempt from the size ceiling.

    "Typed" means the declared media type or the extension says PDF; the
    unknown-type fallback does not earn the exemption.
    """
    if doc.category is not DocumentCategory.INTAKE:
        return False
    resolution = resolve_document(doc)
    return resolution.is_pdf and resolution.source != SOURCE_FALLBACK


def check_document_size(doc: InputDocument, max_bytes: int) -> None:
    """Reject a document larger than ``max_bytes`` unless it is exempt.

    A document of exactly ``max_bytes`` is accepted.

    Raises:
        ValidationError: the document is over the ceiling.
    """
    if doc.size <= max_bytes or is_size_exempt(doc):
        return
    limit_mb = max_bytes / 1024 / 1024
    raise ValidationError(
        f"File {doc.filename} exceeds {limit_mb:g}MB limit. "
        f"Size: {doc.size / 1024 / 1024:.2f}MB",
        field=doc.category.value,
    )


def check_media_type(doc: InputDocument) -> None:
    """Reject a document whose media type only resolves through the fallback.

    Raises:
        ValidationError: neither the declared type nor the extension is recognized.
    """
    resolution = resolve_document(doc)
    if resolution.source == SOURCE_FALLBACK:
        raise ValidationError(
            f"File {doc.filename} has an unrecognized media type "
            f"({doc.declared_media_type or 'none declared'})",
            field=doc.category.value,
        )
