"""Content block IR models.

A content block is the canonical unit sent to the reasoning service. Every
uploaded document becomes exactly one block.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import Field

from .base import BaseIRModel, MediaType

EPHEMERAL_CACHE = {"type": "ephemeral"}


class _BlockBase(BaseIRModel):
    """Fields shared by all content blocks."""

    cache: bool = Field(
        default=False,
        description="Mark the block as the end of a cacheable prefix",
    )

    def _with_cache_control(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self.cache:
            payload["cache_control"] = dict(EPHEMERAL_CACHE)
        return payload


class ImageBlock(_BlockBase):
    """Base64-encoded image content."""

    type: Literal["image"] = "image"
    media_type: MediaType
    data: str = Field(..., repr=False, description="Base64-encoded image bytes")

    def to_api(self) -> dict[str, Any]:
        """Serialize to the reasoning service's content-block shape."""
        return self._with_cache_control(
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": self.media_type.value,
                    "data": self.data,
                },
            }
        )


class DocumentBlock(_BlockBase):
    """Base64-encoded PDF content."""

    type: Literal["document"] = "document"
    media_type: Literal[MediaType.PDF] = MediaType.PDF
    data: str = Field(..., repr=False, description="Base64-encoded PDF bytes")

    def to_api(self) -> dict[str, Any]:
        """Serialize to the reasoning service's content-block shape."""
        return self._with_cache_control(
            {
                "type": "document",
                "source": {
                    "type": "base64",
                    "media_type": self.media_type.value,
                    "data": self.data,
                },
            }
        )


class TextBlock(_BlockBase):
    """Inline text content."""

    type: Literal["text"] = "text"
    body: str

    def to_api(self) -> dict[str, Any]:
        """Serialize to the reasoning service's content-block shape."""
        return self._with_cache_control({"type": "text", "text": self.body})


ContentBlock = Annotated[
    Union[ImageBlock, DocumentBlock, TextBlock],
    Field(discriminator="type"),
]
