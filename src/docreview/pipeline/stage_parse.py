"""Parsing Stage - Deserialize the reasoning service's answer.

Strips one optional fenced code block wrapper, then deserializes the JSON
decision into a DecisionCandidate. There is no partial recovery: anything
that does not deserialize is a ParseError carrying the raw text.
"""

import json
import logging
import re

from pydantic import ValidationError as SchemaError

from docreview.errors import ParseError
from docreview.models import DecisionCandidate

logger = logging.getLogger(__name__)

# ```json ... ``` or ``` ... ``` around the whole answer
CODE_FENCE_PATTERN = re.compile(r"^```[\w+-]*[ \t]*\n?(?P<body>.*?)\n?```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove a single fenced code block wrapping the whole text."""
    stripped = text.strip()
    match = CODE_FENCE_PATTERN.match(stripped)
    if match:
        return match.group("body").strip()
    return stripped


def parse(raw_text: str) -> DecisionCandidate:
    """Deserialize the raw answer into a decision candidate.

    Args:
        raw_text: Text returned by the reasoning service.

    Returns:
        DecisionCandidate with structurally valid fields.

    Raises:
        ParseError: The text is not a JSON object of the decision shape.
    """
    body = strip_code_fence(raw_text)

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        logger.warning("Reasoning service answer is not valid JSON: %s", exc)
        logger.debug("Unparseable answer: %s", raw_text)
        raise ParseError(
            "Failed to parse AI response as JSON. The model may have returned invalid JSON.",
            raw_text=raw_text,
        ) from exc

    if not isinstance(payload, dict):
        logger.warning("Reasoning service answer is JSON %s, not an object", type(payload).__name__)
        raise ParseError("AI response is not a JSON object", raw_text=raw_text)

    try:
        return DecisionCandidate.model_validate(payload)
    except SchemaError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        logger.warning("Reasoning service answer has malformed fields: %s", ", ".join(fields))
        raise ParseError(
            f"AI response does not match the decision schema: {', '.join(fields)}",
            raw_text=raw_text,
        ) from exc
