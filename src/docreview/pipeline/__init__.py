"""Pipeline stages for the Document Review Pipeline.

Deterministic Stages:
1. stage_normalize - Uploaded file to content block
2. stage_assemble - Content blocks to ordered, cache-aware request
3. stage_parse - Raw answer to decision candidate
4. stage_enforce - Candidate to status-checked decision

External Stage:
- stage_invoke - Single call to the reasoning service

The orchestrator composes all stages behind one review call.
"""

from .orchestrator import ReviewPipeline, group_by_category
from .stage_assemble import assemble
from .stage_enforce import STATUS_RULES, FieldRule, enforce, find_violations
from .stage_invoke import ReasoningInvoker, classify_error
from .stage_normalize import (
    MediaResolution,
    check_document_size,
    normalize,
    resolve_media_type,
)
from .stage_parse import parse, strip_code_fence

__all__ = [
    # Normalize
    "MediaResolution",
    "check_document_size",
    "normalize",
    "resolve_media_type",
    # Assemble
    "assemble",
    # Invoke
    "ReasoningInvoker",
    "classify_error",
    # Parse
    "parse",
    "strip_code_fence",
    # Enforce
    "FieldRule",
    "STATUS_RULES",
    "enforce",
    "find_violations",
    # Orchestrate
    "ReviewPipeline",
    "group_by_category",
]
