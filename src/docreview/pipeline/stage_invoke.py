"""Invocation Stage - Send a review request to the reasoning service.

Uses Claude on Google Vertex AI through the Anthropic SDK. Exactly one
network call per invocation: the SDK's built-in retries are disabled and
nothing here loops. Failures are classified by status code and the
service's error type, never by message text.
"""

import logging
from typing import Any, Optional

import anthropic
from anthropic import AnthropicVertex, AsyncAnthropicVertex
from google.auth import exceptions as google_auth_exceptions

from docreview.config import Settings, resolve_vertex_target, settings
from docreview.errors import (
    AuthError,
    NotFoundError,
    PayloadTooLargeError,
    PipelineError,
    TransientError,
)
from docreview.models import InvocationResult, ReviewRequest, UsageStats

logger = logging.getLogger(__name__)

AUTH_GUIDANCE = (
    "Authentication error: check that the Google Cloud service account has the "
    "'Vertex AI User' role and that the Vertex AI API is enabled"
)

NOT_FOUND_GUIDANCE = (
    "Model not found: ensure Claude is enabled in the Vertex AI Model Garden "
    "and that the configured region supports it "
    "(us-east5, us-central1, europe-west1, europe-west4, asia-southeast1)"
)

PAYLOAD_TOO_LARGE_MESSAGE = (
    "Request too large for the reasoning service "
    "(images ~20MB, PDFs ~32MB / 100 pages, text bounded by the context window)"
)

# Exceptions raised by the SDK or its credential provider
SERVICE_ERRORS = (anthropic.APIError, google_auth_exceptions.GoogleAuthError)


def _service_error_type(body: Any) -> Optional[str]:
    """Extract the machine-readable error type from an error response body."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        return error.get("type") or error.get("status")
    return body.get("type")


def classify_error(exc: Exception, model: Optional[str] = None) -> PipelineError:
    """Translate a client or credential exception into a pipeline error.

    Args:
        exc: Exception raised while calling the reasoning service.
        model: Model identifier, for the not-found message.

    Returns:
        The PipelineError to raise in its place.
    """
    if isinstance(exc, google_auth_exceptions.TransportError):
        return TransientError(f"Could not reach the credential provider: {exc}")
    if isinstance(exc, google_auth_exceptions.GoogleAuthError):
        return AuthError(AUTH_GUIDANCE)

    if isinstance(exc, anthropic.APITimeoutError):
        return TransientError("Reasoning service request timed out")
    if isinstance(exc, anthropic.APIConnectionError):
        return TransientError("Could not connect to the reasoning service")

    if isinstance(exc, anthropic.APIStatusError):
        status = exc.status_code
        error_type = _service_error_type(exc.body)
        if status in (401, 403):
            return AuthError(AUTH_GUIDANCE)
        if status == 404:
            message = NOT_FOUND_GUIDANCE
            if model:
                message = f"{message} [model: {model}]"
            return NotFoundError(message)
        if status == 413 or error_type == "request_too_large":
            return PayloadTooLargeError(PAYLOAD_TOO_LARGE_MESSAGE)
        return TransientError(
            f"Reasoning service error (HTTP {status}, {error_type or 'unknown'})",
            status_code=status,
        )

    return TransientError(f"Reasoning service call failed: {type(exc).__name__}")


def extract_text(response: Any) -> str:
    """Concatenate the text content blocks of a service response."""
    return "".join(
        block.text for block in response.content if getattr(block, "type", None) == "text"
    )


def _to_result(response: Any) -> InvocationResult:
    usage = UsageStats.from_api(getattr(response, "usage", None))
    result = InvocationResult(
        raw_text=extract_text(response),
        usage=usage,
        model=getattr(response, "model", None),
        stop_reason=getattr(response, "stop_reason", None),
    )

    logger.info(
        "Reasoning service usage: input=%d output=%d cache_creation=%d cache_read=%d (cache %s)",
        usage.input_tokens,
        usage.output_tokens,
        usage.cache_creation_input_tokens,
        usage.cache_read_input_tokens,
        usage.cache_status,
    )
    if result.stop_reason == "max_tokens":
        logger.warning("Reasoning service answer was truncated at the max_tokens limit")
    return result


class ReasoningInvoker:
    """Calls the reasoning service for a ReviewRequest.

    Clients are created lazily from settings, or injected for tests.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        client: Optional[Any] = None,
        async_client: Optional[Any] = None,
    ):
        """Initialize invoker.

        Args:
            config: Settings to read credentials, limits and timeouts from.
            client: Pre-built synchronous client.
            async_client: Pre-built asynchronous client.
        """
        self.config = config or settings
        self._client = client
        self._async_client = async_client

    def _client_kwargs(self) -> dict[str, Any]:
        project_id, region = resolve_vertex_target(self.config)
        return {
            "project_id": project_id,
            "region": region,
            "max_retries": 0,
            "timeout": self.config.request_timeout,
        }

    @property
    def client(self) -> Any:
        """Synchronous Vertex client (raises ValidationError when unconfigured)."""
        if self._client is None:
            self._client = AnthropicVertex(**self._client_kwargs())
        return self._client

    @property
    def async_client(self) -> Any:
        """Asynchronous Vertex client (raises ValidationError when unconfigured)."""
        if self._async_client is None:
            self._async_client = AsyncAnthropicVertex(**self._client_kwargs())
        return self._async_client

    def _create_kwargs(
        self,
        request: ReviewRequest,
        model: str,
        timeout: Optional[float],
    ) -> dict[str, Any]:
        return {
            "model": model,
            "max_tokens": self.config.max_tokens,
            "messages": request.to_messages(),
            "timeout": timeout if timeout is not None else self.config.request_timeout,
        }

    def invoke(
        self,
        request: ReviewRequest,
        model: str,
        timeout: Optional[float] = None,
    ) -> InvocationResult:
        """Send one request and return the raw answer.

        Args:
            request: Assembled review request.
            model: Model identifier.
            timeout: Seconds to wait before failing with TransientError.

        Raises:
            AuthError, NotFoundError, PayloadTooLargeError, TransientError
        """
        client = self.client
        logger.info(
            "Calling reasoning service: model=%s blocks=%d cached_prefix=%d",
            model,
            len(request.blocks),
            request.cached_prefix_length,
        )
        try:
            response = client.messages.create(**self._create_kwargs(request, model, timeout))
        except SERVICE_ERRORS as exc:
            error = classify_error(exc, model)
            logger.error("Reasoning service call failed (%s): %s", error.kind.value, exc)
            raise error from exc
        return _to_result(response)

    async def ainvoke(
        self,
        request: ReviewRequest,
        model: str,
        timeout: Optional[float] = None,
    ) -> InvocationResult:
        """Async variant of :meth:`invoke`.

        Cancelling the awaiting task cancels the in-flight HTTP request.
        """
        client = self.async_client
        logger.info(
            "Calling reasoning service: model=%s blocks=%d cached_prefix=%d",
            model,
            len(request.blocks),
            request.cached_prefix_length,
        )
        try:
            response = await client.messages.create(
                **self._create_kwargs(request, model, timeout)
            )
        except SERVICE_ERRORS as exc:
            error = classify_error(exc, model)
            logger.error("Reasoning service call failed (%s): %s", error.kind.value, exc)
            raise error from exc
        return _to_result(response)
