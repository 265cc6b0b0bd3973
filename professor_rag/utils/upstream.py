"""
Upstream error helpers

Translate the errors raised by the openai SDK and by requests into the
application's upstream error taxonomy, so callers only handle one family of
exceptions regardless of which service failed.
"""
from typing import Any

import openai
import requests

from professor_rag.core.exceptions import (
    MalformedUpstreamResponse,
    RAGError,
    UpstreamAuthError,
    UpstreamUnavailable,
)

_AUTH_STATUS_CODES = (401, 403)


def translate_openai_error(e: openai.OpenAIError, service: str) -> RAGError:
    """Map an OpenAI SDK error onto the upstream error taxonomy."""
    if isinstance(e, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return UpstreamAuthError(f"{service} rejected credentials: {e}", service=service)
    if isinstance(e, openai.APIResponseValidationError):
        return MalformedUpstreamResponse(f"{service} returned an invalid body: {e}", service=service)
    if isinstance(e, openai.APIError):
        return UpstreamUnavailable(f"{service} request failed: {e}", service=service)
    # Bare OpenAIError comes from the client constructor when no api key is set
    return UpstreamAuthError(f"{service} client unavailable: {e}", service=service)


def translate_requests_error(e: requests.exceptions.RequestException, service: str) -> RAGError:
    """Map a requests error onto the upstream error taxonomy."""
    response = getattr(e, "response", None)
    status_code = response.status_code if response is not None else None
    if status_code in _AUTH_STATUS_CODES:
        return UpstreamAuthError(
            f"{service} rejected credentials (HTTP {status_code})",
            service=service,
            status_code=status_code,
        )
    return UpstreamUnavailable(
        f"{service} request failed: {e}", service=service, status_code=status_code
    )


def json_body(response: requests.Response, service: str) -> Any:
    """Decode a JSON response body or raise MalformedUpstreamResponse."""
    try:
        return response.json()
    except ValueError as e:
        raise MalformedUpstreamResponse(
            f"{service} returned a non-JSON body: {e}", service=service
        ) from e
