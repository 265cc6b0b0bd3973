"""
Error taxonomy for upstream calls.

Every upstream client translates its library's errors into one of these at
its own boundary. Apart from EmptyConversationError they all reach the
caller as the same generic 500.
"""

from typing import Optional


class RAGError(Exception):
    """Base class for errors raised while serving a chat request."""

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class UpstreamAuthError(RAGError):
    """Missing or rejected API key for an upstream service."""
    pass


class UpstreamUnavailable(RAGError):
    """Network failure, timeout, or unexpected HTTP status from an upstream service."""
    pass


class MalformedUpstreamResponse(RAGError):
    """Upstream response is missing fields the pipeline depends on."""
    pass


class MidStreamFailure(RAGError):
    """Completion stream failed after part of the response was already sent."""
    pass


class EmptyConversationError(ValueError):
    """Request carried no messages to answer."""
    pass


class ConfigurationError(Exception):
    """Fixed configuration failed validation at startup."""
    pass
