"""
Error types for the signup assistant chat path.

This module provides the terminal errors a chat turn can end with:
- Gateway rejections before streaming starts (with status code)
- Rate limit and credit exhaustion rejections
- Transport failures while the event stream is being read
"""

from __future__ import annotations


GENERIC_CONNECTION_MESSAGE = "Erro ao conectar com o assistente"


class AssistantError(Exception):
    """Base assistant error with HTTP context."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}


class GatewayError(AssistantError):
    """Non-2xx response from the assistant endpoint before streaming started."""
    pass


class RateLimitError(GatewayError):
    """Too many requests (HTTP 429)."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class CreditsExhaustedError(GatewayError):
    """Gateway credits exhausted (HTTP 402)."""
    pass


class StreamingError(AssistantError):
    """The response body could not be read as an event stream."""
    pass
