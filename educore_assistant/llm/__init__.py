"""
Language-model integration for the signup assistant.

This package provides:
- Terminal error types for a chat turn
- Incremental decoding of streamed assistant deltas

The HTTP client lives in ``educore_assistant.llm.client``.
"""

from __future__ import annotations

from .exceptions import (
    AssistantError,
    CreditsExhaustedError,
    GatewayError,
    RateLimitError,
    StreamingError,
)
from .streaming import StreamDecoder

__all__ = [
    "AssistantError",
    "CreditsExhaustedError",
    "GatewayError",
    "RateLimitError",
    "StreamDecoder",
    "StreamingError",
]
