"""
HTTP client for the signup assistant endpoint.

Posts the conversation, checks the response before streaming starts and
drives a fresh ``StreamDecoder`` from the raw response body.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from educore_assistant.llm.exceptions import (
    GENERIC_CONNECTION_MESSAGE,
    CreditsExhaustedError,
    GatewayError,
    RateLimitError,
    StreamingError,
)
from educore_assistant.llm.streaming.parser import FragmentSink, StreamDecoder
from educore_assistant.logging_utils import log_operation

logger = logging.getLogger(__name__)

HTTP_TOO_MANY_REQUESTS = 429
HTTP_PAYMENT_REQUIRED = 402


def parse_retry_after(value: str | None) -> float | None:
    """Seconds from a ``Retry-After`` header; HTTP-date values are ignored."""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class SignupAssistantClient:
    """Streaming chat client for the signup assistant."""

    def __init__(
        self,
        config: dict[str, Any],
        api_key: str,
        *,
        streaming_config: dict[str, Any] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        required_keys = ["url", "connect_timeout", "read_timeout"]
        for key in required_keys:
            if key not in config:
                raise ValueError(
                    f"Required assistant client parameter '{key}' not found. "
                    "All client parameters must be explicitly configured."
                )

        streaming_config = streaming_config or {}
        self.config: dict[str, Any] = config
        self.url: str = config["url"]
        self.encoding: str = streaming_config.get("encoding", "utf-8")
        self.max_frame_retries: int | None = streaming_config.get("max_frame_retries")
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=httpx.Timeout(
                config["read_timeout"], connect=config["connect_timeout"]
            ),
            transport=transport,
        )

    def create_decoder(self, on_fragment: FragmentSink | None = None) -> StreamDecoder:
        return StreamDecoder(
            on_fragment,
            max_frame_retries=self.max_frame_retries,
            encoding=self.encoding,
        )

    @log_operation("signup_assistant.stream_chat")
    async def stream_chat(
        self,
        messages: list[dict[str, Any]],
        context: str | None = None,
        on_fragment: FragmentSink | None = None,
    ) -> str:
        """
        Send the conversation and stream the assistant reply.

        Args:
            messages: OpenAI-style ``{"role", "content"}`` dicts
            context: Optional signup context forwarded to the system prompt
            on_fragment: Called with the full accumulated text after each delta

        Returns:
            The final accumulated assistant text

        Raises:
            GatewayError: The endpoint rejected the request
            StreamingError: The body is missing or could not be read
        """
        payload = {"messages": messages, "context": context}

        try:
            async with self.client.stream("POST", self.url, json=payload) as response:
                if not response.is_success:
                    body = await response.aread()
                    raise self._gateway_error(
                        response.status_code, body, response.headers.get("retry-after")
                    )

                content_type = response.headers.get("content-type", "")
                if "text/event-stream" not in content_type:
                    raise StreamingError(
                        "No response body",
                        status_code=response.status_code,
                        response_data={"content_type": content_type},
                    )

                decoder = self.create_decoder(on_fragment)
                text = await decoder.consume(response.aiter_bytes())
                logger.debug(f"Stream finished: {decoder.get_stats()}")
                return text

        except httpx.HTTPError as e:
            logger.error(f"HTTP error during streaming: {e}")
            raise StreamingError(f"HTTP error: {e!s}") from e

    @staticmethod
    def _gateway_error(
        status_code: int, body: bytes, retry_after: str | None = None
    ) -> GatewayError:
        """Build the error for a non-2xx response from its JSON ``error`` field."""
        message = GENERIC_CONNECTION_MESSAGE
        response_data: dict[str, Any] = {}
        try:
            parsed = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            parsed = None

        if isinstance(parsed, dict):
            response_data = parsed
            if isinstance(parsed.get("error"), str) and parsed["error"]:
                message = parsed["error"]

        logger.warning(f"Assistant endpoint returned {status_code}: {message}")

        if status_code == HTTP_TOO_MANY_REQUESTS:
            return RateLimitError(
                message,
                retry_after=parse_retry_after(retry_after),
                status_code=status_code,
                response_data=response_data,
            )
        if status_code == HTTP_PAYMENT_REQUIRED:
            return CreditsExhaustedError(
                message, status_code=status_code, response_data=response_data
            )
        return GatewayError(
            message, status_code=status_code, response_data=response_data
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
