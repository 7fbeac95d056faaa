"""
Incremental SSE decoder for assistant message deltas.

Turns the raw bytes of an event-stream response body into a growing
assistant message. Network chunks may end anywhere, including inside a
UTF-8 sequence, a line or a JSON token; the decoder keeps whatever has not
yet formed a complete line and resumes on the next chunk.
"""

from __future__ import annotations

import codecs
import json
from collections.abc import AsyncIterable, Callable
from typing import Any

import structlog

from .models import DATA_PREFIX, DONE_SENTINEL, DecoderStats, Frame, FrameKind

logger = structlog.get_logger(__name__)

FragmentSink = Callable[[str], None]


def classify_line(line: str) -> Frame:
    """Classify one line (without its trailing newline)."""
    if line.endswith("\r"):
        line = line[:-1]

    if not line.strip():
        return Frame(FrameKind.BLANK, line)
    if line.startswith(":"):
        return Frame(FrameKind.COMMENT, line)
    if not line.startswith(DATA_PREFIX):
        return Frame(FrameKind.UNRECOGNIZED, line)

    payload = line[len(DATA_PREFIX):].strip()
    if payload == DONE_SENTINEL:
        return Frame(FrameKind.TERMINATOR, line, payload)
    return Frame(FrameKind.DATA, line, payload)


def extract_delta_content(envelope: Any) -> str | None:
    """Return ``choices[0].delta.content`` when it is a non-empty string."""
    if not isinstance(envelope, dict):
        return None

    choices = envelope.get("choices")
    if not isinstance(choices, list) or not choices:
        return None

    choice = choices[0]
    if not isinstance(choice, dict):
        return None

    delta = choice.get("delta")
    if not isinstance(delta, dict):
        return None

    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None


class StreamDecoder:
    """
    Decode one event-stream response into accumulated assistant text.

    Each successful fragment is appended to the accumulated text and the
    sink is called with the *full* text so far, so a caller can replace the
    visible message instead of appending to it.

    A data line whose payload is not valid JSON is put back at the front of
    the buffer and the rest of the chunk waits for more bytes. With
    ``max_frame_retries`` set, a line that keeps failing is dropped after
    that many further attempts; ``None`` keeps retrying forever.

    One instance serves exactly one request.
    """

    def __init__(
        self,
        on_fragment: FragmentSink | None = None,
        *,
        max_frame_retries: int | None = None,
        encoding: str = "utf-8",
    ) -> None:
        if max_frame_retries is not None and max_frame_retries < 0:
            raise ValueError("max_frame_retries must be non-negative or None")

        self._on_fragment = on_fragment
        self.max_frame_retries = max_frame_retries
        self._decoder = codecs.getincrementaldecoder(encoding)("replace")
        self._buffer = ""
        self._accumulated = ""
        self._done = False
        self._rewound_line: str | None = None
        self._failures = 0
        self.stats = DecoderStats()

    @property
    def accumulated(self) -> str:
        return self._accumulated

    @property
    def done(self) -> bool:
        return self._done

    @property
    def buffered(self) -> str:
        """Text received but not yet resolved into a complete line."""
        return self._buffer

    def process_chunk(self, raw_bytes: bytes) -> bool:
        """
        Feed one chunk from the transport.

        Returns:
            True once the stream is terminal (``[DONE]`` seen or ``finish``
            called). Bytes fed after that are ignored.
        """
        if self._done:
            return True

        self._buffer += self._decoder.decode(raw_bytes)
        self._drain()
        return self._done

    def finish(self) -> str:
        """Mark end-of-stream and return the accumulated text."""
        if not self._done:
            self._buffer += self._decoder.decode(b"", final=True)
            self._done = True

        if self._rewound_line is not None and self._buffer.startswith(
            self._rewound_line + "\n"
        ):
            logger.warning(
                "Discarding malformed data frame at end of stream",
                attempts=self._failures,
                frame_preview=self._rewound_line[:80],
                remainder_length=len(self._buffer),
            )
            self.stats.dropped_frames += 1
            self._rewound_line = None
            self._failures = 0
        elif self._buffer.strip():
            logger.debug(
                "Discarding unterminated stream remainder",
                remainder_length=len(self._buffer),
            )
        self._buffer = ""
        return self._accumulated

    async def consume(self, chunks: AsyncIterable[bytes]) -> str:
        """Drive the decoder from an async byte stream until it terminates."""
        async for chunk in chunks:
            if self.process_chunk(chunk):
                break
        return self.finish()

    def get_stats(self) -> dict[str, int]:
        return self.stats.as_dict()

    def _drain(self) -> None:
        while True:
            newline_index = self._buffer.find("\n")
            if newline_index == -1:
                return

            line = self._buffer[:newline_index]
            self._buffer = self._buffer[newline_index + 1:]

            frame = classify_line(line)
            self.stats.frames += 1

            if frame.kind is FrameKind.COMMENT:
                self.stats.comments += 1
                continue
            if frame.kind in (FrameKind.BLANK, FrameKind.UNRECOGNIZED):
                continue

            if frame.kind is FrameKind.TERMINATOR:
                self._done = True
                self._buffer = ""
                logger.debug(
                    "Stream terminator received",
                    accumulated_length=len(self._accumulated),
                    **self.stats.as_dict(),
                )
                return

            try:
                envelope = json.loads(frame.payload)
            except json.JSONDecodeError:
                if self._retry_exhausted(frame.line):
                    continue
                # Most likely the payload was cut by the transport; wait for more bytes.
                self._buffer = frame.line + "\n" + self._buffer
                self.stats.rewinds += 1
                return

            self._rewound_line = None
            self._failures = 0
            self.stats.data_frames += 1

            content = extract_delta_content(envelope)
            if content:
                self._accumulated += content
                self.stats.fragments += 1
                if self._on_fragment is not None:
                    self._on_fragment(self._accumulated)

    def _retry_exhausted(self, line: str) -> bool:
        if line == self._rewound_line:
            self._failures += 1
        else:
            self._rewound_line = line
            self._failures = 1

        if self.max_frame_retries is None or self._failures <= self.max_frame_retries:
            return False

        logger.warning(
            "Dropping data frame that never became valid JSON",
            attempts=self._failures,
            frame_preview=line[:80],
        )
        self.stats.dropped_frames += 1
        self._rewound_line = None
        self._failures = 0
        return True
