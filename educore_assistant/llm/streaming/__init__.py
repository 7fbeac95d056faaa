"""
Streaming support for the signup assistant.

This package contains:
- Event-stream line classification
- Incremental decoding of assistant message deltas
"""

from __future__ import annotations

from .models import DecoderStats, Frame, FrameKind
from .parser import StreamDecoder, classify_line, extract_delta_content

__all__ = [
    "DecoderStats",
    "Frame",
    "FrameKind",
    "StreamDecoder",
    "classify_line",
    "extract_delta_content",
]
