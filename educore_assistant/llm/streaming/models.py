"""
Dataclasses for the server-sent event decoder.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class FrameKind(Enum):
    """Classification of a single event-stream line."""
    COMMENT = "comment"
    BLANK = "blank"
    DATA = "data"
    TERMINATOR = "terminator"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Frame:
    """One line cut from the decoder buffer."""
    kind: FrameKind
    line: str
    payload: str | None = None


@dataclass
class DecoderStats:
    """Counters kept by a single decoder instance."""
    frames: int = 0
    data_frames: int = 0
    comments: int = 0
    fragments: int = 0
    rewinds: int = 0
    dropped_frames: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "frames": self.frames,
            "data_frames": self.data_frames,
            "comments": self.comments,
            "fragments": self.fragments,
            "rewinds": self.rewinds,
            "dropped_frames": self.dropped_frames,
        }
