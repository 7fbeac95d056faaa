# educore_assistant/history/models.py
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["user", "assistant"]


class Turn(BaseModel):
    """
    One visible message of the assistant side panel.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Role
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    # Fallback turns produced locally after a failed request.
    synthetic: bool = False

    def to_message(self) -> dict[str, str]:
        """OpenAI-style message dict sent to the assistant endpoint."""
        return {"role": self.role, "content": self.content}
