"""
Conversation log for the assistant side panel.

The log is an ordered list of tagged turns owned by the caller. Streaming
code never edits it directly: the chat service hands
``Conversation.apply_assistant_text`` to the decoder as its sink.
"""

from __future__ import annotations

import logging
from typing import Any

from educore_assistant.history.models import Role, Turn

logger = logging.getLogger(__name__)


class Conversation:
    """Ordered user/assistant turns with replace-or-append assistant updates."""

    def __init__(self, turns: list[Turn] | None = None) -> None:
        self._turns: list[Turn] = list(turns or [])

    @property
    def turns(self) -> list[Turn]:
        return list(self._turns)

    @property
    def last(self) -> Turn | None:
        return self._turns[-1] if self._turns else None

    @property
    def last_role(self) -> Role | None:
        last = self.last
        return last.role if last else None

    def __len__(self) -> int:
        return len(self._turns)

    def add_user_turn(self, text: str) -> Turn:
        turn = Turn(role="user", content=text)
        self._turns.append(turn)
        return turn

    def add_assistant_turn(self, text: str, *, synthetic: bool = False) -> Turn:
        """Always append a new assistant turn."""
        turn = Turn(role="assistant", content=text, synthetic=synthetic)
        self._turns.append(turn)
        return turn

    def apply_assistant_text(self, text: str) -> Turn:
        """
        Show the full accumulated assistant text for the current user turn.

        Replaces the content of the last turn when it already belongs to the
        assistant; otherwise appends a new assistant turn. Used as the
        decoder sink, so one user turn never gets more than one streamed
        assistant turn.

        Args:
            text: Full accumulated text, not a delta

        Returns:
            The assistant turn now holding ``text``
        """
        last = self.last
        if last is not None and last.role == "assistant":
            updated = last.model_copy(update={"content": text})
            self._turns[-1] = updated
            return updated
        return self.add_assistant_turn(text)

    def to_messages(self, *, include_synthetic: bool = False) -> list[dict[str, Any]]:
        """
        Build the message list posted to the assistant endpoint.

        Synthetic fallback turns are left out unless asked for; they were
        never produced by the model.
        """
        messages = [
            turn.to_message()
            for turn in self._turns
            if include_synthetic or not turn.synthetic
        ]
        logger.debug(f"Built {len(messages)} messages from {len(self._turns)} turns")
        return messages

    def clear(self) -> None:
        self._turns.clear()
