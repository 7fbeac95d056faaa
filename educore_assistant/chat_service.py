"""
Chat Service for the EduCore signup assistant.

This module handles one side-panel chat session:
- Conversation ownership (user turns, streamed assistant turns)
- Streaming the assistant reply into the conversation in place
- Turning terminal request errors into one fallback assistant turn
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable

from educore_assistant.history.conversation import Conversation
from educore_assistant.llm.exceptions import GENERIC_CONNECTION_MESSAGE, AssistantError
from educore_assistant.logging_utils import ContextualLogger
from educore_assistant.prompts import QUICK_ACTIONS

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Desculpe, ocorreu um erro. Por favor, tente novamente."


class ChatService:
    """
    Side-panel conversation orchestrator.
    1. Takes your message
    2. Sends the whole conversation to the assistant endpoint
    3. Shows the reply as it streams in, updating one assistant turn
    4. Falls back to an apology turn if the request fails
    """

    def __init__(
        self,
        client,  # SignupAssistantClient
        *,
        context: str | None = None,
        on_error: Callable[[str], None] | None = None,
        conversation: Conversation | None = None,
    ) -> None:
        self.client = client
        self.context = context
        self.on_error = on_error
        self.conversation = conversation or Conversation()
        self.conversation_id = str(uuid.uuid4())
        self._is_loading = False
        self._log = ContextualLogger({"conversation_id": self.conversation_id})

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def show_typing_indicator(self) -> bool:
        """True while waiting for the first assistant fragment."""
        return self._is_loading and self.conversation.last_role == "user"

    async def send_message(self, text: str | None) -> bool:
        """
        Send a user message and stream the reply into the conversation.

        Returns:
            False when the message was ignored (empty, or a request is
            already in flight); True otherwise, even if the request failed.
        """
        text = (text or "").strip()
        if not text or self._is_loading:
            return False

        self.conversation.add_user_turn(text)
        await self._stream_reply()
        return True

    async def send_quick_action(self, index: int) -> bool:
        """Send one of the canned ``QUICK_ACTIONS`` messages."""
        return await self.send_message(QUICK_ACTIONS[index]["message"])

    async def _stream_reply(self) -> None:
        self._is_loading = True
        request_log = self._log.bind(turns=len(self.conversation))
        try:
            text = await self.client.stream_chat(
                self.conversation.to_messages(),
                self.context,
                self.conversation.apply_assistant_text,
            )
            request_log.info("Assistant reply complete", reply_length=len(text))
        except Exception as e:
            if isinstance(e, AssistantError):
                message = e.message
            else:
                message = str(e) or GENERIC_CONNECTION_MESSAGE
            logger.error(f"Chat error: {e}")
            request_log.error(
                "Assistant request failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            if self.on_error is not None:
                self.on_error(message)
            self.conversation.add_assistant_turn(FALLBACK_REPLY, synthetic=True)
        finally:
            self._is_loading = False
