#!/usr/bin/env python3
"""
Tests for the side-panel chat service.
"""

import pytest

from educore_assistant.chat_service import FALLBACK_REPLY, ChatService
from educore_assistant.llm.exceptions import RateLimitError, StreamingError
from educore_assistant.prompts import QUICK_ACTIONS


class FakeAssistantClient:
    """Replays fixed fragments through the sink, optionally failing afterwards."""

    def __init__(self, fragments=(), error=None):
        self.fragments = list(fragments)
        self.error = error
        self.calls = []
        self.during_call = None

    async def stream_chat(self, messages, context=None, on_fragment=None):
        self.calls.append({"messages": messages, "context": context})
        if self.during_call is not None:
            await self.during_call()

        text = ""
        for fragment in self.fragments:
            text += fragment
            on_fragment(text)
        if self.error is not None:
            raise self.error
        return text


def roles_and_contents(service):
    return [(turn.role, turn.content) for turn in service.conversation.turns]


class TestSendMessage:
    """Successful turns."""

    @pytest.mark.asyncio
    async def test_streamed_reply_updates_one_turn(self):
        client = FakeAssistantClient(["Ol", "á!"])
        service = ChatService(client, context="cadastro")

        assert await service.send_message("  Oi  ") is True

        assert roles_and_contents(service) == [("user", "Oi"), ("assistant", "Olá!")]
        assert client.calls[0] == {
            "messages": [{"role": "user", "content": "Oi"}],
            "context": "cadastro",
        }
        assert service.is_loading is False

    @pytest.mark.asyncio
    async def test_history_is_sent_on_next_turn(self):
        client = FakeAssistantClient(["resposta"])
        service = ChatService(client)

        await service.send_message("primeira")
        await service.send_message("segunda")

        assert client.calls[1]["messages"] == [
            {"role": "user", "content": "primeira"},
            {"role": "assistant", "content": "resposta"},
            {"role": "user", "content": "segunda"},
        ]

    @pytest.mark.asyncio
    async def test_empty_input_is_ignored(self):
        client = FakeAssistantClient(["x"])
        service = ChatService(client)

        assert await service.send_message("   ") is False
        assert await service.send_message(None) is False
        assert client.calls == []
        assert len(service.conversation) == 0

    @pytest.mark.asyncio
    async def test_send_while_loading_is_ignored(self):
        client = FakeAssistantClient(["x"])
        service = ChatService(client)
        observed = {}

        async def during_call():
            observed["typing"] = service.show_typing_indicator
            observed["second_send"] = await service.send_message("outra")

        client.during_call = during_call
        await service.send_message("uma")

        assert observed == {"typing": True, "second_send": False}
        assert len(client.calls) == 1
        assert roles_and_contents(service) == [("user", "uma"), ("assistant", "x")]

    @pytest.mark.asyncio
    async def test_quick_action_sends_canned_message(self):
        client = FakeAssistantClient(["ok"])
        service = ChatService(client)

        await service.send_quick_action(1)

        assert service.conversation.turns[0].content == QUICK_ACTIONS[1]["message"]


class TestSendMessageErrors:
    """Terminal errors end the turn with one fallback reply."""

    @pytest.mark.asyncio
    async def test_error_appends_single_fallback_turn(self):
        errors = []
        client = FakeAssistantClient(error=RateLimitError("Limite", status_code=429))
        service = ChatService(client, on_error=errors.append)

        assert await service.send_message("Oi") is True

        assert roles_and_contents(service) == [("user", "Oi"), ("assistant", FALLBACK_REPLY)]
        assert service.conversation.last.synthetic is True
        assert errors == ["Limite"]
        assert service.is_loading is False

    @pytest.mark.asyncio
    async def test_partial_reply_is_kept_before_fallback(self):
        client = FakeAssistantClient(["parcial"], error=StreamingError("HTTP error: reset"))
        service = ChatService(client)

        await service.send_message("Oi")

        assert roles_and_contents(service) == [
            ("user", "Oi"),
            ("assistant", "parcial"),
            ("assistant", FALLBACK_REPLY),
        ]

    @pytest.mark.asyncio
    async def test_unexpected_error_uses_its_message(self):
        errors = []
        client = FakeAssistantClient(error=RuntimeError("quebrou"))
        service = ChatService(client, on_error=errors.append)

        await service.send_message("Oi")

        assert errors == ["quebrou"]
        assert service.conversation.last.content == FALLBACK_REPLY

    @pytest.mark.asyncio
    async def test_fallback_turn_not_sent_back(self):
        client = FakeAssistantClient(error=StreamingError("boom"))
        service = ChatService(client)
        await service.send_message("primeira")

        client.error = None
        client.fragments = ["agora sim"]
        await service.send_message("segunda")

        assert client.calls[1]["messages"] == [
            {"role": "user", "content": "primeira"},
            {"role": "user", "content": "segunda"},
        ]
        assert service.conversation.last.content == "agora sim"
