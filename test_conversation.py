#!/usr/bin/env python3
"""
Tests for the conversation log and its assistant-text sink.
"""

from educore_assistant.history import Conversation, Turn


class TestApplyAssistantText:
    """Replace-or-append behaviour of the streaming sink."""

    def test_appends_after_user_turn(self):
        conversation = Conversation()
        conversation.add_user_turn("Oi")

        turn = conversation.apply_assistant_text("Olá")

        assert len(conversation) == 2
        assert turn.role == "assistant"
        assert conversation.last.content == "Olá"

    def test_replaces_existing_assistant_turn(self):
        conversation = Conversation()
        conversation.add_user_turn("Oi")

        first = conversation.apply_assistant_text("Ol")
        second = conversation.apply_assistant_text("Olá!")

        assert len(conversation) == 2
        assert second.id == first.id
        assert [t.content for t in conversation.turns] == ["Oi", "Olá!"]

    def test_one_assistant_turn_per_user_turn(self):
        conversation = Conversation()
        for question, partials in [("a", ["1", "12"]), ("b", ["3", "34", "345"])]:
            conversation.add_user_turn(question)
            for text in partials:
                conversation.apply_assistant_text(text)

        assert [(t.role, t.content) for t in conversation.turns] == [
            ("user", "a"),
            ("assistant", "12"),
            ("user", "b"),
            ("assistant", "345"),
        ]

    def test_empty_conversation_gets_assistant_turn(self):
        conversation = Conversation()
        conversation.apply_assistant_text("Olá")

        assert conversation.last_role == "assistant"


class TestToMessages:
    """Message list sent to the assistant endpoint."""

    def test_synthetic_turns_are_left_out(self):
        conversation = Conversation()
        conversation.add_user_turn("Oi")
        conversation.add_assistant_turn("Desculpe", synthetic=True)
        conversation.add_user_turn("De novo")

        assert conversation.to_messages() == [
            {"role": "user", "content": "Oi"},
            {"role": "user", "content": "De novo"},
        ]
        assert len(conversation.to_messages(include_synthetic=True)) == 3

    def test_turns_property_is_a_copy(self):
        conversation = Conversation([Turn(role="user", content="Oi")])
        conversation.turns.clear()

        assert len(conversation) == 1

    def test_clear(self):
        conversation = Conversation()
        conversation.add_user_turn("Oi")
        conversation.clear()

        assert conversation.last is None
        assert conversation.last_role is None
