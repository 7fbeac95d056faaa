"""Conversation log for the assistant side panel."""

from __future__ import annotations

from .conversation import Conversation
from .models import Role, Turn

__all__ = ["Conversation", "Role", "Turn"]
