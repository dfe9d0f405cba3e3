"""
Chat transcript models: ``Conversation`` summaries and their ``ChatMessage`` rows.

Messages are immutable once written. Only assistant-authored messages feed
the chat-insight extractor; user messages are stored but never mined.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from agri_advisor.taxonomy.recommendation_taxonomy import MessageRole


class Conversation(BaseModel):
    """Conversation metadata (no messages).

    Attributes:
        id: Store-assigned identifier; ``None`` before insertion.
        user_id: Owning user.
        title: Display title.
        created_at: UTC creation time.
        updated_at: UTC time of the most recent message.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    user_id: str
    title: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ChatMessage(BaseModel):
    """A single message inside a conversation."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    conversation_id: str
    role: MessageRole
    content: str
    created_at: Optional[datetime] = None

