"""
Repository for chat conversations and their messages.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from agri_advisor.db.repositories.base import BaseRepository
from agri_advisor.models.chat import ChatMessage, Conversation
from agri_advisor.taxonomy.recommendation_taxonomy import MessageRole
from agri_advisor.utils.time_utils import from_iso, to_iso, utcnow

logger = logging.getLogger(__name__)


class ChatRepository(BaseRepository):
    """Read/write access to ``chat_conversations`` and ``chat_messages``."""

    # ── Conversations ──────────────────────────────────────────────────────────

    def insert_conversation(self, conversation: Conversation) -> Conversation:
        """Persist a conversation header and return it with id and timestamps."""
        created_at = conversation.created_at or utcnow()
        stored = conversation.model_copy(
            update={
                "id": conversation.id or self.new_id(),
                "created_at": created_at,
                "updated_at": conversation.updated_at or created_at,
            }
        )
        self.execute(
            """
            INSERT INTO chat_conversations (id, user_id, title, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?);
            """,
            (
                stored.id,
                stored.user_id,
                stored.title,
                to_iso(stored.created_at),
                to_iso(stored.updated_at),
            ),
        )
        return stored

    def get_conversations(self, user_id: str) -> list[Conversation]:
        """Conversations owned by ``user_id``, most recently active first."""
        rows = self.fetchall(
            """
            SELECT * FROM chat_conversations
            WHERE user_id = ?
            ORDER BY updated_at IS NULL, updated_at DESC, rowid DESC;
            """,
            (user_id,),
        )
        return [_row_to_conversation(r) for r in rows]

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        row = self.fetchone(
            "SELECT * FROM chat_conversations WHERE id = ?;", (conversation_id,)
        )
        return _row_to_conversation(row) if row else None

    def delete_conversation(self, conversation_id: str) -> None:
        """Delete a conversation and every message in it.

        Deleting an unknown id is a no-op.
        """
        self.execute("DELETE FROM chat_conversations WHERE id = ?;", (conversation_id,))
        cursor = self.execute(
            "DELETE FROM chat_messages WHERE conversation_id = ?;", (conversation_id,)
        )
        logger.debug(
            "Deleted conversation %s and %d message(s)", conversation_id, cursor.rowcount
        )

    # ── Messages ───────────────────────────────────────────────────────────────

    def insert_message(self, message: ChatMessage) -> ChatMessage:
        """Persist a message and mark its conversation as updated.

        Raises:
            LookupError: If the conversation does not exist.
        """
        if self.get_conversation(message.conversation_id) is None:
            raise LookupError(f"Conversation {message.conversation_id!r} not found.")

        stored = message.model_copy(
            update={
                "id": message.id or self.new_id(),
                "created_at": message.created_at or utcnow(),
            }
        )
        self.execute(
            """
            INSERT INTO chat_messages (id, conversation_id, role, content, created_at)
            VALUES (?, ?, ?, ?, ?);
            """,
            (
                stored.id,
                stored.conversation_id,
                stored.role.value,
                stored.content,
                to_iso(stored.created_at),
            ),
        )
        # Never move updated_at backwards when importing older messages.
        self.execute(
            """
            UPDATE chat_conversations
            SET updated_at = ?
            WHERE id = ? AND (updated_at IS NULL OR updated_at < ?);
            """,
            (to_iso(stored.created_at), stored.conversation_id, to_iso(stored.created_at)),
        )
        return stored

    def get_messages(
        self,
        conversation_id: str,
        limit: int = 50,
        skip: int = 0,
    ) -> list[ChatMessage]:
        """One page of a conversation's messages, oldest first.

        Args:
            conversation_id: Conversation to read.
            limit: Maximum number of messages returned.
            skip: Number of leading (oldest) messages to skip.
        """
        rows = self.fetchall(
            """
            SELECT * FROM chat_messages
            WHERE conversation_id = ?
            ORDER BY created_at IS NOT NULL, created_at ASC, rowid ASC
            LIMIT ? OFFSET ?;
            """,
            (conversation_id, limit, skip),
        )
        return [_row_to_message(r) for r in rows]


def _row_to_conversation(row: sqlite3.Row) -> Conversation:
    return Conversation(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        created_at=from_iso(row["created_at"]),
        updated_at=from_iso(row["updated_at"]),
    )


def _row_to_message(row: sqlite3.Row) -> ChatMessage:
    return ChatMessage(
        id=row["id"],
        conversation_id=row["conversation_id"],
        role=MessageRole(row["role"]),
        content=row["content"],
        created_at=from_iso(row["created_at"]),
    )
