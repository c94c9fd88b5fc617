"""Conversation entity: a titled, ordered log of user/assistant messages."""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from api.features.conversation.entities.message import Message, MessageRole
from api.shared.entities.base import BaseEntity, utcnow


class Conversation(BaseEntity):
    """Conversation owning its messages (cascade on delete)."""

    title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Never lazy-loaded: callers that need messages load them with selectinload.
    messages: Mapped[List[Message]] = relationship(
        back_populates="conversation",
        order_by=Message.position,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    def add_message(self, role: MessageRole, content: str) -> Message:
        """Append a message at the tail and return it."""
        message = Message(
            role=role,
            content=content,
            position=len(self.messages),
            created_at=utcnow(),
        )
        self.messages.append(message)
        return message

    def touch(self) -> None:
        """Advance ``updated_at`` after a mutation."""
        self.updated_at = utcnow()


Index("ix_conversation_updated_at", Conversation.updated_at.desc())
