"""Message entity: one user or assistant turn of a conversation."""
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Enum as SQLEnum, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from api.shared.entities.base import BaseEntity

if TYPE_CHECKING:
    from api.features.conversation.entities.conversation import Conversation


class MessageRole(str, Enum):
    """Persisted roles. The system prompt is static and never stored."""

    USER = "user"
    ASSISTANT = "assistant"

    @property
    def wire_name(self) -> str:
        """Lowercase form used in DTOs and LLM payloads."""
        return self.name.lower()

    @classmethod
    def from_wire(cls, value: str) -> "MessageRole":
        return cls[value.upper()]


class Message(BaseEntity):
    """A single turn. ``position`` is its 0-based index within the conversation."""

    conversation_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("conversation.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Stored by enum NAME (USER / ASSISTANT); anything else is rejected.
    role: Mapped[MessageRole] = mapped_column(
        SQLEnum(MessageRole, name="message_role", native_enum=False, length=20),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    conversation: Mapped["Conversation"] = relationship(back_populates="messages")

    __table_args__ = (
        UniqueConstraint("conversation_id", "position", name="uq_message_conversation_position"),
        Index("ix_message_conversation_created_at", "conversation_id", "created_at"),
    )
