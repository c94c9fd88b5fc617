"""DTOs for the Conversation feature."""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from api.features.conversation.entities.conversation import Conversation
from api.features.conversation.entities.message import Message, MessageRole
from api.shared.dtos import BaseDTO


class MessageDTO(BaseDTO):
    """Conversation message DTO. Roles travel lowercase."""

    id: str = Field(description="Message identifier")
    role: Literal["user", "assistant"] = Field(description="Message role: user or assistant")
    content: str = Field(description="Message content")
    created_at: datetime = Field(description="Insertion timestamp")

    @classmethod
    def from_entity(cls, message: Message) -> "MessageDTO":
        return cls(
            id=message.id,
            role=message.role.wire_name,
            content=message.content,
            created_at=message.created_at,
        )

    def to_role(self) -> MessageRole:
        """Internal (persisted) role for this DTO."""
        return MessageRole.from_wire(self.role)


class ConversationDTO(BaseDTO):
    """Conversation DTO. ``messages`` is null on list responses."""

    id: str = Field(description="Conversation identifier")
    title: Optional[str] = Field(default=None, description="Conversation title")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last mutation timestamp")
    messages: Optional[List[MessageDTO]] = Field(
        default=None, description="Messages in insertion order"
    )

    @classmethod
    def from_entity(
        cls, conversation: Conversation, *, with_messages: bool = False
    ) -> "ConversationDTO":
        return cls(
            id=conversation.id,
            title=conversation.title,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
            messages=(
                [MessageDTO.from_entity(m) for m in conversation.messages]
                if with_messages
                else None
            ),
        )


class SendMessageRequest(BaseDTO):
    """Send a user message to a conversation."""

    message: str = Field(min_length=1, description="User message text")


class UpdateTitleRequest(BaseDTO):
    """Rename a conversation."""

    title: str = Field(max_length=500, description="New conversation title")
