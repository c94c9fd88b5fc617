"""Persistence gateway for conversations and their messages.

Every method runs inside the caller's transaction; nothing here commits.
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from api.features.conversation.entities.conversation import Conversation
from api.features.conversation.entities.message import Message
from api.shared.base import BaseRepository


class MessageRepository(BaseRepository[Message]):
    model = Message

    async def count_for_conversation(self, conversation_id: str) -> int:
        return await self.count(conversation_id=conversation_id)

    async def delete_for_conversation(self, conversation_id: str) -> int:
        return await self.delete_by_field("conversation_id", conversation_id)


class ConversationRepository(BaseRepository[Conversation]):
    model = Conversation

    def __init__(self, session):
        super().__init__(session)
        self.messages = MessageRepository(session)

    async def insert_conversation(self, conversation: Conversation) -> Conversation:
        """Persist a new conversation; id, created_at and updated_at are assigned."""
        if conversation.created_at is None or conversation.updated_at is None:
            conversation.touch()
            conversation.created_at = conversation.updated_at
        return await self.create(conversation)

    async def find_conversation_by_id(
        self,
        conversation_id: str,
        *,
        with_messages: bool = False,
        for_update: bool = False,
    ) -> Optional[Conversation]:
        """Load one conversation.

        ``for_update`` takes a row lock (PostgreSQL) so concurrent mutations of
        the same conversation are serialized until the transaction ends.
        """
        stmt = select(Conversation).where(Conversation.id == conversation_id)
        if with_messages:
            stmt = stmt.options(selectinload(Conversation.messages))
        if for_update:
            stmt = stmt.with_for_update()
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_conversations_by_updated_desc(self) -> List[Conversation]:
        stmt = select(Conversation).order_by(
            Conversation.updated_at.desc(), Conversation.id
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def save_conversation(self, conversation: Conversation) -> Conversation:
        """Flush title changes and appended messages and bump ``updated_at``."""
        conversation.touch()
        self.session.add(conversation)
        await self.session.flush()
        return conversation

    async def delete_conversation(self, conversation_id: str) -> bool:
        """Remove a conversation and its messages. Absent ids are a no-op."""
        await self.messages.delete_for_conversation(conversation_id)
        return await self.delete(conversation_id)

    async def count_messages(self, conversation_id: str) -> int:
        return await self.messages.count_for_conversation(conversation_id)
