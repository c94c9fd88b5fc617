"""Controller for the Conversation feature."""
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.dtos import (
    ConversationDTO,
    MessageDTO,
    SendMessageRequest,
    UpdateTitleRequest,
)
from api.features.conversation.exceptions import ConversationNotFoundError
from api.features.conversation.service import ConversationService

logger = logging.getLogger("chat.conversation")


class ConversationController:
    """Controller handling conversation CRUD and message operations.

    Absent conversations become ``ConversationNotFoundError`` here; the
    service reports them as ``None``.
    """

    def __init__(self, conversation_service: ConversationService):
        self.conversation_service = conversation_service

    async def list_conversations(self, *, db_session: AsyncSession) -> List[ConversationDTO]:
        return await self.conversation_service.list_conversations(db_session=db_session)

    async def get_conversation(
        self, conversation_id: str, *, db_session: AsyncSession
    ) -> ConversationDTO:
        conversation = await self.conversation_service.get_conversation(
            conversation_id, db_session=db_session
        )
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def create_conversation(self, *, db_session: AsyncSession) -> ConversationDTO:
        return await self.conversation_service.create_conversation(db_session=db_session)

    async def delete_conversation(self, conversation_id: str, *, db_session: AsyncSession) -> None:
        await self.conversation_service.delete_conversation(
            conversation_id, db_session=db_session
        )

    async def update_title(
        self,
        conversation_id: str,
        request: UpdateTitleRequest,
        *,
        db_session: AsyncSession,
    ) -> ConversationDTO:
        conversation = await self.conversation_service.update_title(
            conversation_id, request.title, db_session=db_session
        )
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def send_message(
        self,
        conversation_id: str,
        request: SendMessageRequest,
        *,
        db_session: AsyncSession,
    ) -> MessageDTO:
        logger.info(
            f"Received message for conversation {conversation_id}, length: {len(request.message)}"
        )
        return await self.conversation_service.send_message(
            conversation_id, request.message, db_session=db_session
        )
