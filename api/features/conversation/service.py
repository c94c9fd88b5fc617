"""Conversation service: CRUD plus the user/assistant round-trip.

Every public operation is one transaction from the caller's point of view.
``send_message`` keeps the transaction open across the LLM call so that the
user turn and the assistant turn are committed together or not at all.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.dtos import ConversationDTO, MessageDTO
from api.features.conversation.entities.conversation import Conversation
from api.features.conversation.entities.message import MessageRole
from api.features.conversation.exceptions import ConversationNotFoundError
from api.features.conversation.policies import (
    DEFAULT_HISTORY_WINDOW,
    build_history_window,
    derive_title,
)
from api.features.conversation.repository import ConversationRepository
from api.shared.transactions import run_in_transaction
from infra.llm import LLMClient
from prompts.assistant import ASSISTANT_SYSTEM_PROMPT

logger = logging.getLogger("chat.conversation.service")


class ConversationService:
    """Orchestrates conversations over the repository and the LLM adapter."""

    def __init__(
        self,
        llm_client: LLMClient,
        history_window_size: int = DEFAULT_HISTORY_WINDOW,
        retry_attempts: int = 3,
        retry_base_delay: float = 0.05,
    ):
        self.llm_client = llm_client
        self.history_window_size = history_window_size
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay

    async def _transact(self, db_session: AsyncSession, work, retryable=lambda: True):
        return await run_in_transaction(
            db_session,
            work,
            attempts=self.retry_attempts,
            base_delay=self.retry_base_delay,
            retryable=retryable,
        )

    async def list_conversations(self, *, db_session: AsyncSession) -> List[ConversationDTO]:
        async def _list(session: AsyncSession) -> List[ConversationDTO]:
            repo = ConversationRepository(session)
            conversations = await repo.list_conversations_by_updated_desc()
            return [ConversationDTO.from_entity(c) for c in conversations]

        return await self._transact(db_session, _list)

    async def get_conversation(
        self, conversation_id: str, *, db_session: AsyncSession
    ) -> Optional[ConversationDTO]:
        async def _get(session: AsyncSession) -> Optional[ConversationDTO]:
            repo = ConversationRepository(session)
            conversation = await repo.find_conversation_by_id(
                conversation_id, with_messages=True
            )
            if conversation is None:
                return None
            return ConversationDTO.from_entity(conversation, with_messages=True)

        return await self._transact(db_session, _get)

    async def create_conversation(self, *, db_session: AsyncSession) -> ConversationDTO:
        async def _create(session: AsyncSession) -> ConversationDTO:
            repo = ConversationRepository(session)
            conversation = await repo.insert_conversation(Conversation())
            return ConversationDTO.from_entity(conversation)

        dto = await self._transact(db_session, _create)
        logger.info(f"Created new conversation: {dto.id}")
        return dto

    async def delete_conversation(self, conversation_id: str, *, db_session: AsyncSession) -> None:
        """Delete a conversation and its messages; unknown ids succeed too."""
        async def _delete(session: AsyncSession) -> bool:
            repo = ConversationRepository(session)
            return await repo.delete_conversation(conversation_id)

        deleted = await self._transact(db_session, _delete)
        if deleted:
            logger.info(f"Deleted conversation: {conversation_id}")
        else:
            logger.info(f"Delete of absent conversation {conversation_id} is a no-op")

    async def update_title(
        self, conversation_id: str, title: str, *, db_session: AsyncSession
    ) -> Optional[ConversationDTO]:
        async def _rename(session: AsyncSession) -> Optional[ConversationDTO]:
            repo = ConversationRepository(session)
            conversation = await repo.find_conversation_by_id(
                conversation_id, for_update=True
            )
            if conversation is None:
                return None
            conversation.title = title
            await repo.save_conversation(conversation)
            return ConversationDTO.from_entity(conversation)

        return await self._transact(db_session, _rename)

    async def send_message(
        self, conversation_id: str, user_text: str, *, db_session: AsyncSession
    ) -> MessageDTO:
        """Append the user turn, ask the model, append its reply, commit.

        On any failure (including upstream errors) nothing is persisted.
        """
        upstream_called = False

        async def _send(session: AsyncSession) -> MessageDTO:
            nonlocal upstream_called
            repo = ConversationRepository(session)
            conversation = await repo.find_conversation_by_id(
                conversation_id, with_messages=True, for_update=True
            )
            if conversation is None:
                raise ConversationNotFoundError(conversation_id)

            conversation.add_message(MessageRole.USER, user_text)
            if len(conversation.messages) == 1:
                conversation.title = derive_title(user_text)
            # Flush now so a concurrent append conflicts before the model is called.
            await repo.save_conversation(conversation)

            history = build_history_window(conversation.messages, self.history_window_size)
            upstream_called = True
            reply = await self.llm_client.complete(ASSISTANT_SYSTEM_PROMPT, history)

            assistant_message = conversation.add_message(MessageRole.ASSISTANT, reply)
            await repo.save_conversation(conversation)
            return MessageDTO.from_entity(assistant_message)

        # Conflicts are only retried while the upstream has not been invoked.
        dto = await self._transact(db_session, _send, retryable=lambda: not upstream_called)
        logger.info(
            f"Message sent in conversation {conversation_id}, "
            f"input length: {len(user_text)}, response length: {len(dto.content)}"
        )
        return dto
