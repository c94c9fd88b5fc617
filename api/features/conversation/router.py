"""Router for the Conversation feature."""
from typing import List

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.di.container import ApplicationContainer as DependencyContainer
from api.features.conversation.controller import ConversationController
from api.features.conversation.dtos import (
    ConversationDTO,
    MessageDTO,
    SendMessageRequest,
    UpdateTitleRequest,
)
from api.shared.db import get_db_session
from api.shared.utils import cancel_on_disconnect

router = APIRouter()


@router.get("", response_model=List[ConversationDTO])
@inject
async def list_conversations(
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """List conversations, most recently updated first (no messages)."""
    return await controller.list_conversations(db_session=db_session)


@router.post("", response_model=ConversationDTO)
@inject
async def create_conversation(
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    return await controller.create_conversation(db_session=db_session)


@router.get("/{conversation_id}", response_model=ConversationDTO)
@inject
async def get_conversation(
    conversation_id: str,
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Fetch a conversation with its messages."""
    return await controller.get_conversation(conversation_id, db_session=db_session)


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
@inject
async def delete_conversation(
    conversation_id: str,
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    await controller.delete_conversation(conversation_id, db_session=db_session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{conversation_id}", response_model=ConversationDTO)
@inject
async def update_title(
    conversation_id: str,
    request: UpdateTitleRequest,
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    return await controller.update_title(conversation_id, request, db_session=db_session)


@router.post("/{conversation_id}/messages", response_model=MessageDTO)
@inject
async def send_message(
    conversation_id: str,
    request: SendMessageRequest,
    http_request: Request,
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Send a user message and return the assistant reply."""
    return await cancel_on_disconnect(
        http_request,
        controller.send_message(conversation_id, request, db_session=db_session),
    )
