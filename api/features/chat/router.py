"""Router for the Chat feature."""
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Request

from api.di.container import ApplicationContainer as DependencyContainer
from api.features.chat.controller import ChatController
from api.features.chat.dtos import ChatRequest, ChatResponse
from api.shared.utils import cancel_on_disconnect

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
@inject
async def chat(
    request: ChatRequest,
    http_request: Request,
    controller: ChatController = Depends(
        Provide[DependencyContainer.controllers.chat_controller]
    ),
):
    """Answer a single message with the assistant system prompt."""
    return await cancel_on_disconnect(http_request, controller.chat(request))
