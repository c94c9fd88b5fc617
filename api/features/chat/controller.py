"""Controller for the Chat feature."""
import logging

from api.features.chat.dtos import ChatRequest, ChatResponse
from api.features.chat.service import ChatService

logger = logging.getLogger("chat.chat")


class ChatController:
    def __init__(self, chat_service: ChatService):
        self.chat_service = chat_service

    async def chat(self, request: ChatRequest) -> ChatResponse:
        logger.info(f"Received chat request, length: {len(request.message)}")
        reply = await self.chat_service.chat(request.message)
        return ChatResponse(response=reply)
