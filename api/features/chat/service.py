"""One-shot chat: a single user message, no persisted history."""
import logging

from infra.llm import LLMClient
from prompts.assistant import ASSISTANT_SYSTEM_PROMPT

logger = logging.getLogger("chat.chat.service")


class ChatService:
    def __init__(self, llm_client: LLMClient):
        self.llm_client = llm_client

    async def chat(self, message: str) -> str:
        reply = await self.llm_client.complete(
            ASSISTANT_SYSTEM_PROMPT, [{"role": "user", "content": message}]
        )
        logger.info(f"Generated response length: {len(reply)}")
        return reply
