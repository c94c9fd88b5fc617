"""Structured book recommendations."""
import logging

from api.features.books.dtos import BookList
from infra.llm import LLMClient
from prompts.books import BOOK_SYSTEM_PROMPT, build_book_user_prompt

logger = logging.getLogger("chat.books.service")


class BookService:
    def __init__(self, llm_client: LLMClient):
        self.llm_client = llm_client

    async def recommend(self, topic: str) -> BookList:
        book_list = await self.llm_client.complete_typed(
            BOOK_SYSTEM_PROMPT, build_book_user_prompt(topic=topic), BookList
        )
        logger.info(f"Recommended {len(book_list.books)} books for topic '{topic}'")
        return book_list
