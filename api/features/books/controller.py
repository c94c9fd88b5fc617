"""Controller for the Books feature."""
from api.features.books.dtos import BookList
from api.features.books.service import BookService
from api.shared.exceptions import BadRequestError


class BookController:
    def __init__(self, book_service: BookService):
        self.book_service = book_service

    async def get_books(self, topic: str) -> BookList:
        topic = topic.strip()
        if not topic:
            raise BadRequestError("Topic must not be blank")
        return await self.book_service.recommend(topic)
