"""DTOs for the Books feature.

``BookList`` wraps the list because structured-output providers reject a
top-level array.
"""
from typing import List

from pydantic import Field

from api.shared.dtos import BaseDTO


class Book(BaseDTO):
    title: str = Field(description="Book title")
    author: str = Field(description="Author name")
    publisher: str = Field(description="Publisher name")
    year_published: int = Field(description="Year of first publication")
    topics: List[str] = Field(description="Topics the book covers")


class BookList(BaseDTO):
    books: List[Book] = Field(description="Recommended books")
