"""DTOs for the one-shot Chat feature."""
from pydantic import Field

from api.shared.dtos import BaseDTO


class ChatRequest(BaseDTO):
    message: str = Field(min_length=1, description="User message text")


class ChatResponse(BaseDTO):
    response: str = Field(description="Assistant reply")
