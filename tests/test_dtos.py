"""Wire-format tests for the conversation DTOs."""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from api.features.conversation.dtos import (
    ConversationDTO,
    MessageDTO,
    SendMessageRequest,
    UpdateTitleRequest,
)
from api.features.conversation.entities.message import Message, MessageRole

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "role, wire", [(MessageRole.USER, "user"), (MessageRole.ASSISTANT, "assistant")]
)
def test_role_round_trips_through_the_wire(role, wire):
    entity = Message(id="m1", role=role, content="hi", position=0, created_at=NOW)

    dto = MessageDTO.from_entity(entity)
    payload = dto.model_dump(by_alias=True, mode="json")
    restored = MessageDTO.model_validate(payload)

    assert payload["role"] == wire
    assert restored.role == wire
    assert restored.to_role() is role
    assert role.name == wire.upper()


def test_message_dto_rejects_uppercase_role():
    with pytest.raises(ValidationError):
        MessageDTO(id="m1", role="USER", content="hi", created_at=NOW)


def test_role_from_wire_is_case_insensitive():
    assert MessageRole.from_wire("assistant") is MessageRole.ASSISTANT
    assert MessageRole.from_wire("USER") is MessageRole.USER


def test_conversation_dto_uses_camel_case():
    dto = ConversationDTO(id="c1", title=None, created_at=NOW, updated_at=NOW)

    payload = dto.model_dump(by_alias=True, mode="json")

    assert set(payload) == {"id", "title", "createdAt", "updatedAt", "messages"}
    assert payload["messages"] is None


def test_request_bodies_are_validated():
    assert SendMessageRequest.model_validate({"message": "hi"}).message == "hi"
    with pytest.raises(ValidationError):
        SendMessageRequest.model_validate({"message": ""})
    with pytest.raises(ValidationError):
        UpdateTitleRequest.model_validate({"title": "x" * 501})
