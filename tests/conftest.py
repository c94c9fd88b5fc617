"""Shared fixtures: SQLite store, fake LLM client, app with DI overrides."""
import os

import pytest
from dependency_injector import providers
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("OPENAI_API_KEY", "test-key")

from api.main import create_fastapi_app  # noqa: E402
from api.shared.entities.registry import BaseEntity  # noqa: E402
from infra.resources import DatabaseResource  # noqa: E402


class FakeLLMClient:
    """Stands in for ``infra.llm.LLMClient`` and records every call."""

    def __init__(self):
        self.default_reply = "reply-1"
        self.replies = []
        self.error = None
        self.typed_result = {"books": []}
        self.calls = []
        self.typed_calls = []

    async def complete(self, system_prompt, history):
        self.calls.append(
            {"system_prompt": system_prompt, "history": [dict(h) for h in history]}
        )
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return self.default_reply

    async def complete_typed(self, system_prompt, user_prompt, schema):
        self.typed_calls.append(
            {"system_prompt": system_prompt, "user_prompt": user_prompt, "schema": schema}
        )
        if self.error is not None:
            raise self.error
        return schema.model_validate(self.typed_result)


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
async def database(tmp_path):
    db = DatabaseResource(f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}")
    await db.init()
    await db.create_schema(BaseEntity.metadata)
    yield db
    await db.shutdown()


@pytest.fixture
async def db_session(database):
    session = database.get_session()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def app(database, fake_llm):
    _app = create_fastapi_app()
    _app.container.infrastructure.database.override(providers.Object(database))
    _app.container.infrastructure.llm_client.override(providers.Object(fake_llm))
    yield _app
    _app.container.infrastructure.database.reset_override()
    _app.container.infrastructure.llm_client.reset_override()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
