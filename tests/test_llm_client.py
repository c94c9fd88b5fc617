"""Tests for the LLM adapter with the chat model stubbed out."""
import asyncio

import httpx
import openai
import pytest
from langchain_core.exceptions import OutputParserException
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from api.features.books.dtos import BookList
from api.shared.exceptions import (
    UpstreamMalformedError,
    UpstreamRateLimitedError,
    UpstreamRejectedError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from infra.llm import LLMClient, build_messages

REQUEST = httpx.Request("POST", "https://api.example.com/v1/chat/completions")


def _response(status, headers=None):
    return httpx.Response(status, headers=headers or {}, request=REQUEST)


class StubStructured:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.messages = None

    async def ainvoke(self, messages):
        self.messages = messages
        if self.error is not None:
            raise self.error
        return self.result


class StubChatModel:
    def __init__(self, reply="ok", error=None, delay=0.0, structured=None):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.structured = structured
        self.messages = None
        self.structured_args = None

    async def ainvoke(self, messages):
        self.messages = messages
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)

    def with_structured_output(self, schema, method=None):
        self.structured_args = (schema, method)
        return self.structured


def _client(stub, timeout_seconds=5.0):
    client = LLMClient(model="test-model", api_key="test-key", timeout_seconds=timeout_seconds)
    client._llm = stub
    return client


class TestBuildMessages:
    def test_prepends_system_prompt_and_maps_roles(self):
        messages = build_messages(
            "sys",
            [
                {"role": "user", "content": "q1"},
                {"role": "assistant", "content": "a1"},
                {"role": "user", "content": "q2"},
            ],
        )
        assert [type(m) for m in messages] == [
            SystemMessage, HumanMessage, AIMessage, HumanMessage
        ]
        assert [m.content for m in messages] == ["sys", "q1", "a1", "q2"]

    def test_rejects_unknown_role(self):
        with pytest.raises(ValueError):
            build_messages("sys", [{"role": "system", "content": "x"}])


class TestComplete:
    async def test_returns_reply_text(self):
        stub = StubChatModel(reply="你好")
        client = _client(stub)

        text = await client.complete("sys", [{"role": "user", "content": "hi"}])

        assert text == "你好"
        assert stub.messages[0].content == "sys"
        assert stub.messages[-1].content == "hi"

    async def test_deadline_becomes_timeout_error(self):
        client = _client(StubChatModel(delay=1.0), timeout_seconds=0.01)

        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await client.complete("sys", [{"role": "user", "content": "hi"}])
        assert exc_info.value.status_code == 504

    async def test_connection_error_becomes_unavailable(self):
        client = _client(StubChatModel(error=openai.APIConnectionError(request=REQUEST)))

        with pytest.raises(UpstreamUnavailableError):
            await client.complete("sys", [{"role": "user", "content": "hi"}])

    async def test_unknown_error_propagates_unchanged(self):
        client = _client(StubChatModel(error=KeyError("boom")))

        with pytest.raises(KeyError):
            await client.complete("sys", [{"role": "user", "content": "hi"}])


class TestCompleteTyped:
    async def test_parses_into_schema(self):
        structured = StubStructured(
            result={
                "books": [
                    {
                        "title": "T",
                        "author": "A",
                        "publisher": "P",
                        "yearPublished": 2001,
                        "topics": ["x"],
                    }
                ]
            }
        )
        stub = StubChatModel(structured=structured)
        client = _client(stub)

        books = await client.complete_typed("sys", "prompt", BookList)

        assert isinstance(books, BookList)
        assert books.books[0].year_published == 2001
        assert stub.structured_args == (BookList, "json_schema")
        assert [m.content for m in structured.messages] == ["sys", "prompt"]

    async def test_returns_model_instances_as_is(self):
        expected = BookList(books=[])
        client = _client(StubChatModel(structured=StubStructured(result=expected)))

        assert await client.complete_typed("sys", "prompt", BookList) is expected

    @pytest.mark.parametrize(
        "structured",
        [
            StubStructured(error=OutputParserException("not json")),
            StubStructured(result={"books": [{"title": "only"}]}),
            StubStructured(error=ValueError("refused")),
        ],
    )
    async def test_unparseable_output_is_malformed(self, structured):
        client = _client(StubChatModel(structured=structured))

        with pytest.raises(UpstreamMalformedError) as exc_info:
            await client.complete_typed("sys", "prompt", BookList)
        assert exc_info.value.status_code == 502

    async def test_requires_model_schema(self):
        client = _client(StubChatModel())

        with pytest.raises(TypeError):
            await client.complete_typed("sys", "prompt", list)


class TestTranslateError:
    @pytest.fixture
    def client(self):
        return LLMClient(model="test-model", api_key="test-key", timeout_seconds=30)

    def test_rate_limit_carries_retry_after(self, client):
        exc = openai.RateLimitError(
            "slow down", response=_response(429, {"retry-after": "3"}), body=None
        )
        error = client.translate_error(exc)
        assert isinstance(error, UpstreamRateLimitedError)
        assert error.retry_after == "3"
        assert error.status_code == 429

    def test_rate_limit_without_header(self, client):
        exc = openai.RateLimitError("slow down", response=_response(429), body=None)
        assert client.translate_error(exc).retry_after is None

    def test_client_timeout(self, client):
        error = client.translate_error(openai.APITimeoutError(request=REQUEST))
        assert isinstance(error, UpstreamTimeoutError)
        assert error.details == {"timeout_seconds": 30}

    def test_rejected_request(self, client):
        exc = openai.BadRequestError("bad", response=_response(400), body=None)
        error = client.translate_error(exc)
        assert isinstance(error, UpstreamRejectedError)
        assert error.status_code == 502

    def test_server_error_is_unavailable(self, client):
        exc = openai.InternalServerError("oops", response=_response(503), body=None)
        error = client.translate_error(exc)
        assert isinstance(error, UpstreamUnavailableError)
        assert error.details == {"status": 503}

    def test_value_error_only_malformed_when_structured(self, client):
        exc = ValueError("x")
        assert client.translate_error(exc) is exc
        assert isinstance(client.translate_error(exc, structured=True), UpstreamMalformedError)
