"""LLM adapter over the upstream chat model (OpenAI-compatible, via LangChain).

Two operations:

- ``complete``: system prompt + ordered history -> assistant text.
- ``complete_typed``: system prompt + user prompt -> instance of a pydantic
  model, using the provider's native structured-output mechanism.

Provider failures are translated into the service's upstream error kinds.
Calls are never retried here; the upstream is not assumed idempotent.
"""
from __future__ import annotations

import asyncio
import json
import time
from typing import Any, List, Mapping, Optional, Sequence, Type, TypeVar

import openai
import structlog
from langchain_core.exceptions import OutputParserException
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ValidationError

from api.shared.exceptions import (
    ChatServiceException,
    UpstreamMalformedError,
    UpstreamRateLimitedError,
    UpstreamRejectedError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)

logger = structlog.get_logger("chat.llm")

M = TypeVar("M", bound=BaseModel)

_REJECTED_ERRORS = (
    openai.BadRequestError,
    openai.AuthenticationError,
    openai.PermissionDeniedError,
    openai.NotFoundError,
    openai.UnprocessableEntityError,
)


def build_messages(
    system_prompt: str, history: Sequence[Mapping[str, str]]
) -> List[BaseMessage]:
    """Prepend the system prompt to a ``{role, content}`` history."""
    messages: List[BaseMessage] = [SystemMessage(content=system_prompt)]
    for entry in history:
        role = entry["role"]
        if role == "user":
            messages.append(HumanMessage(content=entry["content"]))
        elif role == "assistant":
            messages.append(AIMessage(content=entry["content"]))
        else:
            raise ValueError(f"Unsupported history role: {role!r}")
    return messages


def _message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    # Content blocks: keep the text parts in order.
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class LLMClient:
    """Stateless adapter; the underlying ChatOpenAI client is created lazily."""

    def __init__(
        self,
        *,
        model: str,
        api_key: str,
        base_url: Optional[str] = None,
        temperature: float = 0.7,
        timeout_seconds: float = 60.0,
    ):
        self.model = model
        self.api_key = api_key
        self.base_url = base_url or None
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self._llm: Optional[ChatOpenAI] = None

    @property
    def llm(self) -> ChatOpenAI:
        if self._llm is None:
            self._llm = ChatOpenAI(
                model=self.model,
                temperature=self.temperature,
                openai_api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                max_retries=0,
            )
        return self._llm

    async def complete(
        self, system_prompt: str, history: Sequence[Mapping[str, str]]
    ) -> str:
        """Return the full assistant text for ``history``."""
        messages = build_messages(system_prompt, history)
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(
                self.llm.ainvoke(messages), timeout=self.timeout_seconds
            )
        except Exception as exc:
            raise self._failed("complete", exc, start, messages=len(messages)) from exc

        text = _message_text(result)
        logger.info(
            "llm_complete",
            model=self.model,
            messages=len(messages),
            roles=[entry["role"] for entry in history],
            system_prompt_chars=len(system_prompt),
            input_chars=sum(len(entry["content"]) for entry in history),
            output_chars=len(text),
            latency_ms=int((time.perf_counter() - start) * 1000),
        )
        logger.debug("llm_complete_content", history=list(history), output=text)
        return text

    async def complete_typed(
        self, system_prompt: str, user_prompt: str, schema: Type[M]
    ) -> M:
        """Return ``schema`` parsed from a structured completion.

        ``schema`` must be a pydantic model: providers reject top-level
        arrays, so lists are wrapped in an object (e.g. ``BookList``).
        """
        if not (isinstance(schema, type) and issubclass(schema, BaseModel)):
            raise TypeError(
                "Structured completions require a pydantic model at the top level"
            )

        messages = build_messages(
            system_prompt, [{"role": "user", "content": user_prompt}]
        )
        structured = self.llm.with_structured_output(schema, method="json_schema")
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(
                structured.ainvoke(messages), timeout=self.timeout_seconds
            )
            parsed = result if isinstance(result, schema) else schema.model_validate(result)
        except Exception as exc:
            raise self._failed(
                "complete_typed", exc, start, schema=schema.__name__, structured=True
            ) from exc

        logger.info(
            "llm_complete_typed",
            model=self.model,
            schema=schema.__name__,
            system_prompt_chars=len(system_prompt),
            input_chars=len(user_prompt),
            output_chars=len(parsed.model_dump_json()),
            latency_ms=int((time.perf_counter() - start) * 1000),
        )
        logger.debug("llm_complete_typed_content", prompt=user_prompt, output=parsed.model_dump())
        return parsed

    def _failed(
        self, operation: str, exc: Exception, start: float, structured: bool = False, **fields: Any
    ) -> Exception:
        error = self.translate_error(exc, structured=structured)
        logger.warning(
            f"llm_{operation}_failed",
            model=self.model,
            error=exc.__class__.__name__,
            error_code=getattr(error, "error_code", None),
            latency_ms=int((time.perf_counter() - start) * 1000),
            **fields,
        )
        return error

    def translate_error(self, exc: Exception, *, structured: bool = False) -> Exception:
        """Map a provider/client exception onto an upstream error kind.

        Unknown exceptions are returned unchanged and surface as internal errors.
        """
        if isinstance(exc, ChatServiceException):
            return exc
        if isinstance(exc, (asyncio.TimeoutError, openai.APITimeoutError)):
            return UpstreamTimeoutError(self.timeout_seconds)
        if isinstance(exc, openai.RateLimitError):
            retry_after = exc.response.headers.get("retry-after") if exc.response is not None else None
            return UpstreamRateLimitedError("rate limit exceeded", retry_after=retry_after)
        if isinstance(exc, openai.APIConnectionError):
            return UpstreamUnavailableError("provider unreachable")
        if isinstance(exc, _REJECTED_ERRORS):
            return UpstreamRejectedError(
                "request rejected", {"status": getattr(exc, "status_code", None)}
            )
        if isinstance(exc, openai.APIStatusError):
            return UpstreamUnavailableError(
                "provider failed", {"status": exc.status_code}
            )
        if isinstance(exc, (OutputParserException, ValidationError, json.JSONDecodeError)):
            return UpstreamMalformedError("structured output could not be parsed")
        if structured and isinstance(exc, ValueError):
            # Refusals and empty parses surface as ValueError from the parser.
            return UpstreamMalformedError("structured output could not be parsed")
        return exc
