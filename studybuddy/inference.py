"""Inference client capability and the OpenAI chat-completions adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Protocol

from openai import AsyncOpenAI, OpenAIError

from .constants import DEFAULT_CHAT_MODEL, DEFAULT_MAX_OUTPUT_TOKENS, DEFAULT_TEMPERATURE
from .errors import InferenceError
from .state import PromptPayload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationOptions:
    """Per-deployment generation settings."""

    model: str = DEFAULT_CHAT_MODEL
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    temperature: float = DEFAULT_TEMPERATURE


class InferenceClient(Protocol):
    """Anything that turns a prompt payload into a lazy sequence of text fragments.

    Implementations raise ``InferenceError`` for any provider or transport
    failure. Normal exhaustion of the iterator is the completion signal.
    """

    def generate(self, payload: PromptPayload, streaming: bool = True) -> AsyncIterator[str]:
        ...


class OpenAIInferenceClient:
    """Streams chat completions from the OpenAI API."""

    def __init__(self, client: AsyncOpenAI, options: GenerationOptions | None = None) -> None:
        self.client = client
        self.options = options or GenerationOptions()

    async def generate(self, payload: PromptPayload, streaming: bool = True) -> AsyncIterator[str]:
        messages = payload.to_messages()
        if not streaming:
            try:
                completion = await self.client.chat.completions.create(
                    model=self.options.model,
                    temperature=self.options.temperature,
                    max_tokens=self.options.max_output_tokens,
                    messages=messages,
                )
            except OpenAIError as exc:
                raise InferenceError(f"Provider request failed: {exc}", cause=exc) from exc
            text = completion.choices[0].message.content or ""
            if text:
                yield text
            return

        try:
            stream = await self.client.chat.completions.create(
                model=self.options.model,
                temperature=self.options.temperature,
                max_tokens=self.options.max_output_tokens,
                messages=messages,
                stream=True,
            )
        except OpenAIError as exc:
            raise InferenceError(f"Provider request failed: {exc}", cause=exc) from exc

        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content or ""
                if text:
                    yield text
        except OpenAIError as exc:
            raise InferenceError(f"Provider stream failed: {exc}", cause=exc) from exc
        finally:
            # Runs on completion, failure, and when the consumer closes us early.
            await stream.close()
