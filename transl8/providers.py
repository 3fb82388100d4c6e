"""Translation capability backed by the OpenAI chat completions API."""
import json
import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import jsonschema
from aiolimiter import AsyncLimiter
from openai import AsyncOpenAI, OpenAIError
from openai.types.chat import (
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam
)

from transl8.exceptions import ProviderError, StructuredResponseError

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.3
DEFAULT_TIMEOUT = 60.0

# Shape expected from a joint description + links request.
STRUCTURED_TRANSLATION_SCHEMA = {
    "type": "object",
    "properties": {
        "description": {"type": "string"},
        "linkTexts": {
            "type": "array",
            "items": {"type": "string"}
        }
    },
    "required": ["description", "linkTexts"]
}


@dataclass(frozen=True)
class StructuredTranslation:
    description: str
    link_texts: Tuple[str, ...]


class TranslationProvider(Protocol):
    """The external translation capability the orchestrator depends on."""

    async def translate(self, instructions: str, prompt: str) -> str:
        ...

    async def translate_structured(self, instructions: str, prompt: str) -> StructuredTranslation:
        ...


def parse_structured_translation(response_text: str) -> StructuredTranslation:
    """
    Parse and validate a joint description + links response.

    Args:
        response_text (str): Raw model output, expected to be a JSON object.

    Returns:
        StructuredTranslation: The translated description and anchor texts.

    Raises:
        StructuredResponseError: If the text is not JSON or does not match the expected schema.
    """
    try:
        parsed = json.loads(response_text)
        jsonschema.validate(instance=parsed, schema=STRUCTURED_TRANSLATION_SCHEMA)
    except json.JSONDecodeError as json_exc:
        raise StructuredResponseError(f"Response is not valid JSON: {json_exc}", response_text) from json_exc
    except jsonschema.ValidationError as schema_exc:
        raise StructuredResponseError(
            f"Response does not match the expected schema: {schema_exc.message}", response_text
        ) from schema_exc
    return StructuredTranslation(parsed["description"], tuple(parsed["linkTexts"]))


class OpenAITranslationProvider:
    """
    Sends translation requests through ``AsyncOpenAI.chat.completions``.

    Every request is attempted exactly once. API failures are re-raised as
    ``ProviderError`` so callers only ever deal with one failure type.
    """

    def __init__(
            self,
            client: AsyncOpenAI,
            model_name: str,
            temperature: float = DEFAULT_TEMPERATURE,
            timeout: float = DEFAULT_TIMEOUT,
            rate_limiter: Optional[AsyncLimiter] = None
    ):
        self.client = client
        self.model_name = model_name
        self.temperature = temperature
        self.timeout = timeout
        self.rate_limiter = rate_limiter

    async def _complete(self, instructions: str, prompt: str, json_mode: bool = False) -> str:
        extra_args = {"response_format": {"type": "json_object"}} if json_mode else {}
        async with AsyncExitStack() as stack:
            if self.rate_limiter is not None:
                await stack.enter_async_context(self.rate_limiter)
            try:
                response = await self.client.chat.completions.create(
                    model=self.model_name,
                    messages=[
                        ChatCompletionSystemMessageParam(role="system", content=instructions),
                        ChatCompletionUserMessageParam(role="user", content=prompt)
                    ],
                    temperature=self.temperature,
                    timeout=self.timeout,
                    **extra_args
                )
            except OpenAIError as api_exc:
                raise ProviderError(f"{api_exc.__class__.__name__} - {api_exc}") from api_exc

        if not response.choices:
            raise ProviderError("The API returned no choices.")
        content = (response.choices[0].message.content or "").strip()
        if not content:
            raise ProviderError("The API returned an empty response.")
        return content

    async def translate(self, instructions: str, prompt: str) -> str:
        return await self._complete(instructions, prompt)

    async def translate_structured(self, instructions: str, prompt: str) -> StructuredTranslation:
        response_text = await self._complete(instructions, prompt, json_mode=True)
        try:
            return parse_structured_translation(response_text)
        except StructuredResponseError:
            logger.debug("Invalid structured response:\n---\n%s\n---", response_text)
            raise
