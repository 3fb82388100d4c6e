"""Unit tests for the OpenAI-backed translation provider."""
import json
import unittest
from unittest.mock import AsyncMock, MagicMock

from aiolimiter import AsyncLimiter
from openai import OpenAIError

from transl8.exceptions import ProviderError, StructuredResponseError
from transl8.providers import (
    OpenAITranslationProvider,
    StructuredTranslation,
    parse_structured_translation,
)


def _completion(content):
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    return response


class TestParseStructuredTranslation(unittest.TestCase):

    def test_valid_response(self):
        result = parse_structured_translation('{"description": "Lies den Leitfaden", "linkTexts": ["Leitfaden"]}')
        self.assertEqual(result, StructuredTranslation("Lies den Leitfaden", ("Leitfaden",)))

    def test_invalid_json(self):
        with self.assertRaises(StructuredResponseError) as cm:
            parse_structured_translation("not json")
        self.assertEqual(cm.exception.raw_response, "not json")

    def test_schema_mismatch(self):
        for payload in ({"description": "x"}, {"description": "x", "linkTexts": [1]}, {"linkTexts": []}):
            with self.subTest(payload=payload):
                with self.assertRaises(StructuredResponseError):
                    parse_structured_translation(json.dumps(payload))


class TestOpenAITranslationProvider(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.client = MagicMock()
        self.client.chat.completions.create = AsyncMock()
        self.provider = OpenAITranslationProvider(self.client, "gpt-test", temperature=0.1, timeout=5.0)

    async def test_translate_sends_system_and_user_messages(self):
        self.client.chat.completions.create.return_value = _completion("  Speichern  ")

        result = await self.provider.translate("system text", "user text")

        self.assertEqual(result, "Speichern")
        kwargs = self.client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-test")
        self.assertEqual(kwargs["temperature"], 0.1)
        self.assertEqual(kwargs["timeout"], 5.0)
        self.assertEqual([m["role"] for m in kwargs["messages"]], ["system", "user"])
        self.assertEqual(kwargs["messages"][1]["content"], "user text")
        self.assertNotIn("response_format", kwargs)

    async def test_api_error_becomes_provider_error(self):
        self.client.chat.completions.create.side_effect = OpenAIError("quota exceeded")

        with self.assertRaises(ProviderError) as cm:
            await self.provider.translate("s", "u")
        self.assertIn("quota exceeded", str(cm.exception))

    async def test_empty_response_is_provider_error(self):
        for response in (_completion(""), _completion(None), MagicMock(choices=[])):
            with self.subTest(response=response):
                self.client.chat.completions.create.return_value = response
                with self.assertRaises(ProviderError):
                    await self.provider.translate("s", "u")

    async def test_structured_request_uses_json_mode(self):
        self.client.chat.completions.create.return_value = _completion(
            '{"description": "Lies den Leitfaden", "linkTexts": ["Leitfaden"]}'
        )

        result = await self.provider.translate_structured("s", "u")

        self.assertEqual(result.link_texts, ("Leitfaden",))
        kwargs = self.client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["response_format"], {"type": "json_object"})

    async def test_structured_request_with_bad_payload(self):
        self.client.chat.completions.create.return_value = _completion('{"description": "only"}')

        with self.assertRaises(StructuredResponseError):
            await self.provider.translate_structured("s", "u")

    async def test_rate_limiter_is_used(self):
        limiter = AsyncLimiter(100, 1)
        provider = OpenAITranslationProvider(self.client, "gpt-test", rate_limiter=limiter)
        self.client.chat.completions.create.return_value = _completion("Hallo")

        self.assertEqual(await provider.translate("s", "u"), "Hallo")
        self.assertEqual(self.client.chat.completions.create.await_count, 1)


if __name__ == '__main__':
    unittest.main()
