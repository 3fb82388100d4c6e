import asyncio
import json
import logging
import os
import re
from typing import Dict, Iterable, List, Optional

import pytest

from transl8.exceptions import ProviderError, StructuredResponseError
from transl8.languages import LanguageInfo
from transl8.providers import StructuredTranslation

GERMAN = LanguageInfo("de", "German", "Deutsch")

_KEY_LINE = re.compile(r'^Key: (.+)$', re.MULTILINE)


class FakeTranslationProvider:
    """
    In-memory stand-in for the OpenAI provider.

    ``translate`` answers "<prefix> <source value>" unless the key is listed in
    ``fail_keys``. Structured calls return ``structured`` or raise
    ``structured_error``. Concurrency is tracked so tests can check the pool bound.
    """

    def __init__(
            self,
            prefix: str = "[de]",
            fail_keys: Iterable[str] = (),
            structured: Optional[StructuredTranslation] = None,
            structured_error: Optional[Exception] = None,
            delays: Optional[Dict[str, float]] = None
    ):
        self.prefix = prefix
        self.fail_keys = set(fail_keys)
        self.structured = structured
        self.structured_error = structured_error
        self.delays = delays or {}
        self.prompts: List[str] = []
        self.structured_prompts: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @staticmethod
    def key_of(prompt: str) -> str:
        match = _KEY_LINE.search(prompt)
        return match.group(1) if match else ""

    @staticmethod
    def source_of(prompt: str) -> str:
        # Third line of the prompt is the quoted source value.
        return prompt.split("\n")[2][1:-1]

    async def translate(self, instructions: str, prompt: str) -> str:
        self.prompts.append(prompt)
        key = self.key_of(prompt)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(key, 0))
            if key in self.fail_keys:
                raise ProviderError(f"simulated failure for {key}")
            return f"{self.prefix} {self.source_of(prompt)}"
        finally:
            self.in_flight -= 1

    async def translate_structured(self, instructions: str, prompt: str) -> StructuredTranslation:
        self.structured_prompts.append(prompt)
        await asyncio.sleep(0)
        if self.structured_error is not None:
            raise self.structured_error
        if self.structured is None:
            raise StructuredResponseError("no structured answer configured")
        return self.structured


@pytest.fixture
def german():
    return GERMAN


@pytest.fixture
def fake_provider():
    return FakeTranslationProvider()


@pytest.fixture
def provider_factory():
    """Build FakeTranslationProvider instances with custom behaviour."""
    return FakeTranslationProvider


@pytest.fixture
def source_tree():
    return {
        "common": {
            "save": "Save",
            "cancel": "Cancel",
            "greeting": "Hello {name}",
        },
        "home": {
            "hero": {
                "title": "Welcome to the app",
                "description": "Read our guide and the FAQ to get started.",
                "links": [
                    {"text": "guide", "href": "https://example.com/guide"},
                    {"text": "FAQ", "href": "https://example.com/faq"},
                ],
            },
        },
        "footer": {
            "privacy": {"label": "Privacy policy", "href": "https://example.com/privacy"},
        },
    }


@pytest.fixture
def target_tree():
    return {
        "common": {
            "save": "Speichern",
            "obsolete": "Veraltet",
        },
        "home": {
            "hero": {
                "title": "Willkommen in der App",
            },
        },
    }


@pytest.fixture
def messages_dir(tmp_path, source_tree, target_tree):
    """A messages directory with en (source), de (partial) and fr files plus a glossary and config."""
    messages = tmp_path / "messages"
    messages.mkdir()
    for code, tree in (("en", source_tree), ("de", target_tree), ("fr", {"common": {"save": "Enregistrer"}})):
        with open(messages / f"{code}.json", "w", encoding="utf-8") as f:
            json.dump(tree, f, indent=2, ensure_ascii=False)
    with open(tmp_path / "glossary.json", "w", encoding="utf-8") as f:
        json.dump({"description": "test", "protected_terms": [
            {"term": "FAQ", "description": "Acronym", "case_sensitive": True, "translations": {}}
        ]}, f)
    with open(tmp_path / "transl8.yaml", "w", encoding="utf-8") as f:
        f.write("messages_dir: ./messages\nglossary_file_path: ./glossary.json\nconcurrency: 4\n")
    return str(messages)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep the developer's configuration and API key out of the tests."""
    for name in ("TRANSL8_CONFIG_FILE", "TRANSL8_MODEL", "TRANSL8_CONCURRENCY", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    yield
    logger = logging.getLogger("transl8")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def read_json(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def read_tree():
    return read_json


@pytest.fixture
def chdir_tmp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return str(tmp_path)


@pytest.fixture
def file_path_of():
    def _path(messages: str, code: str) -> str:
        return os.path.join(messages, f"{code}.json")
    return _path
