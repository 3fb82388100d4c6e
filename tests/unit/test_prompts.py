"""Unit tests for prompt construction and cleanup of model output."""
from unittest.mock import patch

import pytest

from transl8.glossary import Glossary, GlossaryEntry
from transl8.orchestrator import TranslationContext
from transl8.prompts import (
    build_description_with_links_prompt,
    build_system_prompt,
    build_translation_prompt,
    clean_translated_text,
    count_tokens,
    extract_placeholders,
    find_missing_placeholders,
    has_placeholders,
    strip_extra_quotes,
)
from transl8.similarity_index import SimilarExample


class TestPlaceholders:

    def test_extract_placeholders(self):
        assert extract_placeholders("Hello {name}, you have {count} items") == ["name", "count"]
        assert extract_placeholders("No placeholders") == []

    def test_has_placeholders(self):
        assert has_placeholders("Wait {seconds}s")
        assert not has_placeholders("Wait a bit")
        assert not has_placeholders("Empty {} braces")

    def test_find_missing_placeholders(self):
        assert find_missing_placeholders("Hi {name} ({count})", "Hallo {name}") == ["count"]
        assert find_missing_placeholders("Hi {name}", "Hallo {name}") == []


class TestCleanTranslatedText:

    @pytest.mark.parametrize("translated,original,expected", [
        ('"Speichern"', "Save", "Speichern"),
        ('"Er sagte "Hallo""', 'He said "Hello"', 'Er sagte "Hallo"'),
        ('"Zitat"', '"Quote"', '"Zitat"'),
        ("`Speichern`", "Save", "Speichern"),
        ("```\nSpeichern\n```", "Save", "Speichern"),
        ("```Speichern```", "Save", "Speichern"),
        ("  Speichern  ", "Save", "Speichern"),
        ("Speichern", "Save", "Speichern"),
        ('"', "Save", '"'),
    ])
    def test_documented_cases(self, translated, original, expected):
        assert clean_translated_text(translated, original) == expected

    def test_only_one_layer_is_removed(self):
        assert clean_translated_text('""Doppelt""', "Double") == '"Doppelt"'

    def test_strip_extra_quotes_leaves_backticks(self):
        assert strip_extra_quotes("`code`", "code") == "`code`"
        assert strip_extra_quotes('"Speichern"', "Save") == "Speichern"


class TestPromptBuilders:

    def test_system_prompt_includes_language_and_glossary(self, german):
        glossary = Glossary(protected_terms=(
            GlossaryEntry("Moments", "Feature name", translations={"de": "Momente"}),
            GlossaryEntry("Acme", "Brand"),
        ))

        prompt = build_system_prompt(german, glossary)

        assert "from English to German (Deutsch)" in prompt
        assert "{name}" in prompt
        assert "GLOSSARY" in prompt
        assert '"Moments" → "Momente" (Feature name)' in prompt
        assert '"Acme" - keep as "Acme" (Brand)' in prompt

    def test_system_prompt_without_glossary(self, german):
        assert "GLOSSARY" not in build_system_prompt(german, Glossary())

    def test_translation_prompt_sections(self, german):
        context = TranslationContext(
            key="common.greeting",
            source_value="Hello {name}",
            parent_section="common",
            existing_translations={"fr": "Bonjour {name}"},
            similar_examples=(SimilarExample("Hello there", "Hallo zusammen", "common.hello"),),
        )

        prompt = build_translation_prompt(context, german, {"fr": "French"})

        assert prompt.startswith('Translate to German:\n\n"Hello {name}"\n\nKey: common.greeting\n')
        assert "English length: 12 chars, aim for around 12-14 chars" in prompt
        assert '- "Hello there" → "Hallo zusammen"' in prompt
        assert '- French (14 chars): "Bonjour {name}"' in prompt
        assert "MUST be preserved exactly: {name}" in prompt
        assert prompt.endswith("Respond with ONLY the translated string, nothing else.")

    def test_source_language_name_is_configurable(self, german):
        system = build_system_prompt(german, None, "Spanish")
        prompt = build_translation_prompt(TranslationContext("a", "Guardar"), german, None, "Spanish")

        assert "from Spanish to German (Deutsch)" in system
        assert "similar length to the Spanish original" in system
        assert "English" not in system.split("CRITICAL GUIDELINES")[0]
        assert "Spanish length: 7 chars" in prompt
        assert "English length" not in prompt

    def test_translation_prompt_omits_empty_sections(self, german):
        prompt = build_translation_prompt(TranslationContext("a", "Save"), german)

        assert "Similar phrases" not in prompt
        assert "Reference translations" not in prompt
        assert "placeholders" not in prompt

    def test_description_with_links_prompt(self, german):
        prompt = build_description_with_links_prompt("Read our guide", ("guide",), german)

        assert "It contains 1 link(s) with anchor text: \"guide\"" in prompt
        assert '{"description": "your full translated description"' in prompt
        assert prompt.endswith('Description to translate:\n"Read our guide"')


class TestCountTokens:

    def test_falls_back_to_whitespace_split(self):
        with patch("transl8.prompts.tiktoken.encoding_for_model", side_effect=KeyError("unknown")), \
                patch("transl8.prompts.tiktoken.get_encoding", side_effect=ValueError("offline")):
            assert count_tokens("one two three", "unknown-model") == 3

    def test_uses_tiktoken_encoding(self):
        class FakeEncoding:
            def encode(self, text):
                return list(text)

        with patch("transl8.prompts.tiktoken.encoding_for_model", return_value=FakeEncoding()):
            assert count_tokens("abcd", "gpt-4o") == 4
