"""Prompt construction and post-processing of model output."""
import re
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

import tiktoken

from transl8.glossary import Glossary, build_glossary_prompt_section
from transl8.languages import LanguageInfo

if TYPE_CHECKING:
    from transl8.orchestrator import TranslationContext

PLACEHOLDER_PATTERN = re.compile(r'\{([^}]+)\}')

# Upper bound of the length target, relative to the source string.
LENGTH_TARGET_RATIO = 1.2


def has_placeholders(text: str) -> bool:
    return PLACEHOLDER_PATTERN.search(text) is not None


def extract_placeholders(text: str) -> List[str]:
    """
    Extract placeholder names from a string.

    Args:
        text (str): The text to scan, e.g. "Hello {name}, you have {count} items".

    Returns:
        List[str]: The names between the braces in order of appearance, e.g. ["name", "count"].
    """
    return PLACEHOLDER_PATTERN.findall(text)


def find_missing_placeholders(original_text: str, translated_text: str) -> List[str]:
    """Return the placeholders of ``original_text`` that do not appear in ``translated_text``."""
    translated = set(extract_placeholders(translated_text))
    return [p for p in extract_placeholders(original_text) if p not in translated]


def count_tokens(text: str, model_name: str = 'gpt-4o') -> int:
    """Count the number of tokens in ``text`` for ``model_name``.

    ``tiktoken.encoding_for_model`` does not know every model name and may need
    network access to fetch its data. If the model's encoding cannot be
    obtained, ``o200k_base`` is tried, and as a last resort a whitespace split
    is used.
    """
    try:
        encoding = tiktoken.encoding_for_model(model_name)
    except Exception:
        try:
            encoding = tiktoken.get_encoding("o200k_base")
        except Exception:
            return len(text.split())

    try:
        return len(encoding.encode(text))
    except Exception:
        return len(text.split())


def build_system_prompt(
        language: LanguageInfo,
        glossary: Optional[Glossary] = None,
        source_language_name: str = "English"
) -> str:
    """
    Build the system prompt for one target language.

    Args:
        language (LanguageInfo): The target language.
        glossary (Optional[Glossary]): Protected terms appended as the last guideline, if any.
        source_language_name (str): Display name of the language the source file is written in.

    Returns:
        str: The instruction block sent with every request for this language.
    """
    glossary_section = build_glossary_prompt_section(glossary, language.code) if glossary else ""

    return f"""You are an expert translator specializing in mobile app and web UI localization.

Your task is to translate UI strings from {source_language_name} to {language.name} ({language.native_name}).

CRITICAL GUIDELINES:

1. **LENGTH**: Aim for a similar length to the {source_language_name} original.
   - This is a UI: text appears in buttons, menus, labels, banners and cards
   - Prioritize natural, readable {language.name} over strict length matching
   - NEVER abbreviate words into fragments that are hard to read
   - If the natural translation is slightly longer, that is acceptable; broken or awkward text is worse

2. **PRESERVE PLACEHOLDERS EXACTLY**:
   - Keep {{name}}, {{count}}, {{seconds}}, etc. unchanged
   - Keep ICU plural syntax like {{count, plural, one {{# item}} other {{# items}}}}
   - Never translate placeholder names (don't change {{name}} to {{nombre}})

3. **TRANSLATION QUALITY**:
   - Use natural, idiomatic expressions in {language.name}
   - Maintain the same tone (casual/formal) as the original
   - Keep technical terms and brand names unchanged
   - Consider the UI context from the key path
   - Prefer common English loanwords in tech contexts when they sound more natural than the native equivalent

4. **DO NOT**:
   - Add quotes around your translation
   - Add explanations or notes
   - Invent abbreviations; if a word doesn't fit, use a shorter synonym instead
   - Change the meaning to fit length{glossary_section}"""


def build_translation_prompt(
        context: "TranslationContext",
        language: LanguageInfo,
        language_names: Optional[Dict[str, str]] = None,
        source_language_name: str = "English"
) -> str:
    """
    Build the user prompt for a single ordinary key.

    Args:
        context (TranslationContext): Source value, key path, similar examples and
            translations of the same key in other languages.
        language (LanguageInfo): The target language.
        language_names (Optional[Dict[str, str]]): Display names for the other-language references.
        source_language_name (str): Display name of the source language, used for the length hint.

    Returns:
        str: The prompt text.
    """
    language_names = language_names or {}
    char_count = len(context.source_value)
    target_max = round(char_count * LENGTH_TARGET_RATIO)

    prompt = (
        f'Translate to {language.name}:\n\n'
        f'"{context.source_value}"\n\n'
        f'Key: {context.key}\n'
        f'{source_language_name} length: {char_count} chars, aim for around {char_count}-{target_max} chars'
    )

    if context.similar_examples:
        prompt += "\n\nSimilar phrases already translated (use these for consistency):"
        for example in context.similar_examples:
            prompt += f'\n- "{example.source_value}" → "{example.translated_value}"'

    if context.existing_translations:
        prompt += "\n\nReference translations from other languages:"
        for code, value in context.existing_translations.items():
            prompt += f'\n- {language_names.get(code, code)} ({len(value)} chars): "{value}"'

    placeholders = extract_placeholders(context.source_value)
    if placeholders:
        joined = ", ".join(f"{{{p}}}" for p in placeholders)
        prompt += f"\n\nIMPORTANT: This string contains placeholders that MUST be preserved exactly: {joined}"

    prompt += "\n\nRespond with ONLY the translated string, nothing else."
    return prompt


def build_description_with_links_prompt(description: str, link_texts: Sequence[str], language: LanguageInfo) -> str:
    """Build the user prompt for a description and the anchor texts of its links."""
    link_list = ", ".join(f'"{text}"' for text in link_texts)
    return f"""Translate this description to {language.name}. It contains {len(link_texts)} link(s) with anchor text: {link_list}.

CRITICAL: Each link anchor must appear as an EXACT substring in your translated description. Translate each anchor phrase and use that EXACT phrase where the link appears in the description.

Return valid JSON only:
{{"description": "your full translated description", "linkTexts": ["translated anchor 1", "translated anchor 2", ...]}}

The linkTexts array must be in the same order as the anchors above. Each linkText must appear verbatim in the description.

Description to translate:
"{description}\""""


def strip_extra_quotes(translated_text: str, original_text: str) -> str:
    """
    Remove one pair of wrapping double quotes the model added.

    Quotes are only removed when the original text does not itself start with a
    double quote.
    """
    if original_text.startswith('"'):
        return translated_text
    if len(translated_text) >= 2 and translated_text.startswith('"') and translated_text.endswith('"'):
        return translated_text[1:-1]
    return translated_text


def clean_translated_text(translated_text: str, original_text: str) -> str:
    """
    Clean model output by removing a single layer of wrapping added around the translation.

    Triple-backtick fences are checked first, then single backticks, then double
    quotes. Whatever wrapping is found first is removed and nothing else is.

    Args:
        translated_text (str): The translated text.
        original_text (str): The original text.

    Returns:
        str: The cleaned translated text.
    """
    text = translated_text.strip()
    if len(text) >= 6 and text.startswith('```') and text.endswith('```'):
        return text[3:-3].strip()
    if len(text) >= 2 and text.startswith('`') and text.endswith('`') and not original_text.startswith('`'):
        return text[1:-1]
    return strip_extra_quotes(text, original_text)
