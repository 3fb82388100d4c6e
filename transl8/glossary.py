"""Protected-term glossary: terms that must be kept verbatim or translated with an approved override."""
import json
import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from transl8.exceptions import TreeParseError

logger = logging.getLogger(__name__)

DEFAULT_GLOSSARY_DESCRIPTION = "Protected terms that should not be directly translated. Managed by transl8."


@dataclass(frozen=True)
class GlossaryEntry:
    """
    A protected term.

    ``translations`` maps a language code to its approved translation. When a
    language has no override the term is kept exactly as written.
    """
    term: str
    description: str = ""
    case_sensitive: bool = True
    translations: Dict[str, str] = field(default_factory=dict)

    def override_for(self, language_code: str) -> Optional[str]:
        return self.translations.get(language_code) or None


@dataclass(frozen=True)
class Glossary:
    protected_terms: Tuple[GlossaryEntry, ...] = ()
    description: str = DEFAULT_GLOSSARY_DESCRIPTION

    def find(self, term: str) -> Optional[GlossaryEntry]:
        """Look up an entry by term, case-insensitively."""
        for entry in self.protected_terms:
            if entry.term.lower() == term.lower():
                return entry
        return None


def _entry_from_dict(raw: Dict[str, Any]) -> GlossaryEntry:
    return GlossaryEntry(
        term=str(raw['term']),
        description=str(raw.get('description', '')),
        case_sensitive=bool(raw.get('case_sensitive', True)),
        translations={str(k): str(v) for k, v in (raw.get('translations') or {}).items()},
    )


def glossary_to_dict(glossary: Glossary) -> Dict[str, Any]:
    return {
        "description": glossary.description,
        "protected_terms": [
            {
                "term": entry.term,
                "description": entry.description,
                "case_sensitive": entry.case_sensitive,
                "translations": dict(entry.translations),
            }
            for entry in glossary.protected_terms
        ],
    }


def load_glossary(glossary_file_path: str) -> Glossary:
    """
    Load the glossary from a JSON file.

    Args:
        glossary_file_path (str): The path to the glossary JSON file.

    Returns:
        Glossary: The loaded glossary, or an empty glossary if the file does not exist.

    Raises:
        TreeParseError: If the file exists but is not a valid glossary document.
    """
    if not os.path.exists(glossary_file_path):
        logger.info("Glossary file '%s' not found. Continuing without protected terms.", glossary_file_path)
        return Glossary()
    try:
        with open(glossary_file_path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
        entries = tuple(_entry_from_dict(item) for item in raw.get('protected_terms', []))
    except json.JSONDecodeError as json_exc:
        raise TreeParseError(glossary_file_path, str(json_exc)) from json_exc
    except (AttributeError, KeyError, TypeError) as shape_exc:
        raise TreeParseError(glossary_file_path, f"unexpected glossary structure ({shape_exc})") from shape_exc
    return Glossary(protected_terms=entries, description=raw.get('description', DEFAULT_GLOSSARY_DESCRIPTION))


def save_glossary(glossary_file_path: str, glossary: Glossary) -> None:
    glossary_dir = os.path.dirname(glossary_file_path)
    if glossary_dir:
        os.makedirs(glossary_dir, exist_ok=True)
    with open(glossary_file_path, 'w', encoding='utf-8') as f:
        f.write(json.dumps(glossary_to_dict(glossary), indent=2, ensure_ascii=False) + "\n")


def add_term(
        glossary: Glossary,
        term: str,
        description: Optional[str] = None,
        translations: Optional[Dict[str, str]] = None
) -> Glossary:
    """
    Return a new glossary with ``term`` appended.

    Raises:
        ValueError: If the term is already present (compared case-insensitively).
    """
    if glossary.find(term):
        raise ValueError(f'Term "{term}" already exists in the glossary.')
    entry = GlossaryEntry(
        term=term,
        description=description or f'Protected term. Must remain "{term}" in all languages.',
        case_sensitive=True,
        translations=dict(translations or {}),
    )
    return replace(glossary, protected_terms=glossary.protected_terms + (entry,))


def remove_term(glossary: Glossary, term: str) -> Glossary:
    """
    Return a new glossary without ``term``.

    Raises:
        KeyError: If the term is not in the glossary.
    """
    entry = glossary.find(term)
    if entry is None:
        raise KeyError(term)
    return replace(glossary, protected_terms=tuple(e for e in glossary.protected_terms if e is not entry))


def parse_translation_overrides(values: List[str]) -> Dict[str, str]:
    """Parse ``lang:value`` command-line overrides; everything after the first colon is the value."""
    overrides: Dict[str, str] = {}
    for item in values:
        lang, sep, value = item.partition(':')
        if not sep or not lang:
            raise ValueError(f"Invalid translation override '{item}'. Expected the form lang:value.")
        overrides[lang] = value
    return overrides


def build_glossary_prompt_section(glossary: Glossary, language_code: str) -> str:
    """
    Build the protected-terms section of the system prompt for one language.

    Returns:
        str: The prompt section, or "" when the glossary has no terms.
    """
    if not glossary.protected_terms:
        return ""

    lines = []
    for entry in glossary.protected_terms:
        override = entry.override_for(language_code)
        if override:
            line = f'   - "{entry.term}" → "{override}" ({entry.description})'
        else:
            line = f'   - "{entry.term}" - keep as "{entry.term}" ({entry.description})'
        if not entry.case_sensitive:
            line += " [applies to any capitalization of the term]"
        lines.append(line)

    return "\n\n5. **GLOSSARY: PROTECTED TERMS (MUST follow exactly)**:\n" + "\n".join(lines)
