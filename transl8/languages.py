"""Supported target languages."""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional


@dataclass(frozen=True)
class LanguageInfo:
    code: str
    name: str
    native_name: str


SUPPORTED_LANGUAGES: List[LanguageInfo] = [
    LanguageInfo("en", "English", "English"),
    LanguageInfo("de", "German", "Deutsch"),
    LanguageInfo("es", "Spanish", "Español"),
    LanguageInfo("fr", "French", "Français"),
    LanguageInfo("it", "Italian", "Italiano"),
    LanguageInfo("pt", "Portuguese", "Português"),
    LanguageInfo("ja", "Japanese", "日本語"),
    LanguageInfo("ko", "Korean", "한국어"),
    LanguageInfo("zh", "Chinese (Simplified)", "简体中文"),
    LanguageInfo("zh-TW", "Chinese (Traditional)", "繁體中文"),
    LanguageInfo("ru", "Russian", "Русский"),
    LanguageInfo("ar", "Arabic", "العربية"),
    LanguageInfo("hi", "Hindi", "हिन्दी"),
    LanguageInfo("nl", "Dutch", "Nederlands"),
    LanguageInfo("pl", "Polish", "Polski"),
    LanguageInfo("tr", "Turkish", "Türkçe"),
    LanguageInfo("vi", "Vietnamese", "Tiếng Việt"),
    LanguageInfo("th", "Thai", "ไทย"),
    LanguageInfo("sv", "Swedish", "Svenska"),
    LanguageInfo("da", "Danish", "Dansk"),
    LanguageInfo("fi", "Finnish", "Suomi"),
    LanguageInfo("no", "Norwegian", "Norsk"),
    LanguageInfo("cs", "Czech", "Čeština"),
    LanguageInfo("uk", "Ukrainian", "Українська"),
]


def build_languages_from_locales(locales_list: Iterable[Dict[str, str]]) -> List[LanguageInfo]:
    """
    Build language entries from the ``supported_locales`` config section.

    Entries without a code or a name are skipped; ``native_name`` defaults to the name.
    """
    languages: List[LanguageInfo] = []
    for locale in locales_list:
        code = locale.get('code')
        name = locale.get('name')
        if code and name:
            languages.append(LanguageInfo(code, name, locale.get('native_name', name)))
    return languages


def get_language_info(code: str, languages: Optional[Iterable[LanguageInfo]] = None) -> Optional[LanguageInfo]:
    for language in languages if languages is not None else SUPPORTED_LANGUAGES:
        if language.code == code:
            return language
    return None


def build_language_names(languages: Iterable[LanguageInfo]) -> Dict[str, str]:
    """Map language codes to display names."""
    return {language.code: language.name for language in languages}
