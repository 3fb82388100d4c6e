"""Reading and writing translation files (one JSON document per language)."""
import json
import logging
import os
from typing import Dict, Iterable, List, Optional

from transl8.exceptions import TreeNotFoundError, TreeParseError
from transl8.tree_model import TranslationTree

logger = logging.getLogger(__name__)

TRANSLATION_FILE_EXTENSION = ".json"


def translation_file_path(messages_dir: str, language_code: str) -> str:
    return os.path.join(messages_dir, f"{language_code}{TRANSLATION_FILE_EXTENSION}")


def language_code_from_path(file_path: str) -> str:
    """Get the language code from a translation file path, e.g. "messages/de.json" -> "de"."""
    file_name = os.path.basename(file_path)
    if file_name.endswith(TRANSLATION_FILE_EXTENSION):
        return file_name[:-len(TRANSLATION_FILE_EXTENSION)]
    return file_name


def load_translation_tree(file_path: str) -> TranslationTree:
    """
    Load a translation file.

    Args:
        file_path (str): Path to the JSON file.

    Returns:
        TranslationTree: The decoded tree.

    Raises:
        TreeNotFoundError: If the file does not exist.
        TreeParseError: If the file is not valid JSON or its top level is not an object.
    """
    if not os.path.exists(file_path):
        raise TreeNotFoundError(file_path)
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            tree = json.load(f)
    except json.JSONDecodeError as json_exc:
        raise TreeParseError(file_path, str(json_exc)) from json_exc
    except UnicodeDecodeError as decode_exc:
        raise TreeParseError(file_path, f"not valid UTF-8 ({decode_exc})") from decode_exc

    if not isinstance(tree, dict):
        raise TreeParseError(file_path, "the top-level JSON value must be an object")
    return tree


def save_translation_tree(file_path: str, tree: TranslationTree) -> None:
    """Write a tree as UTF-8 JSON with 2-space indentation and a trailing newline."""
    output_dir = os.path.dirname(file_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(json.dumps(tree, indent=2, ensure_ascii=False) + "\n")
    logger.debug("Saved translation file '%s'.", file_path)


def list_translation_files(messages_dir: str) -> List[str]:
    """
    List the JSON translation files of a messages directory, sorted by name.

    Raises:
        TreeNotFoundError: If the directory does not exist.
    """
    if not os.path.isdir(messages_dir):
        raise TreeNotFoundError(messages_dir)
    return [
        os.path.join(messages_dir, name)
        for name in sorted(os.listdir(messages_dir))
        if name.endswith(TRANSLATION_FILE_EXTENSION)
    ]


def load_reference_trees(messages_dir: str, exclude: Optional[Iterable[str]] = None) -> Dict[str, TranslationTree]:
    """
    Load every translation file except the excluded language codes.

    A file that cannot be parsed is skipped with a warning so one broken
    language does not stop work on the others.

    Args:
        messages_dir (str): The messages directory.
        exclude (Optional[Iterable[str]]): Language codes to leave out (typically source and target).

    Returns:
        Dict[str, TranslationTree]: Trees keyed by language code.
    """
    excluded = set(exclude or ())
    trees: Dict[str, TranslationTree] = {}
    for file_path in list_translation_files(messages_dir):
        code = language_code_from_path(file_path)
        if code in excluded:
            continue
        try:
            trees[code] = load_translation_tree(file_path)
        except TreeParseError as parse_exc:
            logger.warning("Skipping '%s': %s", file_path, parse_exc)
    return trees
