"""Merges translated content back into trees that mirror the source's key order and container shapes."""
import logging
from typing import Any, Dict, Iterable, List

from transl8.tree_model import (
    TranslationTree,
    assign_value_at_path,
    deep_copy_tree,
    is_container,
)

logger = logging.getLogger(__name__)


def _reconcile_value(source_value: Any, content_value: Any) -> Any:
    if isinstance(source_value, dict):
        if isinstance(content_value, dict):
            return reorder_to_match_source(source_value, content_value)
        # Shape disagreement: a broken subtree cannot be rendered, keep the source shape.
        return deep_copy_tree(source_value)

    if isinstance(source_value, list):
        if isinstance(content_value, list) and len(content_value) == len(source_value):
            return [_reconcile_value(s, c) for s, c in zip(source_value, content_value)]
        # Partial or garbled arrays are not safely mergeable.
        return deep_copy_tree(source_value)

    if content_value is None or is_container(content_value):
        return source_value
    return content_value


def reorder_to_match_source(source: TranslationTree, content: TranslationTree) -> TranslationTree:
    """
    Merge ``content`` into the structure of ``source``.

    The result has exactly the source's key set and key order at every level,
    so translated files always diff cleanly against the source file. Content
    values win wherever their shape agrees with the source; everything else
    falls back to the source.

    Args:
        source (TranslationTree): The authoritative tree providing keys, order and shapes.
        content (TranslationTree): Tree holding translated (or hand-edited) values.

    Returns:
        TranslationTree: A new tree; neither argument is modified.
    """
    if isinstance(source, list):
        return _reconcile_value(source, content)

    content_map = content if isinstance(content, dict) else {}
    result: Dict[str, Any] = {}
    for key, source_value in source.items():
        result[key] = _reconcile_value(source_value, content_map.get(key))
    return result


def apply_translation_results(
        source: TranslationTree,
        target: TranslationTree,
        results: Iterable,
) -> TranslationTree:
    """
    Write translation results into a copy of ``target`` and reorder it to match ``source``.

    This is the only place a target tree is changed, and it runs once after all
    results are in, so a failed run never leaves a half-merged tree behind.

    Args:
        source (TranslationTree): The source tree, also used as the shape reference
            for containers created along the way.
        target (TranslationTree): The existing target tree.
        results (Iterable[TranslationResult]): Objects exposing ``key`` and ``translated_value``.

    Returns:
        TranslationTree: The merged tree.
    """
    updated = deep_copy_tree(target)
    applied: List[str] = []
    for result in results:
        assign_value_at_path(updated, result.key, result.translated_value, source)
        applied.append(result.key)
    logger.debug("Applied %d translation result(s) before reordering.", len(applied))
    return reorder_to_match_source(source, updated)
