"""
Operations over translation trees.

A translation tree is the decoded form of a JSON messages file: nested ``dict``
objects whose leaves are strings. JSON arrays stay ``list`` containers and their
elements are addressed by decimal index inside a key path, so ``links.0.text``
is the ``text`` field of the first element of ``links``.

Every public function here is pure: trees passed in are never modified.
"""
import copy
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

TranslationTree = Union[Dict[str, Any], List[Any]]

KEY_PATH_SEPARATOR = "."


def is_container(value: Any) -> bool:
    """Return True for mappings and arrays, False for anything treated as a leaf."""
    return isinstance(value, (dict, list))


def split_key_path(key_path: str) -> List[str]:
    return key_path.split(KEY_PATH_SEPARATOR)


def join_key_path(prefix: str, segment: Any) -> str:
    return f"{prefix}{KEY_PATH_SEPARATOR}{segment}" if prefix else str(segment)


def parent_section(key_path: str) -> str:
    """
    Get the parent section of a key path.

    Args:
        key_path (str): A dot-joined key path, e.g. "home.hero.title".

    Returns:
        str: The path without its last segment ("home.hero"), or "" for a top-level key.
    """
    parts = split_key_path(key_path)
    return KEY_PATH_SEPARATOR.join(parts[:-1]) if len(parts) > 1 else ""


def key_name(key_path: str) -> str:
    return split_key_path(key_path)[-1]


def deep_copy_tree(tree: TranslationTree) -> TranslationTree:
    return copy.deepcopy(tree)


def _iter_children(container: TranslationTree) -> Iterator[Tuple[str, Any]]:
    if isinstance(container, list):
        for index, item in enumerate(container):
            yield str(index), item
    else:
        for key, item in container.items():
            yield str(key), item


_ABSENT = object()


def _get_child(container: TranslationTree, segment: str) -> Any:
    if isinstance(container, list):
        if not segment.isdigit():
            return _ABSENT
        index = int(segment)
        return container[index] if index < len(container) else _ABSENT
    return container.get(segment, _ABSENT)


def _resolve(tree: TranslationTree, key_path: str) -> Any:
    current: Any = tree
    for segment in split_key_path(key_path):
        if not is_container(current):
            return _ABSENT
        current = _get_child(current, segment)
        if current is _ABSENT:
            return _ABSENT
    return current


def _put_child(container: TranslationTree, segment: str, value: Any) -> None:
    if isinstance(container, list):
        if not segment.isdigit():
            raise ValueError(f"Cannot address an array element with the non-numeric key '{segment}'.")
        index = int(segment)
        while len(container) <= index:
            container.append(None)
        container[index] = value
    else:
        container[segment] = value


def flatten_keys(tree: TranslationTree, prefix: str = "") -> List[str]:
    """
    Flatten a tree into the key paths of its leaves.

    The traversal is depth-first and follows insertion order, so the result is
    stable for a given tree. Empty containers contribute no key paths.

    Args:
        tree (TranslationTree): The tree to flatten.
        prefix (str): Key path of ``tree`` inside a larger tree, if any.

    Returns:
        List[str]: Leaf key paths in traversal order.
    """
    keys: List[str] = []
    for key, value in _iter_children(tree):
        full_path = join_key_path(prefix, key)
        if is_container(value):
            keys.extend(flatten_keys(value, full_path))
        else:
            keys.append(full_path)
    return keys


def get_value_at_path(tree: TranslationTree, key_path: str) -> Optional[Any]:
    """
    Get the value (leaf or subtree) stored at a key path.

    Args:
        tree (TranslationTree): The tree to read.
        key_path (str): The dot-joined key path.

    Returns:
        Optional[Any]: The value, or None when any segment is missing or an
        intermediate value is a leaf.
    """
    value = _resolve(tree, key_path)
    return None if value is _ABSENT else value


def has_path(tree: TranslationTree, key_path: str) -> bool:
    """Return True when ``key_path`` resolves to a value, including an explicit JSON null."""
    return _resolve(tree, key_path) is not _ABSENT


def assign_value_at_path(
        tree: TranslationTree,
        key_path: str,
        value: Any,
        reference: Optional[TranslationTree] = None
) -> None:
    """
    Write ``value`` at ``key_path`` in place, creating intermediate containers.

    A missing (or leaf) intermediate is replaced by a new container. When a
    reference tree is given, the new container is a list if the reference holds
    a list at the same path, otherwise a dict. Without the reference an empty
    array placeholder could not be told apart from an empty mapping, and link
    lists would silently turn into objects.
    """
    parts = split_key_path(key_path)
    current: Any = tree
    ref_current: Any = reference

    for part in parts[:-1]:
        child = _get_child(current, part)
        ref_child = _get_child(ref_current, part) if is_container(ref_current) else None
        kind_differs = is_container(ref_child) and isinstance(child, list) != isinstance(ref_child, list)
        if not is_container(child) or kind_differs:
            child = [] if isinstance(ref_child, list) else {}
            _put_child(current, part, child)
        current = child
        ref_current = ref_child if is_container(ref_child) else None

    _put_child(current, parts[-1], value)


def set_value_at_path(
        tree: TranslationTree,
        key_path: str,
        value: Any,
        reference: Optional[TranslationTree] = None
) -> TranslationTree:
    """Return a copy of ``tree`` with ``value`` written at ``key_path``."""
    updated = deep_copy_tree(tree)
    assign_value_at_path(updated, key_path, value, reference)
    return updated


def remove_key_at_path(tree: TranslationTree, key_path: str) -> TranslationTree:
    """Return a copy of ``tree`` without the value at ``key_path``; unknown paths are ignored."""
    updated = deep_copy_tree(tree)
    parent = get_value_at_path(updated, parent_section(key_path)) if parent_section(key_path) else updated
    if not is_container(parent):
        return updated

    last = key_name(key_path)
    if isinstance(parent, list):
        if last.isdigit() and int(last) < len(parent):
            parent.pop(int(last))
    else:
        parent.pop(last, None)
    return updated


def clean_empty_containers(tree: TranslationTree) -> TranslationTree:
    """Return a copy of ``tree`` with empty objects removed, recursively. Array elements are kept."""
    if isinstance(tree, list):
        return [clean_empty_containers(item) if is_container(item) else item for item in tree]

    cleaned: Dict[str, Any] = {}
    for key, value in tree.items():
        if is_container(value):
            value = clean_empty_containers(value)
            if not value:
                continue
        cleaned[key] = value
    return cleaned


def value_type(value: Any) -> str:
    """Classify a value as "string" (any leaf), "object" (any container) or "undefined" (absent)."""
    if value is None:
        return "undefined"
    if is_container(value):
        return "object"
    return "string"


def count_leaf_keys(tree: TranslationTree) -> int:
    count = 0
    for _, value in _iter_children(tree):
        count += count_leaf_keys(value) if is_container(value) else 1
    return count
