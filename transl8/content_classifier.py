"""
Partitions missing leaf keys into pass-through keys, joint description+links groups and ordinary keys.

Link anchor text has to appear verbatim inside its description after
translation, otherwise the front end cannot find the anchor to render the link.
Translating anchors on their own cannot guarantee that, so a description and
the anchors of its sibling link list are sent to the provider together.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from transl8.tree_model import (
    TranslationTree,
    get_value_at_path,
    join_key_path,
    parent_section,
)

logger = logging.getLogger(__name__)

DEFAULT_PASS_THROUGH_PATTERNS: Tuple[str, ...] = ("*.href",)


@dataclass(frozen=True)
class LinkedContentPattern:
    """Describes a description key whose parent section also holds a list of links."""
    description_pattern: str = "*.description"
    links_key: str = "links"
    link_text_field: str = "text"
    link_href_field: str = "href"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "LinkedContentPattern":
        """Build a pattern from a config mapping (snake_case or camelCase keys)."""
        defaults = cls()
        return cls(
            description_pattern=raw.get('description_pattern', raw.get('descriptionPattern', defaults.description_pattern)),
            links_key=raw.get('links_key', raw.get('linksKey', defaults.links_key)),
            link_text_field=raw.get('link_text_field', raw.get('linkTextField', defaults.link_text_field)),
            link_href_field=raw.get('link_href_field', raw.get('linkHrefField', defaults.link_href_field)),
        )


DEFAULT_LINKED_CONTENT_PATTERNS: Tuple[LinkedContentPattern, ...] = (LinkedContentPattern(),)


@dataclass(frozen=True)
class JointGroup:
    """
    A description leaf and the anchor texts of its sibling links, translated as one unit.

    ``link_href_keys`` lists the link targets of the same items. They are not
    translated; the classifier copies them through unchanged.
    """
    description_key: str
    description: str
    link_text_keys: Tuple[str, ...]
    link_texts: Tuple[str, ...]
    pattern: LinkedContentPattern = field(default_factory=LinkedContentPattern)
    link_href_keys: Tuple[str, ...] = ()

    @property
    def keys(self) -> Tuple[str, ...]:
        return (self.description_key,) + self.link_text_keys


@dataclass(frozen=True)
class ClassifiedKeys:
    pass_through: Tuple[str, ...]
    joint_groups: Tuple[JointGroup, ...]
    ordinary: Tuple[str, ...]

    @property
    def total(self) -> int:
        return len(self.pass_through) + sum(len(g.keys) for g in self.joint_groups) + len(self.ordinary)


def _glob_suffix(pattern: str) -> str:
    # "*.href" -> ".href"; only a leading wildcard is supported.
    return pattern[1:] if pattern.startswith('*') else pattern


def is_pass_through_key(key_path: str, patterns: Iterable[str] = DEFAULT_PASS_THROUGH_PATTERNS) -> bool:
    """Check whether a key path matches one of the pass-through suffix patterns."""
    return any(key_path.endswith(_glob_suffix(pattern)) for pattern in patterns)


def find_joint_group(
        source: TranslationTree,
        key_path: str,
        patterns: Sequence[LinkedContentPattern] = DEFAULT_LINKED_CONTENT_PATTERNS
) -> Optional[JointGroup]:
    """
    Build the joint group for a description key, if it has one.

    The key must match a pattern's description suffix, and its parent section
    must hold a non-empty list under the pattern's ``links_key`` in which every
    item is an object with a non-empty string under ``link_text_field``.

    Args:
        source (TranslationTree): The source tree.
        key_path (str): Candidate description key.
        patterns (Sequence[LinkedContentPattern]): Configured patterns, checked in order.

    Returns:
        Optional[JointGroup]: The group, or None if the key is not a linked description.
    """
    description = get_value_at_path(source, key_path)
    if not isinstance(description, str):
        return None

    for pattern in patterns:
        if not key_path.endswith(_glob_suffix(pattern.description_pattern)):
            continue
        parent_path = parent_section(key_path)
        section = get_value_at_path(source, parent_path) if parent_path else source
        if not isinstance(section, dict):
            continue
        links = section.get(pattern.links_key)
        if not isinstance(links, list) or not links:
            continue
        if not all(
                isinstance(item, dict)
                and isinstance(item.get(pattern.link_text_field), str)
                and item.get(pattern.link_text_field)
                for item in links
        ):
            continue

        links_path = join_key_path(parent_path, pattern.links_key)
        link_text_keys = tuple(
            join_key_path(join_key_path(links_path, index), pattern.link_text_field)
            for index in range(len(links))
        )
        link_texts = tuple(item[pattern.link_text_field] for item in links)
        link_href_keys = tuple(
            join_key_path(join_key_path(links_path, index), pattern.link_href_field)
            for index, item in enumerate(links)
            if isinstance(item.get(pattern.link_href_field), str)
        )
        return JointGroup(key_path, description, link_text_keys, link_texts, pattern, link_href_keys)
    return None


def _without_pass_through_anchors(group: JointGroup, patterns: Tuple[str, ...]) -> Optional[JointGroup]:
    # Anchors matching a pass-through pattern are copied, never translated.
    kept = [
        (key, text) for key, text in zip(group.link_text_keys, group.link_texts)
        if not is_pass_through_key(key, patterns)
    ]
    if not kept:
        return None
    if len(kept) == len(group.link_text_keys):
        return group
    return replace(
        group,
        link_text_keys=tuple(key for key, _ in kept),
        link_texts=tuple(text for _, text in kept),
    )


def classify_keys(
        source: TranslationTree,
        key_paths: Iterable[str],
        pass_through_patterns: Optional[Iterable[str]] = None,
        linked_content_patterns: Optional[Sequence[LinkedContentPattern]] = None
) -> ClassifiedKeys:
    """
    Partition key paths into pass-through keys, joint groups and ordinary keys.

    Precedence: pass-through patterns first, then joint groups, then everything
    else. Keys whose source value is not a string are dropped. Anchor text keys
    that belong to a joint group never appear as ordinary keys, and anchors
    matching a pass-through pattern are left out of their group. The link
    target fields of a group's items are pass-through keys.

    Args:
        source (TranslationTree): The source tree the key paths come from.
        key_paths (Iterable[str]): Leaf key paths needing a value, in source order.
        pass_through_patterns (Optional[Iterable[str]]): Suffix globs; None uses ``*.href``.
        linked_content_patterns (Optional[Sequence[LinkedContentPattern]]): None or empty uses the default pattern.

    Returns:
        ClassifiedKeys: The three disjoint groups, each in input order.
    """
    if pass_through_patterns is None:
        pass_through_patterns = DEFAULT_PASS_THROUGH_PATTERNS
    pass_through_patterns = tuple(pass_through_patterns)
    linked_content_patterns = tuple(linked_content_patterns or DEFAULT_LINKED_CONTENT_PATTERNS)

    string_keys = [key for key in key_paths if isinstance(get_value_at_path(source, key), str)]

    pass_through_set = {key for key in string_keys if is_pass_through_key(key, pass_through_patterns)}

    joint_groups: List[JointGroup] = []
    for key in string_keys:
        if key in pass_through_set:
            continue
        group = find_joint_group(source, key, linked_content_patterns)
        if group is not None:
            group = _without_pass_through_anchors(group, pass_through_patterns)
        if group is not None:
            joint_groups.append(group)

    pass_through_set.update(key for group in joint_groups for key in group.link_href_keys)
    grouped_keys = {key for group in joint_groups for key in group.keys}
    pass_through = [key for key in string_keys if key in pass_through_set and key not in grouped_keys]
    ordinary = [key for key in string_keys if key not in pass_through_set and key not in grouped_keys]

    logger.debug(
        "Classified %d key(s): %d pass-through, %d joint group(s), %d ordinary.",
        len(string_keys), len(pass_through), len(joint_groups), len(ordinary)
    )
    return ClassifiedKeys(tuple(pass_through), tuple(joint_groups), tuple(ordinary))
