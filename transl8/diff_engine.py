"""Detects discrepancies (missing, extra and mismatched keys) between a source tree and a target tree."""
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Sequence, Tuple

from transl8.tree_model import (
    TranslationTree,
    flatten_keys,
    get_value_at_path,
    has_path,
    is_container,
    split_key_path,
    value_type,
)


@dataclass(frozen=True)
class TypeMismatch:
    """A key path that is a leaf on one side and a container on the other."""
    path: str
    source_type: str
    target_type: str


@dataclass(frozen=True)
class DiscrepancySummary:
    total_keys_in_source: int
    total_keys_in_target: int
    missing_count: int
    extra_count: int
    type_mismatch_count: int


@dataclass(frozen=True)
class DiscrepancyReport:
    """Immutable result of comparing two trees. The three path collections are disjoint."""
    missing_in_target: Tuple[str, ...]
    extra_in_target: Tuple[str, ...]
    type_mismatches: Tuple[TypeMismatch, ...]
    summary: DiscrepancySummary

    @property
    def is_in_sync(self) -> bool:
        # Extra keys are informational only.
        return self.summary.missing_count == 0 and self.summary.type_mismatch_count == 0

    def to_dict(self) -> Dict:
        return {
            "missingInTarget": list(self.missing_in_target),
            "extraInTarget": list(self.extra_in_target),
            "typeMismatches": [
                {"path": m.path, "sourceType": m.source_type, "targetType": m.target_type}
                for m in self.type_mismatches
            ],
            "summary": {
                "totalKeysInSource": self.summary.total_keys_in_source,
                "totalKeysInTarget": self.summary.total_keys_in_target,
                "missingCount": self.summary.missing_count,
                "extraCount": self.summary.extra_count,
                "typeMismatchCount": self.summary.type_mismatch_count,
            },
        }


def compare_translations(source: TranslationTree, target: TranslationTree) -> DiscrepancyReport:
    """
    Compare a target tree against the source tree.

    A source leaf is *missing* when its path does not resolve in the target at
    all; when the path resolves to a container instead, it is reported as a
    type mismatch. The same applies in the other direction for *extra* target
    leaves. Ordering follows the traversal order of the tree each list is drawn
    from, so the report is fully deterministic.

    Args:
        source (TranslationTree): The authoritative source-language tree.
        target (TranslationTree): The tree being checked.

    Returns:
        DiscrepancyReport: The comparison result.
    """
    source_keys = flatten_keys(source)
    target_keys = flatten_keys(target)

    missing_in_target: List[str] = []
    type_mismatches: List[TypeMismatch] = []
    for key in source_keys:
        if not has_path(target, key):
            missing_in_target.append(key)
            continue
        target_value = get_value_at_path(target, key)
        if is_container(target_value):
            type_mismatches.append(TypeMismatch(
                path=key,
                source_type=value_type(get_value_at_path(source, key)),
                target_type=value_type(target_value),
            ))

    extra_in_target: List[str] = []
    for key in target_keys:
        if not has_path(source, key):
            extra_in_target.append(key)
            continue
        source_value = get_value_at_path(source, key)
        if is_container(source_value):
            type_mismatches.append(TypeMismatch(
                path=key,
                source_type=value_type(source_value),
                target_type=value_type(get_value_at_path(target, key)),
            ))

    return DiscrepancyReport(
        missing_in_target=tuple(missing_in_target),
        extra_in_target=tuple(extra_in_target),
        type_mismatches=tuple(type_mismatches),
        summary=DiscrepancySummary(
            total_keys_in_source=len(source_keys),
            total_keys_in_target=len(target_keys),
            missing_count=len(missing_in_target),
            extra_count=len(extra_in_target),
            type_mismatch_count=len(type_mismatches),
        ),
    )


def present_keys(source: TranslationTree, target: TranslationTree) -> List[str]:
    """Source leaf paths that resolve to something (leaf or container) in the target."""
    return [key for key in flatten_keys(source) if has_path(target, key)]


def keys_needing_translation(report: DiscrepancyReport) -> List[str]:
    """Missing keys plus mismatched paths that hold a string in the source, in report order."""
    keys = list(report.missing_in_target)
    keys.extend(m.path for m in report.type_mismatches if m.source_type == "string")
    return keys


def group_keys_by_section(keys: Sequence[str]) -> Dict[str, List[str]]:
    """Group key paths by their top-level section, keeping first-seen section order."""
    grouped: Dict[str, List[str]] = {}
    for key in keys:
        grouped.setdefault(split_key_path(key)[0], []).append(key)
    return grouped


def generate_json_report(results: Sequence[Tuple[str, str, DiscrepancyReport]]) -> str:
    """
    Render comparison results as a JSON document.

    Args:
        results: (source language, target language, report) triples.

    Returns:
        str: Pretty-printed JSON with a generation timestamp.
    """
    report = {
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "results": [
            {"source": source_lang, "target": target_lang, **discrepancies.to_dict()}
            for source_lang, target_lang, discrepancies in results
        ],
    }
    return json.dumps(report, indent=2, ensure_ascii=False)
