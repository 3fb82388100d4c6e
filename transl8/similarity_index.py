"""
Lookup of already-translated strings, used to keep phrasing consistent within a run.

The index is rebuilt from the current target tree on every run and never
written anywhere. Queries are a linear scan: the index holds at most one
language's leaves, which keeps this cheap enough without any nearest-neighbour
structure.
"""
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterator, List, Optional

from transl8.tree_model import TranslationTree, flatten_keys, get_value_at_path

DEFAULT_EXAMPLE_LIMIT = 3
DEFAULT_MIN_SCORE = 0.15

# Common words to ignore when computing similarity
STOP_WORDS = frozenset({
    "a", "an", "the", "to", "of", "in", "on", "for", "is", "are", "was", "be",
    "or", "and", "it", "by", "at", "as", "do", "if", "no", "not", "your", "you",
    "we", "our", "my", "this", "that", "with", "from", "has", "have", "will",
    "can", "all", "but", "up", "out", "so", "been", "its", "they", "their",
    "more", "about", "please", "yet",
})

_NON_ALPHANUMERIC = re.compile(r'[\W_]+')


@dataclass(frozen=True)
class SimilarExample:
    source_value: str
    translated_value: str
    key: str


@dataclass(frozen=True)
class _IndexedPair:
    example: SimilarExample
    tokens: FrozenSet[str]


def tokenize(text: str) -> FrozenSet[str]:
    """Lowercase, replace non-alphanumerics with spaces, drop 1-char tokens and stop words."""
    words = _NON_ALPHANUMERIC.sub(' ', text.lower()).split()
    return frozenset(w for w in words if len(w) > 1 and w not in STOP_WORDS)


def similarity_score(a: FrozenSet[str], b: FrozenSet[str]) -> float:
    """Jaccard similarity of two token sets; 0.0 when either set is empty."""
    if not a or not b:
        return 0.0
    overlap = len(a & b)
    if overlap == 0:
        return 0.0
    return overlap / (len(a) + len(b) - overlap)


class SimilarityIndex:
    """Already-translated (source value, target value) pairs keyed by key path."""

    def __init__(self, pairs: Optional[Dict[str, SimilarExample]] = None):
        self._pairs: Dict[str, _IndexedPair] = {
            key: _IndexedPair(example, tokenize(example.source_value))
            for key, example in (pairs or {}).items()
        }

    @classmethod
    def build(cls, source: TranslationTree, target: TranslationTree) -> "SimilarityIndex":
        """
        Index every source leaf whose target value is a string that differs from the source.

        Identical values are skipped: they are most likely untranslated copies.
        """
        pairs: Dict[str, SimilarExample] = {}
        for key in flatten_keys(source):
            source_value = get_value_at_path(source, key)
            target_value = get_value_at_path(target, key)
            if isinstance(source_value, str) and isinstance(target_value, str) and source_value != target_value:
                pairs[key] = SimilarExample(source_value, target_value, key)
        return cls(pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[SimilarExample]:
        return (pair.example for pair in self._pairs.values())

    def find_similar(
            self,
            source_value: str,
            current_key: str,
            limit: int = DEFAULT_EXAMPLE_LIMIT,
            min_score: float = DEFAULT_MIN_SCORE
    ) -> List[SimilarExample]:
        """
        Find up to ``limit`` indexed pairs whose source text resembles ``source_value``.

        Args:
            source_value (str): The source string about to be translated.
            current_key (str): Its own key path, never returned as an example.
            limit (int): Maximum number of examples.
            min_score (float): Minimum Jaccard score for a candidate to count.

        Returns:
            List[SimilarExample]: Best matches first; equal scores keep index order.
        """
        source_tokens = tokenize(source_value)
        if not source_tokens:
            return []

        scored = []
        for key, pair in self._pairs.items():
            if key == current_key:
                continue
            score = similarity_score(source_tokens, pair.tokens)
            if score >= min_score:
                scored.append((score, pair.example))

        # list.sort is stable, so ties stay in index order.
        scored.sort(key=lambda item: item[0], reverse=True)
        return [example for _, example in scored[:limit]]
