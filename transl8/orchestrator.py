"""
Runs the translation of one target language.

A run classifies the keys that need a value, copies pass-through keys,
translates joint description+links groups one at a time and sends every
ordinary key through a bounded pool of asyncio workers. Provider failures never
abort a run: the affected keys fall back to their source values and are
reported in the outcome.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from transl8.content_classifier import (
    DEFAULT_LINKED_CONTENT_PATTERNS,
    DEFAULT_PASS_THROUGH_PATTERNS,
    JointGroup,
    LinkedContentPattern,
    classify_keys,
)
from transl8.exceptions import ProviderError, StructuredResponseError
from transl8.glossary import Glossary
from transl8.languages import LanguageInfo
from transl8.prompts import (
    build_description_with_links_prompt,
    build_system_prompt,
    build_translation_prompt,
    clean_translated_text,
    find_missing_placeholders,
)
from transl8.providers import TranslationProvider
from transl8.similarity_index import SimilarExample, SimilarityIndex
from transl8.tree_model import TranslationTree, get_value_at_path, parent_section

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 50

ProgressCallback = Callable[[int, int], None]


class OrchestratorState(Enum):
    IDLE = "idle"
    CLASSIFYING = "classifying"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    DONE = "done"


@dataclass(frozen=True)
class TranslationContext:
    """Everything the prompt for one ordinary key is built from."""
    key: str
    source_value: str
    parent_section: str = ""
    existing_translations: Dict[str, str] = field(default_factory=dict)
    similar_examples: Tuple[SimilarExample, ...] = ()


@dataclass(frozen=True)
class TranslationResult:
    key: str
    original_value: str
    translated_value: str
    target_language: str
    fell_back: bool = False


@dataclass
class TranslationRun:
    """
    Per-run collaborators, built once by the caller and passed down explicitly.

    Attributes:
        provider (TranslationProvider): The translation capability.
        language (LanguageInfo): The target language.
        glossary (Glossary): Protected terms; read-only during the run.
        language_names (Dict[str, str]): Display names for reference languages in prompts.
        verbose (bool): Log per-key activity and placeholder mismatches.
        source_language_name (str): Display name of the source language in prompts.
    """
    provider: TranslationProvider
    language: LanguageInfo
    glossary: Glossary = field(default_factory=Glossary)
    language_names: Dict[str, str] = field(default_factory=dict)
    verbose: bool = False
    source_language_name: str = "English"

    @cached_property
    def system_prompt(self) -> str:
        return build_system_prompt(self.language, self.glossary, self.source_language_name)

    def fallback_result(self, key: str, source_value: str) -> TranslationResult:
        return TranslationResult(key, source_value, source_value, self.language.code, fell_back=True)


@dataclass(frozen=True)
class OrchestratorSettings:
    concurrency: int = DEFAULT_CONCURRENCY
    pass_through_patterns: Tuple[str, ...] = DEFAULT_PASS_THROUGH_PATTERNS
    linked_content_patterns: Tuple[LinkedContentPattern, ...] = DEFAULT_LINKED_CONTENT_PATTERNS

    def __post_init__(self):
        if self.concurrency < 1:
            raise ValueError(f"Concurrency must be at least 1, got {self.concurrency}.")


@dataclass(frozen=True)
class TranslationOutcome:
    """
    Results of a run: pass-through results first, then joint groups, then ordinary keys.
    """
    results: Tuple[TranslationResult, ...]
    pass_through_count: int = 0
    joint_group_count: int = 0
    ordinary_count: int = 0

    @property
    def fallback_keys(self) -> List[str]:
        return [r.key for r in self.results if r.fell_back]

    @property
    def fallback_count(self) -> int:
        return len(self.fallback_keys)

    @property
    def translated_count(self) -> int:
        return len(self.results) - self.fallback_count


def build_translation_context(
        source: TranslationTree,
        key_path: str,
        other_trees: Optional[Mapping[str, TranslationTree]] = None,
        index: Optional[SimilarityIndex] = None
) -> TranslationContext:
    """
    Build the translation context for one key.

    Args:
        source (TranslationTree): The source tree; ``key_path`` must hold a string there.
        key_path (str): The key to translate.
        other_trees (Optional[Mapping[str, TranslationTree]]): Other target languages
            by code; their string values for the same key become references.
        index (Optional[SimilarityIndex]): Already-translated pairs of the current target.

    Returns:
        TranslationContext: The context for the prompt.
    """
    source_value = get_value_at_path(source, key_path)
    existing_translations: Dict[str, str] = {}
    for code, tree in (other_trees or {}).items():
        value = get_value_at_path(tree, key_path)
        if isinstance(value, str):
            existing_translations[code] = value

    similar_examples: Tuple[SimilarExample, ...] = ()
    if index is not None and len(index) > 0:
        similar_examples = tuple(index.find_similar(source_value, key_path))

    return TranslationContext(
        key=key_path,
        source_value=source_value,
        parent_section=parent_section(key_path),
        existing_translations=existing_translations,
        similar_examples=similar_examples,
    )


async def translate_string(run: TranslationRun, context: TranslationContext) -> TranslationResult:
    """
    Translate one ordinary key.

    Raises:
        ProviderError: If the provider call fails. The caller decides on the fallback.
    """
    if run.verbose:
        logger.info("Translating: %s", context.key)

    prompt = build_translation_prompt(context, run.language, run.language_names, run.source_language_name)
    translated_text = await run.provider.translate(run.system_prompt, prompt)
    translated_text = clean_translated_text(translated_text, context.source_value)

    if run.verbose:
        missing = find_missing_placeholders(context.source_value, translated_text)
        if missing:
            logger.warning(
                "Missing placeholders in translation for '%s': %s",
                context.key, ", ".join(f"{{{p}}}" for p in missing)
            )

    return TranslationResult(context.key, context.source_value, translated_text, run.language.code)


async def translate_description_with_links(run: TranslationRun, group: JointGroup) -> List[TranslationResult]:
    """
    Translate a description together with the anchor texts of its links.

    If the provider's answer cannot be read as a description plus a list of
    anchor texts, only the description is translated (on its own) and the
    anchors are left out of the results.

    Args:
        run (TranslationRun): The run context.
        group (JointGroup): The description and its anchors.

    Returns:
        List[TranslationResult]: The description result followed by anchor results in link order.

    Raises:
        ProviderError: If a provider call fails.
    """
    if run.verbose:
        logger.info("Translating description+links: %s", group.description_key)

    prompt = build_description_with_links_prompt(group.description, group.link_texts, run.language)
    try:
        structured = await run.provider.translate_structured(run.system_prompt, prompt)
    except StructuredResponseError as exc:
        logger.warning(
            "Failed to parse description+links response for '%s' (%s). Falling back to description-only translation.",
            group.description_key, exc
        )
        context = TranslationContext(group.description_key, group.description, parent_section(group.description_key))
        return [await translate_string(run, context)]

    code = run.language.code
    results = [TranslationResult(group.description_key, group.description, structured.description, code)]
    for key, original, translated in zip(group.link_text_keys, group.link_texts, structured.link_texts):
        results.append(TranslationResult(key, original, translated, code))

    if len(structured.link_texts) != len(group.link_texts):
        logger.warning(
            "Expected %d anchor text(s) for '%s' but got %d. Unmatched anchors keep their current value.",
            len(group.link_texts), group.description_key, len(structured.link_texts)
        )
    if run.verbose:
        for anchor in structured.link_texts:
            if anchor not in structured.description:
                logger.warning("Anchor text '%s' does not appear in the description of '%s'.",
                               anchor, group.description_key)
    return results


async def translate_batch(
        run: TranslationRun,
        contexts: Sequence[TranslationContext],
        concurrency: int = DEFAULT_CONCURRENCY,
        on_progress: Optional[ProgressCallback] = None
) -> List[TranslationResult]:
    """
    Translate ordinary keys through a bounded pool of worker tasks.

    ``concurrency`` workers pull the next index from a shared cursor and write
    into a pre-sized result list, so results keep the order of ``contexts``
    regardless of completion order. A failed item falls back to its source
    value and does not affect the others.

    Args:
        run (TranslationRun): The run context.
        contexts (Sequence[TranslationContext]): The items to translate.
        concurrency (int): Maximum number of provider calls in flight.
        on_progress (Optional[ProgressCallback]): Called as ``(completed, total)`` after each item.

    Returns:
        List[TranslationResult]: One result per context, in input order.
    """
    if concurrency < 1:
        raise ValueError(f"Concurrency must be at least 1, got {concurrency}.")

    total = len(contexts)
    results: List[Optional[TranslationResult]] = [None] * total
    cursor = 0
    completed = 0

    async def worker() -> None:
        nonlocal cursor, completed
        while cursor < total:
            index = cursor
            cursor += 1
            context = contexts[index]
            try:
                results[index] = await translate_string(run, context)
            except ProviderError as provider_exc:
                logger.error("Failed to translate '%s': %s", context.key, provider_exc)
                results[index] = run.fallback_result(context.key, context.source_value)
            except Exception as general_exc:
                logger.error("An unexpected error occurred translating '%s': %s",
                             context.key, general_exc, exc_info=True)
                results[index] = run.fallback_result(context.key, context.source_value)
            completed += 1
            if on_progress is not None:
                on_progress(completed, total)

    workers = [asyncio.create_task(worker()) for _ in range(min(concurrency, total))]
    await asyncio.gather(*workers)
    return results


class TranslationOrchestrator:
    """Translates the missing keys of one target tree."""

    def __init__(self, translation_run: TranslationRun, settings: Optional[OrchestratorSettings] = None):
        self.translation_run = translation_run
        self.settings = settings or OrchestratorSettings()
        self.state = OrchestratorState.IDLE

    async def _translate_joint_groups(
            self,
            groups: Sequence[JointGroup],
            target: TranslationTree
    ) -> List[TranslationResult]:
        results: List[TranslationResult] = []
        for group in groups:
            try:
                results.extend(await translate_description_with_links(self.translation_run, group))
            except ProviderError as provider_exc:
                logger.error("Failed to translate '%s' with its links: %s", group.description_key, provider_exc)
                results.extend(self._group_fallback(group, target))
            except Exception as general_exc:
                logger.error("An unexpected error occurred translating '%s' with its links: %s",
                             group.description_key, general_exc, exc_info=True)
                results.extend(self._group_fallback(group, target))
        return results

    def _group_fallback(self, group: JointGroup, target: TranslationTree) -> List[TranslationResult]:
        # Anchors that already hold a translation in the target keep it.
        fallback = [self.translation_run.fallback_result(group.description_key, group.description)]
        for key, original in zip(group.link_text_keys, group.link_texts):
            if not isinstance(get_value_at_path(target, key), str):
                fallback.append(self.translation_run.fallback_result(key, original))
        return fallback

    async def run(
            self,
            source: TranslationTree,
            key_paths: Sequence[str],
            target: TranslationTree,
            other_trees: Optional[Mapping[str, TranslationTree]] = None,
            on_progress: Optional[ProgressCallback] = None
    ) -> TranslationOutcome:
        """
        Translate ``key_paths`` for the run's target language.

        Args:
            source (TranslationTree): The source tree.
            key_paths (Sequence[str]): Keys needing a value in the target.
            target (TranslationTree): The current target tree; only read, for similarity examples
                and to keep existing anchor texts when a joint group fails.
            other_trees (Optional[Mapping[str, TranslationTree]]): Other target languages by code.
            on_progress (Optional[ProgressCallback]): Progress of the ordinary-key pool.

        Returns:
            TranslationOutcome: All results plus per-category counts.
        """
        self.state = OrchestratorState.CLASSIFYING
        classified = classify_keys(
            source,
            key_paths,
            self.settings.pass_through_patterns,
            self.settings.linked_content_patterns,
        )
        index = SimilarityIndex.build(source, target)
        logger.debug("Similarity index holds %d translated pair(s).", len(index))

        self.state = OrchestratorState.DISPATCHING
        code = self.translation_run.language.code
        pass_through_results = []
        for key in classified.pass_through:
            value = get_value_at_path(source, key)
            pass_through_results.append(TranslationResult(key, value, value, code))

        contexts = [build_translation_context(source, key, other_trees, index) for key in classified.ordinary]
        joint_work = self._translate_joint_groups(classified.joint_groups, target)
        pool_work = translate_batch(self.translation_run, contexts, self.settings.concurrency, on_progress)

        self.state = OrchestratorState.DRAINING
        joint_results, ordinary_results = await asyncio.gather(joint_work, pool_work)

        self.state = OrchestratorState.DONE
        outcome = TranslationOutcome(
            results=tuple(pass_through_results) + tuple(joint_results) + tuple(ordinary_results),
            pass_through_count=len(pass_through_results),
            joint_group_count=len(classified.joint_groups),
            ordinary_count=len(ordinary_results),
        )
        logger.info(
            "Translated %d key(s) to %s, %d fell back to the source value.",
            outcome.translated_count, self.translation_run.language.name, outcome.fallback_count
        )
        return outcome
