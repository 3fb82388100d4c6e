"""Command-line interface for managing JSON translation files."""
import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional, Sequence, Tuple

from tqdm import tqdm

from transl8.app_config import (
    CONFIG_FILE_NAME,
    AppConfig,
    create_default_config,
    create_default_glossary,
    create_openai_client,
    create_rate_limiter,
    load_app_config,
)
from transl8.content_classifier import classify_keys
from transl8.diff_engine import (
    DiscrepancyReport,
    compare_translations,
    generate_json_report,
    group_keys_by_section,
    keys_needing_translation,
    present_keys,
)
from transl8.exceptions import Transl8Error, TreeParseError
from transl8.glossary import (
    add_term,
    load_glossary,
    parse_translation_overrides,
    remove_term,
    save_glossary,
)
from transl8.languages import LanguageInfo, build_language_names, get_language_info
from transl8.logging_config import setup_logger
from transl8.orchestrator import (
    TranslationOrchestrator,
    TranslationOutcome,
    TranslationResult,
    TranslationRun,
    build_translation_context,
)
from transl8.prompts import build_system_prompt, build_translation_prompt, count_tokens, strip_extra_quotes
from transl8.providers import OpenAITranslationProvider, TranslationProvider
from transl8.reconciler import apply_translation_results, reorder_to_match_source
from transl8.similarity_index import SimilarityIndex
from transl8.storage import (
    language_code_from_path,
    list_translation_files,
    load_reference_trees,
    load_translation_tree,
    save_translation_tree,
)
from transl8.tree_model import (
    TranslationTree,
    clean_empty_containers,
    count_leaf_keys,
    flatten_keys,
    get_value_at_path,
    remove_key_at_path,
)

logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 10


def _rel_path(file_path: str) -> str:
    return os.path.relpath(file_path)


def _truncate(text: str, max_length: int) -> str:
    return text if len(text) <= max_length else text[:max_length - 3] + "..."


def _print_header(title: str) -> None:
    print(f"\n{title}\n{'=' * len(title)}")


def _print_key_preview(source: TranslationTree, keys: Sequence[str], limit: Optional[int] = PREVIEW_LIMIT) -> None:
    shown = keys if limit is None else keys[:limit]
    for key in shown:
        print(f'  {key}: "{get_value_at_path(source, key)}"')
    if limit is not None and len(keys) > limit:
        print(f"  ... and {len(keys) - limit} more")


def _print_report(source_code: str, target_code: str, report: DiscrepancyReport) -> None:
    summary = report.summary
    _print_header(f"Comparison: {source_code} → {target_code}")
    print(f"  Source keys: {summary.total_keys_in_source}")
    print(f"  Target keys: {summary.total_keys_in_target}")
    print(f"  Missing: {summary.missing_count}")
    print(f"  Extra: {summary.extra_count}")
    print(f"  Type mismatches: {summary.type_mismatch_count}")

    for title, keys, marker in (
            (f"Missing keys in {target_code}", report.missing_in_target, "✗"),
            (f"Extra keys in {target_code}", report.extra_in_target, "?"),
    ):
        if not keys:
            continue
        print(f"\n{title} ({len(keys)}):")
        for section, section_keys in group_keys_by_section(keys).items():
            print(f"  [{section}]")
            for key in section_keys:
                print(f"    {marker} {key}")

    if report.type_mismatches:
        print(f"\nType mismatches ({len(report.type_mismatches)}):")
        for mismatch in report.type_mismatches:
            print(f"  ⚠ {mismatch.path}")
            print(f"    Source: {mismatch.source_type} → Target: {mismatch.target_type}")

    if report.is_in_sync:
        print("\n✓ Translation file is in sync.")
    else:
        print("\n⚠ Issues found that should be addressed.")


def _require_language(config: AppConfig, code: str) -> LanguageInfo:
    language = get_language_info(code, config.languages)
    if language is None:
        raise Transl8Error(f'Unsupported language code: {code}. Run "transl8 list-languages" to see available languages.')
    return language


def _source_language_name(config: AppConfig) -> str:
    """Display name of the source language; "en-US" falls back to "en", unknown codes are shown as is."""
    code = config.source_language
    for candidate in (code, code.split('-')[0]):
        language = get_language_info(candidate, config.languages) or get_language_info(candidate)
        if language is not None:
            return language.name
    return code


def _analyze_all(config: AppConfig) -> List[Tuple[str, str, DiscrepancyReport]]:
    """Compare every translation file against the source file. Unparseable files are skipped."""
    source = load_translation_tree(config.source_file_path)
    results = []
    for file_path in list_translation_files(config.messages_dir):
        code = language_code_from_path(file_path)
        if code == config.source_language:
            continue
        try:
            target = load_translation_tree(file_path)
        except TreeParseError as parse_exc:
            logger.error("Skipping %s: %s", _rel_path(file_path), parse_exc)
            continue
        results.append((config.source_language, code, compare_translations(source, target)))
    return results


def create_provider(config: AppConfig) -> TranslationProvider:
    """Build the OpenAI-backed provider. Exits the process when no API key is configured."""
    return OpenAITranslationProvider(
        create_openai_client(logger),
        config.model_name,
        temperature=config.temperature,
        timeout=config.request_timeout,
        rate_limiter=create_rate_limiter(config),
    )


def _print_dry_run(
        config: AppConfig,
        language: LanguageInfo,
        source: TranslationTree,
        target: TranslationTree,
        key_paths: Sequence[str]
) -> None:
    """Show what a translation run would do, with an estimate of the prompt tokens."""
    settings = config.orchestrator_settings()
    classified = classify_keys(source, key_paths, settings.pass_through_patterns, settings.linked_content_patterns)
    glossary = load_glossary(config.glossary_file_path)
    index = SimilarityIndex.build(source, target)
    language_names = build_language_names(config.languages)
    source_language_name = _source_language_name(config)

    system_tokens = count_tokens(build_system_prompt(language, glossary, source_language_name), config.model_name)
    prompt_tokens = 0
    for key in classified.ordinary:
        context = build_translation_context(source, key, None, index)
        prompt_tokens += system_tokens + count_tokens(
            build_translation_prompt(context, language, language_names, source_language_name), config.model_name
        )

    print("\n(Dry run - no changes made)\n")
    print(f"  Pass-through keys (copied unchanged): {len(classified.pass_through)}")
    print(f"  Description+links groups: {len(classified.joint_groups)}")
    print(f"  Keys translated individually: {len(classified.ordinary)}")
    print(f"  Estimated prompt tokens for individual keys: ~{prompt_tokens} ({config.model_name})\n")
    _print_key_preview(source, list(key_paths))


async def _translate_keys(
        config: AppConfig,
        language: LanguageInfo,
        source: TranslationTree,
        target: TranslationTree,
        key_paths: Sequence[str],
        verbose: bool
) -> TranslationOutcome:
    run = TranslationRun(
        provider=create_provider(config),
        language=language,
        glossary=load_glossary(config.glossary_file_path),
        language_names=build_language_names(config.languages),
        verbose=verbose,
        source_language_name=_source_language_name(config),
    )
    other_trees = load_reference_trees(config.messages_dir, exclude={config.source_language, language.code})
    orchestrator = TranslationOrchestrator(run, config.orchestrator_settings())

    with tqdm(total=0, desc=f"Translating to {language.name}", unit="key") as progress_bar:
        def on_progress(completed: int, total: int) -> None:
            if progress_bar.total != total:
                progress_bar.total = total
            progress_bar.update(completed - progress_bar.n)

        return await orchestrator.run(source, key_paths, target, other_trees, on_progress)


def _translate_and_save(
        config: AppConfig,
        language: LanguageInfo,
        source: TranslationTree,
        target: TranslationTree,
        key_paths: Sequence[str],
        target_file: str,
        verbose: bool
) -> TranslationOutcome:
    """Translate ``key_paths``, merge the results into ``target`` and save it once."""
    outcome = asyncio.run(_translate_keys(config, language, source, target, key_paths, verbose))
    merged = apply_translation_results(source, target, outcome.results)
    save_translation_tree(target_file, merged)

    print(f"\n✓ Updated {len(outcome.results)} keys in {_rel_path(target_file)}")
    print(f"  Translated: {outcome.translated_count}, fell back to source: {outcome.fallback_count}")
    if outcome.fallback_keys:
        print("  Keys left in the source language:")
        for key in outcome.fallback_keys[:PREVIEW_LIMIT]:
            print(f"    {key}")
    return outcome


def cmd_init(args: argparse.Namespace) -> int:
    cwd = os.getcwd()
    _print_header("Initializing transl8")
    if os.path.exists(os.path.join(cwd, CONFIG_FILE_NAME)):
        print(f"\n  {CONFIG_FILE_NAME} already exists in this directory.")
        print("  Delete it first if you want to reinitialize.")
        return 0

    print(f"\n  Created: {os.path.basename(create_default_config(cwd))}")
    if os.path.exists(os.path.join(cwd, "glossary.json")):
        print("  Exists: glossary.json")
    else:
        create_default_glossary(cwd)
        print("  Created: glossary.json")

    if os.environ.get("OPENAI_API_KEY"):
        print("\n  ✓ OPENAI_API_KEY is set")
    else:
        print("\n  ⚠ OPENAI_API_KEY not found. Set it (or add it to .env) before running translations.")

    messages_dir = os.path.join(cwd, "messages")
    if os.path.isdir(messages_dir):
        count = len([name for name in os.listdir(messages_dir) if name.endswith(".json")])
        print(f"  ✓ Found messages/ directory with {count} file(s)")
    else:
        print("  ⚠ No messages/ directory found. Create it and add your source file (e.g. messages/en.json).")

    print("\n  Next steps:")
    print(f"  1. Edit {CONFIG_FILE_NAME} to match your project")
    print("  2. Run `transl8 analyze` to check your translation files")
    print("  3. Run `transl8 translate <lang>` to translate missing keys")
    return 0


def cmd_analyze(args: argparse.Namespace, config: AppConfig) -> int:
    results = _analyze_all(config)
    if args.json:
        print(generate_json_report(results))
        return 0

    _print_header("Translation File Analysis")
    for source_code, target_code, report in results:
        _print_report(source_code, target_code, report)

    _print_header("Overall Summary")
    print(f"  Total files analyzed: {len(results)}")
    print(f"  Total missing keys: {sum(r.summary.missing_count for _, _, r in results)}")
    print(f"  Total extra keys: {sum(r.summary.extra_count for _, _, r in results)}")
    print(f"  Total type mismatches: {sum(r.summary.type_mismatch_count for _, _, r in results)}")
    return 0


def cmd_compare(args: argparse.Namespace, config: AppConfig) -> int:
    source = load_translation_tree(config.source_file_path)
    target = load_translation_tree(config.target_file_path(args.language))
    report = compare_translations(source, target)
    if args.json:
        print(json.dumps({"source": config.source_language, "target": args.language, **report.to_dict()},
                         indent=2, ensure_ascii=False))
    else:
        _print_report(config.source_language, args.language, report)
    return 0


def cmd_create(args: argparse.Namespace, config: AppConfig) -> int:
    language = _require_language(config, args.language)
    target_file = config.target_file_path(language.code)
    if os.path.exists(target_file) and not args.force:
        raise Transl8Error(f"Translation file already exists: {_rel_path(target_file)}. Use --force to overwrite.")

    source = load_translation_tree(config.source_file_path)
    key_paths = flatten_keys(source)
    _print_header(f"Creating {language.name} ({language.native_name}) Translation")

    if args.dry_run:
        print(f"Would create: {_rel_path(target_file)}")
        print(f"Total keys to translate: {count_leaf_keys(source)}")
        _print_dry_run(config, language, source, {}, key_paths)
        return 0

    _translate_and_save(config, language, source, {}, key_paths, target_file, args.verbose)
    return 0


def cmd_translate(args: argparse.Namespace, config: AppConfig) -> int:
    language = _require_language(config, args.language)
    target_file = config.target_file_path(language.code)
    if not os.path.exists(target_file):
        raise Transl8Error(f'Translation file not found: {_rel_path(target_file)}. Use "transl8 create {language.code}" to create it.')

    source = load_translation_tree(config.source_file_path)
    target = load_translation_tree(target_file)
    report = compare_translations(source, target)
    key_paths = keys_needing_translation(report)

    _print_header(f"Translating Missing Keys for {language.name}")
    if not key_paths:
        print("\n✓ No missing keys! File is in sync with the source.")
        return 0

    print(f"\nFound {len(key_paths)} keys to translate.")
    if args.dry_run:
        _print_dry_run(config, language, source, target, key_paths)
        return 0

    _translate_and_save(config, language, source, target, key_paths, target_file, args.verbose)
    return 0


def cmd_sync(args: argparse.Namespace, config: AppConfig) -> int:
    language = _require_language(config, args.language)
    target_file = config.target_file_path(language.code)
    source = load_translation_tree(config.source_file_path)

    if os.path.exists(target_file):
        target = load_translation_tree(target_file)
    else:
        print(f"Translation file {_rel_path(target_file)} does not exist yet and will be created.")
        target = {}

    _print_header(f"Syncing {language.name} with {config.source_language}")
    report = compare_translations(source, target)
    key_paths = keys_needing_translation(report)
    print(f"\nMissing keys: {report.summary.missing_count}")
    print(f"Extra keys: {report.summary.extra_count}")
    print(f"Type mismatches: {report.summary.type_mismatch_count}")

    if not key_paths:
        print("\n✓ File is already in sync!")
        return 0

    if not args.translate:
        print("\nMissing keys (not modifying file):")
        _print_key_preview(source, key_paths, None if args.verbose else PREVIEW_LIMIT)
        print("\nRun with --translate to translate and save missing keys")
        return 0

    if args.dry_run:
        _print_dry_run(config, language, source, target, key_paths)
        return 0

    _translate_and_save(config, language, source, target, key_paths, target_file, args.verbose)
    return 0


def cmd_prune(args: argparse.Namespace, config: AppConfig) -> int:
    language = _require_language(config, args.language)
    target_file = config.target_file_path(language.code)
    source = load_translation_tree(config.source_file_path)
    target = load_translation_tree(target_file)
    report = compare_translations(source, target)

    _print_header(f"Pruning Extra Keys from {language.name}")
    if not report.extra_in_target:
        print("\n✓ No extra keys to remove! File is clean.")
        return 0

    print(f"\nFound {len(report.extra_in_target)} extra keys to remove:")
    for section, keys in group_keys_by_section(report.extra_in_target).items():
        print(f"\n  [{section}]")
        for key in keys:
            value = get_value_at_path(target, key)
            preview = _truncate(value, 43) if isinstance(value, str) else "(object)"
            print(f'    ✗ {key}: "{preview}"')

    if args.dry_run:
        print("\n(Dry run - no changes made)")
        return 0

    pruned = target
    # Later array indexes first, so earlier removals do not shift them.
    for key in reversed(report.extra_in_target):
        pruned = remove_key_at_path(pruned, key)
    pruned = reorder_to_match_source(source, clean_empty_containers(pruned))
    save_translation_tree(target_file, pruned)
    print(f"\n✓ Removed {len(report.extra_in_target)} extra keys from {_rel_path(target_file)}")
    return 0


def cmd_fix_quotes(args: argparse.Namespace, config: AppConfig) -> int:
    language = _require_language(config, args.language)
    target_file = config.target_file_path(language.code)
    source = load_translation_tree(config.source_file_path)
    target = load_translation_tree(target_file)

    _print_header(f"Fixing Quotes in {language.name}")
    fixes: List[TranslationResult] = []
    for key in present_keys(source, target):
        before = get_value_at_path(target, key)
        original = get_value_at_path(source, key)
        if not isinstance(before, str) or not isinstance(original, str):
            continue
        after = strip_extra_quotes(before, original)
        if after != before:
            fixes.append(TranslationResult(key, before, after, language.code))

    if not fixes:
        print("\n✓ No quote issues found!")
        return 0

    print(f"\nFound {len(fixes)} values with extra quotes:\n")
    for fix in fixes[:20]:
        print(f"  {fix.key}:")
        print(f"    Before: {_truncate(fix.original_value, 60)}")
        print(f"    After:  {_truncate(fix.translated_value, 60)}")
    if len(fixes) > 20:
        print(f"\n  ... and {len(fixes) - 20} more")

    if args.dry_run:
        print("\n(Dry run - no changes made)")
        return 0

    save_translation_tree(target_file, apply_translation_results(source, target, fixes))
    print(f"\n✓ Fixed {len(fixes)} values in {_rel_path(target_file)}")
    return 0


def cmd_list_languages(args: argparse.Namespace, config: AppConfig) -> int:
    if args.json:
        print(json.dumps(
            [{"code": lang.code, "name": lang.name, "nativeName": lang.native_name} for lang in config.languages],
            indent=2, ensure_ascii=False
        ))
        return 0

    _print_header("Supported Languages")
    print(f"\n{'Code':<6} {'Name':<23} Native Name")
    print("-" * 50)
    for language in config.languages:
        print(f"{language.code:<6} {language.name:<23} {language.native_name}")
    print(f"\nTotal: {len(config.languages)} languages")
    return 0


def cmd_list_files(args: argparse.Namespace, config: AppConfig) -> int:
    files = list_translation_files(config.messages_dir)
    rows = []
    for file_path in files:
        code = language_code_from_path(file_path)
        try:
            key_count: Optional[int] = count_leaf_keys(load_translation_tree(file_path))
        except TreeParseError as parse_exc:
            logger.error("%s", parse_exc)
            key_count = None
        rows.append((file_path, code, key_count))

    if args.json:
        print(json.dumps(
            [{"path": path, "language": code, "keyCount": key_count} for path, code, key_count in rows],
            indent=2, ensure_ascii=False
        ))
        return 0

    _print_header("Translation Files")
    print(f"\n{'Language':<22} {'Keys':>5}     File")
    print("-" * 50)
    for file_path, code, key_count in rows:
        language = get_language_info(code, config.languages)
        keys_display = "error" if key_count is None else str(key_count)
        print(f"{(language.name if language else code):<22} {keys_display:>5}     {os.path.basename(file_path)}")
    print(f"\nTotal: {len(rows)} files")
    return 0


def cmd_export_report(args: argparse.Namespace, config: AppConfig) -> int:
    report = generate_json_report(_analyze_all(config))
    if not args.output_file:
        print(report)
        return 0
    with open(args.output_file, 'w', encoding='utf-8') as f:
        f.write(report + "\n")
    print(f"✓ Report exported to: {args.output_file}")
    return 0


def cmd_glossary_list(args: argparse.Namespace, config: AppConfig) -> int:
    glossary = load_glossary(config.glossary_file_path)
    _print_header("Translation Glossary")
    if not glossary.protected_terms:
        print("  No glossary terms defined yet.")
        print("\n  Add one with: transl8 glossary add <term> [description]")
        return 0

    print(f"\n  File: {_rel_path(config.glossary_file_path)}\n")
    print(f"  {'Term':<22} Description")
    print("  " + "-" * 60)
    for entry in glossary.protected_terms:
        overrides = f" [overrides: {', '.join(entry.translations)}]" if entry.translations else ""
        print(f"  {entry.term:<22} {entry.description}{overrides}")
    print(f"\nTotal: {len(glossary.protected_terms)} protected terms")
    return 0


def cmd_glossary_add(args: argparse.Namespace, config: AppConfig) -> int:
    glossary = load_glossary(config.glossary_file_path)
    try:
        overrides = parse_translation_overrides(args.translation)
        glossary = add_term(glossary, args.term, args.description, overrides)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    save_glossary(config.glossary_file_path, glossary)
    print(f'✓ Added "{args.term}" to the glossary.')
    return 0


def cmd_glossary_remove(args: argparse.Namespace, config: AppConfig) -> int:
    glossary = load_glossary(config.glossary_file_path)
    try:
        glossary = remove_term(glossary, args.term)
    except KeyError:
        print(f'Term "{args.term}" not found in the glossary.', file=sys.stderr)
        return 1
    save_glossary(config.glossary_file_path, glossary)
    print(f'✓ Removed "{args.term}" from the glossary.')
    return 0


def _positive_int_arg(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transl8",
        description="AI-powered CLI for managing i18n translation files",
    )
    parser.add_argument("-m", "--messages", help="Path to messages directory (default: from config)")
    parser.add_argument("--model", help="OpenAI model to use (default: from config)")
    parser.add_argument("--concurrency", type=_positive_int_arg,
                        help="Max concurrent API requests (default: from config)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Initialize transl8 in the current directory")
    init_parser.set_defaults(handler=cmd_init, needs_config=False)

    analyze_parser = subparsers.add_parser("analyze", help="Analyze all translation files for discrepancies")
    analyze_parser.add_argument("--json", action="store_true", help="Output as JSON")
    analyze_parser.set_defaults(handler=cmd_analyze)

    compare_parser = subparsers.add_parser("compare", help="Compare a specific language against the source")
    compare_parser.add_argument("language")
    compare_parser.add_argument("--json", action="store_true", help="Output as JSON")
    compare_parser.set_defaults(handler=cmd_compare)

    create_parser = subparsers.add_parser("create", help="Create a new translation file for a language")
    create_parser.add_argument("language")
    create_parser.add_argument("-f", "--force", action="store_true", help="Overwrite existing file")
    create_parser.add_argument("-d", "--dry-run", action="store_true", help="Preview without creating files")
    create_parser.add_argument("-v", "--verbose", action="store_true", help="Show detailed output")
    create_parser.set_defaults(handler=cmd_create)

    translate_parser = subparsers.add_parser("translate", help="Translate missing keys for a language")
    translate_parser.add_argument("language")
    translate_parser.add_argument("-d", "--dry-run", action="store_true", help="Preview without making changes")
    translate_parser.add_argument("-v", "--verbose", action="store_true", help="Show detailed output")
    translate_parser.set_defaults(handler=cmd_translate)

    sync_parser = subparsers.add_parser("sync", help="Sync a language file with the source (add missing keys)")
    sync_parser.add_argument("language")
    sync_parser.add_argument("-t", "--translate", action="store_true", help="Use the LLM to translate missing keys")
    sync_parser.add_argument("-d", "--dry-run", action="store_true", help="Preview without making changes")
    sync_parser.add_argument("-v", "--verbose", action="store_true", help="Show detailed output")
    sync_parser.set_defaults(handler=cmd_sync)

    prune_parser = subparsers.add_parser("prune", help="Remove keys that don't exist in the source")
    prune_parser.add_argument("language")
    prune_parser.add_argument("-d", "--dry-run", action="store_true", help="Preview without making changes")
    prune_parser.set_defaults(handler=cmd_prune)

    fix_quotes_parser = subparsers.add_parser("fix-quotes", help="Remove wrapping quotes the model added")
    fix_quotes_parser.add_argument("language")
    fix_quotes_parser.add_argument("-d", "--dry-run", action="store_true", help="Preview without making changes")
    fix_quotes_parser.set_defaults(handler=cmd_fix_quotes)

    list_languages_parser = subparsers.add_parser("list-languages", help="List all supported languages")
    list_languages_parser.add_argument("--json", action="store_true", help="Output as JSON")
    list_languages_parser.set_defaults(handler=cmd_list_languages)

    list_files_parser = subparsers.add_parser("list-files", help="List all translation files")
    list_files_parser.add_argument("--json", action="store_true", help="Output as JSON")
    list_files_parser.set_defaults(handler=cmd_list_files)

    export_parser = subparsers.add_parser("export-report", help="Export the discrepancy report as JSON")
    export_parser.add_argument("output_file", nargs="?", help="File to write (default: stdout)")
    export_parser.set_defaults(handler=cmd_export_report)

    glossary_parser = subparsers.add_parser("glossary", help="Manage protected glossary terms")
    glossary_subparsers = glossary_parser.add_subparsers(dest="glossary_command", required=True)
    glossary_list_parser = glossary_subparsers.add_parser("list", help="List all protected terms")
    glossary_list_parser.set_defaults(handler=cmd_glossary_list)
    glossary_add_parser = glossary_subparsers.add_parser("add", help="Add a protected term")
    glossary_add_parser.add_argument("term")
    glossary_add_parser.add_argument("description", nargs="?")
    glossary_add_parser.add_argument("--translation", action="append", default=[], metavar="LANG:VALUE",
                                     help="Override translation for a language (e.g. --translation de:Momente)")
    glossary_add_parser.set_defaults(handler=cmd_glossary_add)
    glossary_remove_parser = glossary_subparsers.add_parser("remove", help="Remove a protected term")
    glossary_remove_parser.add_argument("term")
    glossary_remove_parser.set_defaults(handler=cmd_glossary_remove)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if not getattr(args, "needs_config", True):
            setup_logger()
            return args.handler(args)

        config = load_app_config(
            model_name=args.model,
            concurrency=args.concurrency,
            messages_dir=args.messages,
        )
        return args.handler(args, config)
    except Transl8Error as exc:
        logger.error("Error: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
