"""Application configuration for transl8."""
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml
from aiolimiter import AsyncLimiter
from dotenv import load_dotenv
from openai import AsyncOpenAI

from transl8.content_classifier import DEFAULT_PASS_THROUGH_PATTERNS, LinkedContentPattern
from transl8.glossary import Glossary, save_glossary
from transl8.languages import SUPPORTED_LANGUAGES, LanguageInfo, build_languages_from_locales
from transl8.logging_config import setup_logger
from transl8.orchestrator import DEFAULT_CONCURRENCY, OrchestratorSettings
from transl8.providers import DEFAULT_TEMPERATURE, DEFAULT_TIMEOUT
from transl8.storage import translation_file_path

CONFIG_FILE_NAME = "transl8.yaml"
CONFIG_FILE_ENV_VAR = "TRANSL8_CONFIG_FILE"
DEFAULT_MODEL_NAME = "gpt-5.2"
DEFAULT_MESSAGES_DIR = "./messages"
DEFAULT_GLOSSARY_FILE = "./glossary.json"
DEFAULT_SOURCE_LANGUAGE = "en"

DEFAULT_CONFIG: Dict[str, Any] = {
    "messages_dir": DEFAULT_MESSAGES_DIR,
    "source_language": DEFAULT_SOURCE_LANGUAGE,
    "model_name": DEFAULT_MODEL_NAME,
    "concurrency": DEFAULT_CONCURRENCY,
    "glossary_file_path": DEFAULT_GLOSSARY_FILE,
    "pass_through_patterns": list(DEFAULT_PASS_THROUGH_PATTERNS),
    "linked_content_patterns": [],
    "requests_per_minute": None,
    "logging": {
        "log_level": "INFO",
        "log_file_path": None,
        "log_to_console": True,
    },
}


@dataclass
class AppConfig:
    """Application configuration dataclass."""
    # Paths (absolute)
    messages_dir: str
    glossary_file_path: str
    config_file_path: Optional[str]

    # Model configuration
    model_name: str
    temperature: float
    request_timeout: float
    requests_per_minute: Optional[int]

    # Processing settings
    source_language: str
    concurrency: int
    pass_through_patterns: List[str]
    linked_content_patterns: List[LinkedContentPattern]

    # Language configuration
    languages: List[LanguageInfo] = field(default_factory=lambda: list(SUPPORTED_LANGUAGES))

    @property
    def source_file_path(self) -> str:
        return translation_file_path(self.messages_dir, self.source_language)

    def target_file_path(self, language_code: str) -> str:
        return translation_file_path(self.messages_dir, language_code)

    def orchestrator_settings(self) -> OrchestratorSettings:
        return OrchestratorSettings(
            concurrency=self.concurrency,
            pass_through_patterns=tuple(self.pass_through_patterns),
            linked_content_patterns=tuple(self.linked_content_patterns),
        )


def find_config_file(start_dir: Optional[str] = None) -> Optional[str]:
    """
    Walk upward from ``start_dir`` (default: the working directory) looking for ``transl8.yaml``.

    Returns:
        Optional[str]: The absolute path of the first file found, or None.
    """
    directory = os.path.abspath(start_dir or os.getcwd())
    while True:
        candidate = os.path.join(directory, CONFIG_FILE_NAME)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(directory)
        if parent == directory:
            return None
        directory = parent


def _load_dotenv_files(directories: List[str]) -> List[str]:
    """Load the .env file of each directory, if present. Existing variables are never overridden."""
    loaded = []
    for directory in directories:
        dotenv_path = os.path.join(directory, '.env')
        if os.path.exists(dotenv_path) and dotenv_path not in loaded:
            load_dotenv(dotenv_path)
            loaded.append(dotenv_path)
    return loaded


def _load_yaml_config(config_file: str) -> Dict[str, Any]:
    """Load the YAML configuration file. Problems are reported on stderr and degrade to defaults."""
    config: Dict[str, Any] = {}
    try:
        if not os.access(config_file, os.R_OK):
            print(f"Error: Configuration file '{config_file}' exists but is not readable. Check file permissions.",
                  file=sys.stderr)
            return config

        with open(config_file, 'r', encoding='utf-8') as config_file_stream:
            loaded_config = yaml.safe_load(config_file_stream)
            if loaded_config is None:
                print(f"Warning: Configuration file '{config_file}' is empty. Using default configuration.",
                      file=sys.stderr)
            elif isinstance(loaded_config, dict):
                config = loaded_config
            else:
                print(f"Error: Configuration file '{config_file}' must contain a YAML dictionary. Using defaults.",
                      file=sys.stderr)

    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file '{config_file}': {e}", file=sys.stderr)
        print("Please check your YAML syntax. Using default configuration.", file=sys.stderr)
    except OSError as e:
        print(f"Error: Could not read configuration file '{config_file}': {e}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)

    return config


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _env_overrides() -> Dict[str, Any]:
    """Read TRANSL8_MODEL and TRANSL8_CONCURRENCY. An invalid concurrency value is ignored."""
    overrides: Dict[str, Any] = {}
    model_name = os.environ.get('TRANSL8_MODEL')
    if model_name:
        overrides['model_name'] = model_name
    concurrency = _positive_int(os.environ.get('TRANSL8_CONCURRENCY'))
    if concurrency:
        overrides['concurrency'] = concurrency
    return overrides


def _setup_logger_from_config(config: Dict[str, Any], base_dir: str) -> logging.Logger:
    """Set up logger based on configuration."""
    log_config = {**DEFAULT_CONFIG['logging'], **(config.get('logging') or {})}
    log_file_path = log_config.get('log_file_path')
    if log_file_path:
        log_file_path = os.path.join(base_dir, log_file_path)
    return setup_logger(str(log_config.get('log_level', 'INFO')), log_file_path, bool(log_config.get('log_to_console')))


def load_app_config(
        model_name: Optional[str] = None,
        concurrency: Optional[int] = None,
        messages_dir: Optional[str] = None,
        start_dir: Optional[str] = None
) -> AppConfig:
    """
    Load the configuration by merging defaults, the config file, the environment and CLI flags.

    Relative paths from the config file resolve against the config file's
    directory (the working directory when there is no config file). A
    ``messages_dir`` given on the command line resolves against the working
    directory.

    Args:
        model_name (Optional[str]): ``--model`` flag.
        concurrency (Optional[int]): ``--concurrency`` flag.
        messages_dir (Optional[str]): ``--messages`` flag.
        start_dir (Optional[str]): Where the config file search starts (default: the working directory).

    Returns:
        AppConfig: The loaded application configuration.
    """
    cwd = os.path.abspath(start_dir or os.getcwd())
    loaded_dotenv = _load_dotenv_files([cwd])

    config_file = os.environ.get(CONFIG_FILE_ENV_VAR) or find_config_file(cwd)
    if config_file:
        config_file = os.path.abspath(config_file)
    config_dir = os.path.dirname(config_file) if config_file else cwd

    file_config: Dict[str, Any] = {}
    if config_file and os.path.exists(config_file):
        file_config = _load_yaml_config(config_file)
        loaded_dotenv += _load_dotenv_files([config_dir])
    elif config_file:
        print(f"Warning: Configuration file '{config_file}' not found. Using default configuration.",
              file=sys.stderr)

    config = {**DEFAULT_CONFIG, **file_config, **_env_overrides()}

    logger = _setup_logger_from_config(config, config_dir)
    for dotenv_path in loaded_dotenv:
        logger.debug("Loaded environment variables from: %s", dotenv_path)
    if config_file and file_config:
        logger.debug("Loaded configuration from: %s", config_file)

    if model_name:
        config['model_name'] = model_name
    if concurrency:
        config['concurrency'] = concurrency

    resolved_concurrency = _positive_int(config.get('concurrency'))
    if resolved_concurrency is None:
        logger.warning("Invalid concurrency '%s' in configuration. Using %d.", config.get('concurrency'),
                       DEFAULT_CONCURRENCY)
        resolved_concurrency = DEFAULT_CONCURRENCY

    if messages_dir:
        resolved_messages_dir = os.path.abspath(os.path.join(cwd, messages_dir))
    else:
        resolved_messages_dir = os.path.abspath(os.path.join(config_dir, config['messages_dir']))

    locales_list = config.get('supported_locales') or []
    languages = build_languages_from_locales(locales_list) or list(SUPPORTED_LANGUAGES)

    linked_patterns = [
        LinkedContentPattern.from_dict(raw)
        for raw in (config.get('linked_content_patterns') or [])
        if isinstance(raw, dict)
    ]

    return AppConfig(
        messages_dir=resolved_messages_dir,
        glossary_file_path=os.path.abspath(os.path.join(config_dir, config['glossary_file_path'])),
        config_file_path=config_file if file_config else None,
        model_name=str(config['model_name']),
        temperature=float(config.get('temperature', DEFAULT_TEMPERATURE)),
        request_timeout=float(config.get('request_timeout', DEFAULT_TIMEOUT)),
        requests_per_minute=_positive_int(config.get('requests_per_minute')),
        source_language=str(config['source_language']),
        concurrency=resolved_concurrency,
        pass_through_patterns=[str(p) for p in (config.get('pass_through_patterns') or [])],
        linked_content_patterns=linked_patterns,
        languages=languages,
    )


def create_default_config(directory: Optional[str] = None) -> str:
    """Write a default ``transl8.yaml`` into ``directory`` (default: the working directory)."""
    config_path = os.path.join(directory or os.getcwd(), CONFIG_FILE_NAME)
    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(DEFAULT_CONFIG, f, sort_keys=False, allow_unicode=True)
    return config_path


def create_default_glossary(directory: Optional[str] = None) -> str:
    """Write an empty glossary file into ``directory`` (default: the working directory)."""
    glossary_path = os.path.join(directory or os.getcwd(), os.path.basename(DEFAULT_GLOSSARY_FILE))
    save_glossary(glossary_path, Glossary())
    return glossary_path


def create_rate_limiter(config: AppConfig) -> Optional[AsyncLimiter]:
    if not config.requests_per_minute:
        return None
    return AsyncLimiter(config.requests_per_minute, 60)


def create_openai_client(logger: Optional[logging.Logger] = None) -> AsyncOpenAI:
    """Create the OpenAI client from OPENAI_API_KEY. Exits the process if the key is missing."""
    logger = logger or logging.getLogger(__name__)
    api_key_from_env = os.environ.get('OPENAI_API_KEY')
    if not api_key_from_env:
        logger.critical("CRITICAL: OPENAI_API_KEY environment variable not found.")
        logger.critical("Set OPENAI_API_KEY in your environment or in a .env file, or use --dry-run.")
        sys.exit(1)

    try:
        client = AsyncOpenAI(api_key=api_key_from_env)
    except Exception as e:
        logger.critical("Failed to initialize OpenAI client: %s", str(e))
        sys.exit(1)
    logger.debug("OpenAI client initialized successfully")
    return client
