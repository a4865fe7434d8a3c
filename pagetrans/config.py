import copy
import json
import os
from pathlib import Path
from typing import Dict, Any, Optional

from pagetrans.errors import TranslationError
from pagetrans.logger import _clear_log_mode_cache

# Page translation defaults
DEFAULT_SOURCE_LANGUAGE = "en"
DEFAULT_SELECTORS = ["title", "ul", "h1", "p", "footer"]
DEFAULT_CACHE_TTL_SECONDS = 600  # 10 minutes, absolute from insertion
DEFAULT_SYSTEM_MESSAGE = "You are a professional translator. Return only valid JSON."

# Provider configuration constants
BUILTIN_PROVIDERS = ["deepl", "openai"]

BUILTIN_PROVIDER_DISPLAY_NAMES = {
    "deepl": "DeepL",
    "openai": "OpenAI",
}

API_KEY_PLACEHOLDER = "YOUR_API_KEY_HERE"

# Environment overrides
ENV_CONFIG_PATH = "PAGETRANS_CONFIG"
ENV_API_KEY = "PAGETRANS_API_KEY"
ENV_PROVIDER = "PAGETRANS_PROVIDER"
ENV_LOG_MODE = "PAGETRANS_LOG_MODE"

# Get base directory (project root)
BASE_DIR = Path(__file__).parent.parent
CONFIG_DIR = BASE_DIR / "config"
CONFIG_FILE = CONFIG_DIR / "config.json"

# Default prompts
DEFAULT_PROMPTS = {
    "array_translation_prompt": {
        "version": "1.0",
        "description": "Array translation prompt for OpenAI-compatible providers",
        "prompt": """You are a professional translator specializing in web page content.

Translate each string from {source_language_name} ({source_language_code}) to {target_language_name} ({target_language_code}). Return ONLY a JSON array with the translated strings in the same order.

CRITICAL REQUIREMENTS:
- Strings may contain HTML markup. Keep every tag and attribute exactly as it appears and translate only the human-readable text
- Maintain the original tone and style
- Return exactly {text_count} translated strings

Array to translate:
{texts_json}

Return format: ["translated1", "translated2", ...]
Do not include explanations, markdown code blocks, or any text outside the JSON array. Return ONLY the JSON array."""
    }
}

# Default configuration template
DEFAULT_CONFIG = {
    "translation_provider": "deepl",
    "deepl": {
        "api_key": API_KEY_PLACEHOLDER,
        "api_url": "https://api-free.deepl.com/v2/translate",
        "timeout": 10,
        "tag_handling": "html",
    },
    "openai": {
        "api_key": API_KEY_PLACEHOLDER,
        "models": ["gpt-4o-mini"],  # First is default
        "timeout": 30,
        "api_url": "https://api.openai.com/v1/chat/completions",
    },
    "source_language": DEFAULT_SOURCE_LANGUAGE,
    "supported_languages": ["fr"],
    "selectors": DEFAULT_SELECTORS,
    "cache": {
        "ttl_seconds": DEFAULT_CACHE_TTL_SECONDS,
        "max_entries": 1024,
    },
    "retry": {
        "max_attempts": 1,
        "backoff_seconds": 1.0,
    },
    "log_mode": "info",
}

# Loaded once per process; a restart picks up changes
_config_cache: Optional[Dict[str, Any]] = None


def get_config_file() -> Path:
    """Resolve the config file path, honouring the PAGETRANS_CONFIG override."""
    override = os.environ.get(ENV_CONFIG_PATH)
    return Path(override) if override else CONFIG_FILE


def ensure_config_directory(config_file: Path = None):
    """Ensure the config directory exists."""
    config_file = config_file or get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)


def create_default_config(config_file: Path = None) -> Path:
    """Create the default config.json file."""
    config_file = config_file or get_config_file()
    ensure_config_directory(config_file)
    with open(config_file, 'w', encoding='utf-8') as f:
        json.dump(DEFAULT_CONFIG, f, indent=4, ensure_ascii=False)
    return config_file


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge override into a copy of base. Nested dicts merge, everything else replaces."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment overrides. The API key goes to the active provider."""
    provider = os.environ.get(ENV_PROVIDER)
    if provider:
        config["translation_provider"] = provider

    log_mode = os.environ.get(ENV_LOG_MODE)
    if log_mode:
        config["log_mode"] = log_mode

    api_key = os.environ.get(ENV_API_KEY)
    if api_key:
        active = config.get("translation_provider", "deepl")
        config.setdefault(active, {})["api_key"] = api_key

    return config


def read_config_file(config_file: Path) -> Dict[str, Any]:
    """Read a JSON config file. Missing file means no overrides."""
    if not config_file.exists():
        return {}
    with open(config_file, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise TranslationError(
            f"Config file {config_file} must contain a JSON object",
            code="config_invalid",
            details={"path": str(config_file)},
        )
    return data


def load_config() -> Dict[str, Any]:
    """
    Load the configuration.

    Defaults, then the JSON config file, then environment variables. The result
    is cached for the lifetime of the process.
    """
    global _config_cache
    if _config_cache is not None:
        return _config_cache

    config_file = get_config_file()
    try:
        file_config = read_config_file(config_file)
    except json.JSONDecodeError as e:
        raise TranslationError(
            f"Failed to parse config file {config_file}: {e}",
            code="config_invalid",
            details={"path": str(config_file)},
        ) from e

    config = apply_env_overrides(merge_config(DEFAULT_CONFIG, file_config))
    _config_cache = config
    return config


def clear_config_cache():
    """Forget the loaded configuration (tests only; production reloads via restart)."""
    global _config_cache
    _config_cache = None


def save_config(config: Dict[str, Any], config_file: Path = None):
    """Save the configuration to the JSON config file."""
    config_file = config_file or get_config_file()
    ensure_config_directory(config_file)
    with open(config_file, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=4, ensure_ascii=False)
    clear_config_cache()
    _clear_log_mode_cache()


def get_prompt(prompt_name: str = "array_translation_prompt") -> Dict[str, Any]:
    """Get a specific prompt by name."""
    return DEFAULT_PROMPTS.get(prompt_name, DEFAULT_PROMPTS["array_translation_prompt"])


def provider_display_name(provider: str) -> str:
    if provider in BUILTIN_PROVIDER_DISPLAY_NAMES:
        return BUILTIN_PROVIDER_DISPLAY_NAMES[provider]
    return provider.replace('-', ' ').title()


def validate_translation_config(config: Dict[str, Any] = None, provider_override: Optional[str] = None) -> None:
    """
    Validate that the translation provider configuration is properly set up.

    Args:
        config: Configuration to check. Defaults to the loaded configuration.
        provider_override: Optional provider to validate instead of the default.

    Raises:
        TranslationError: If configuration is invalid or missing, with code and details.
    """
    config = config if config is not None else load_config()
    provider = provider_override or config.get('translation_provider', 'deepl')

    if provider not in BUILTIN_PROVIDERS:
        raise TranslationError(
            f"Translation provider '{provider}' is not supported",
            code="config_missing",
            details={"provider": provider}
        )

    provider_config = config.get(provider)
    if not provider_config or not isinstance(provider_config, dict):
        raise TranslationError(
            f"Translation provider '{provider}' configuration not found",
            code="config_missing",
            details={"provider": provider}
        )

    api_key = provider_config.get('api_key', '')
    if not api_key or api_key == API_KEY_PLACEHOLDER:
        raise TranslationError(
            f"{provider_display_name(provider)} API key not configured. Set {ENV_API_KEY} or edit the config file.",
            code="config_missing",
            details={"provider": provider, "missing_field": "api_key"}
        )

    if not provider_config.get('api_url'):
        raise TranslationError(
            f"{provider_display_name(provider)} API URL not configured",
            code="config_missing",
            details={"provider": provider, "missing_field": "api_url"}
        )

    if provider == 'openai' and not provider_config.get('models') and not provider_config.get('model'):
        raise TranslationError(
            "OpenAI model not configured",
            code="config_missing",
            details={"provider": provider, "missing_field": "models"}
        )

    supported = config.get('supported_languages')
    if not isinstance(supported, list):
        raise TranslationError(
            "supported_languages must be a list of language codes",
            code="config_invalid",
            details={"field": "supported_languages"}
        )
