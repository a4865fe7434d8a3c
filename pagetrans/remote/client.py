"""
Remote Translation Client

TranslationClient wraps the configured remote provider behind one call:
translate(texts, source_language, target_language) returns one translated
string per input string, in input order. It never retries and never caches;
both belong to the caller.
"""

from typing import Any, Dict, List, Optional

import httpx

from pagetrans.config import load_config, validate_translation_config, API_KEY_PLACEHOLDER
from pagetrans.errors import RemoteRejected, RemoteUnavailable, TranslationError
from pagetrans.logger import get_logger
from pagetrans.remote.providers import call_deepl_api, call_openai_api, get_httpx_timeout

logger = get_logger(__name__)

PROVIDER_CALLS = {
    'deepl': call_deepl_api,
    'openai': call_openai_api,
}


class TranslationClient:
    """Stateless client for the remote translation capability."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        provider_override: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config if config is not None else load_config()
        self.provider = provider_override or self.config.get('translation_provider', 'deepl')
        if self.provider not in PROVIDER_CALLS:
            raise TranslationError(
                f"Unsupported translation provider: {self.provider}",
                code="config_missing",
                details={"provider": self.provider},
            )
        self.provider_config = self.config.get(self.provider, {})
        self.api_key = self.provider_config.get('api_key', '')
        self.api_url = self.provider_config.get('api_url', '')
        self.timeout = get_httpx_timeout(self.provider_config.get('timeout'))
        # Injected for tests (httpx.MockTransport); None means the real network
        self.transport = transport
        logger.info(f"Initialized translation client with provider: {self.provider}")

    def validate(self) -> None:
        """Raise TranslationError if the provider is not fully configured."""
        validate_translation_config(self.config, provider_override=self.provider)

    def translate(self, texts: List[str], source_language: str, target_language: str) -> List[str]:
        """
        Translate an ordered list of strings.

        Args:
            texts: Strings to translate
            source_language: Source language code
            target_language: Target language code

        Returns:
            Translated strings, same length and order as texts

        Raises:
            RemoteUnavailable: Transport failure, timeout or unusable response
            RemoteRejected: Authentication or quota failure, or missing API key
            LanguageUnsupported: The language pair is not served
        """
        if not texts:
            return []

        if not self.api_key or self.api_key == API_KEY_PLACEHOLDER:
            raise RemoteRejected(
                f"{self.provider} API key not configured",
                details={"provider": self.provider, "missing_field": "api_key"},
            )

        logger.debug(f"Translating {len(texts)} strings from {source_language} to {target_language}")
        translations = PROVIDER_CALLS[self.provider](self, list(texts), source_language, target_language)

        if len(translations) != len(texts):
            raise RemoteUnavailable(
                f"Translation count mismatch: expected {len(texts)}, got {len(translations)}",
                details={"provider": self.provider, "expected": len(texts), "received": len(translations)},
            )

        logger.info(f"Translated {len(translations)} strings ({source_language} -> {target_language})")
        return translations
