"""
Page translation pipeline.

render -> extract fragments -> cache key -> cache lookup
  -> hit: stored translations
  -> miss: remote translate (coalesced per key), store
-> substitute -> translated markup

Any extractor or remote failure aborts the request and propagates to the
caller; no partially translated page is ever returned.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from pagetrans import language_codes as lc
from pagetrans.config import load_config
from pagetrans.errors import LanguageUnsupported, RemoteUnavailable
from pagetrans.logger import get_logger
from pagetrans.remote.client import TranslationClient
from pagetrans.translation.cache import TranslationCache, compute_cache_key
from pagetrans.translation.extractor import extract_fragments, fragment_texts
from pagetrans.translation.substitution import substitute

logger = get_logger(__name__)


@dataclass
class _Call:
    done: threading.Event = field(default_factory=threading.Event)
    result: Optional[List[str]] = None
    error: Optional[Exception] = None


class SingleFlight:
    """Coalesce concurrent calls for the same key into one execution."""

    def __init__(self):
        self._lock = threading.Lock()
        self._calls: Dict[str, _Call] = {}
        self._waiting: Dict[str, int] = {}

    def do(self, key: str, fn: Callable[[], List[str]]) -> List[str]:
        with self._lock:
            call = self._calls.get(key)
            leader = call is None
            if leader:
                call = _Call()
                self._calls[key] = call
            else:
                self._waiting[key] = self._waiting.get(key, 0) + 1

        if not leader:
            try:
                call.done.wait()
            finally:
                with self._lock:
                    self._waiting[key] -= 1
                    if not self._waiting[key]:
                        del self._waiting[key]
            if call.error is not None:
                # Waiters get the leader's exception object, as Future.result() does
                raise call.error
            return call.result

        try:
            call.result = fn()
            return call.result
        except Exception as e:
            call.error = e
            raise
        finally:
            with self._lock:
                del self._calls[key]
            call.done.set()

    def in_flight(self) -> int:
        with self._lock:
            return len(self._calls)

    def waiting(self, key: str) -> int:
        """Number of callers blocked on the in-flight call for key."""
        with self._lock:
            return self._waiting.get(key, 0)


def check_language_pair(source_language: str, target_language: str,
                        supported_languages: Optional[Sequence[str]]) -> None:
    """Raise LanguageUnsupported unless target is one of the supported languages."""
    if not source_language or not target_language:
        raise LanguageUnsupported(source_language, target_language)
    if lc.languages_match(source_language, target_language):
        raise LanguageUnsupported(source_language, target_language,
                                  message=f"Source and target language are both '{source_language}'")
    if supported_languages is not None and target_language not in supported_languages:
        raise LanguageUnsupported(source_language, target_language)


def call_with_retry(fn: Callable[[], List[str]], max_attempts: int = 1,
                    backoff_seconds: float = 1.0, sleep: Callable[[float], None] = time.sleep) -> List[str]:
    """
    Run fn, retrying only on RemoteUnavailable with exponential backoff.

    max_attempts=1 means no retry.
    """
    max_attempts = max(1, int(max_attempts))
    for attempt in range(max_attempts):
        try:
            return fn()
        except RemoteUnavailable as e:
            if attempt >= max_attempts - 1:
                raise
            wait_time = backoff_seconds * (2 ** attempt)
            logger.warning(f"  Attempt {attempt + 1} failed: {e}. Waiting {wait_time}s before retry...")
            sleep(wait_time)


def translate_page(
    render: Callable[[], str],
    selectors: Sequence[str],
    source_language: str,
    target_language: str,
    cache: TranslationCache,
    client: TranslationClient,
    ttl: float,
    supported_languages: Optional[Sequence[str]] = None,
    single_flight: Optional[SingleFlight] = None,
    max_attempts: int = 1,
    backoff_seconds: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Render a page and return it with its fragments translated.

    Args:
        render: Produces the page markup
        selectors: Ordered selectors naming the fragments to translate
        source_language: Language the page is rendered in
        target_language: Language to translate into
        cache: Shared translation cache
        client: Remote translation client
        ttl: Seconds a new cache entry stays valid
        supported_languages: Allowed target languages; None allows any
        single_flight: Coalesces concurrent misses for one key when given
        max_attempts: Remote attempts on RemoteUnavailable (1 = no retry)

    Raises:
        LanguageUnsupported: Before rendering, if the pair is not served
        ElementNotFound: If a selector matches nothing
        RemoteUnavailable, RemoteRejected: From the remote call
        SubstitutionError: If a translation cannot be placed back into the page
    """
    check_language_pair(source_language, target_language, supported_languages)

    markup = render()
    fragments = extract_fragments(markup, selectors)
    texts = fragment_texts(fragments)
    key = compute_cache_key(texts, source_language, target_language)

    translated = cache.get(key)
    if translated is not None:
        logger.debug(f"Cache hit for {len(texts)} fragments ({source_language} -> {target_language})")
    else:
        def fetch() -> List[str]:
            result = call_with_retry(
                lambda: client.translate(texts, source_language, target_language),
                max_attempts=max_attempts,
                backoff_seconds=backoff_seconds,
                sleep=sleep,
            )
            if len(result) != len(texts):
                raise RemoteUnavailable(
                    f"Translation count mismatch: expected {len(texts)}, got {len(result)}",
                    details={"expected": len(texts), "received": len(result)},
                )
            cache.put(key, result, ttl)
            return result

        logger.debug(f"Cache miss for {len(texts)} fragments ({source_language} -> {target_language})")
        translated = single_flight.do(key, fetch) if single_flight is not None else fetch()

    return substitute(markup, fragments, list(translated))


class PageTranslator:
    """
    Translate rendered views using one shared cache, client and configuration.

    The renderer maps a view name to markup and raises ViewNotFound for
    unknown views.
    """

    def __init__(
        self,
        renderer: Callable[[str], str],
        config: Optional[Dict[str, Any]] = None,
        cache: Optional[TranslationCache] = None,
        client: Optional[TranslationClient] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config if config is not None else load_config()
        cache_config = self.config.get('cache', {})
        retry_config = self.config.get('retry', {})

        self.renderer = renderer
        self.cache = cache if cache is not None else TranslationCache(max_entries=cache_config.get('max_entries'))
        self.client = client if client is not None else TranslationClient(self.config)
        self.single_flight = SingleFlight()
        self.sleep = sleep

        self.source_language = self.config.get('source_language', 'en')
        self.supported_languages = list(self.config.get('supported_languages', []))
        self.selectors = list(self.config.get('selectors', []))
        self.ttl = float(cache_config.get('ttl_seconds', 600))
        self.max_attempts = int(retry_config.get('max_attempts', 1))
        self.backoff_seconds = float(retry_config.get('backoff_seconds', 1.0))

    def resolve_language(self, language: Optional[str]) -> str:
        """Normalize a culture name to a servable language or raise LanguageUnsupported."""
        resolved = lc.normalize_language_code(language)
        if resolved is None:
            raise LanguageUnsupported(self.source_language, language or "")
        if resolved != self.source_language and resolved not in self.supported_languages:
            raise LanguageUnsupported(self.source_language, resolved)
        return resolved

    def translate_view(self, view_name: str, language: Optional[str]) -> str:
        """
        Produce the markup of view_name in language.

        The source language returns the rendered view unchanged.
        """
        target_language = self.resolve_language(language)
        if target_language == self.source_language:
            return self.renderer(view_name)

        logger.info(f"Translating view '{view_name}' to {target_language}")
        return translate_page(
            render=lambda: self.renderer(view_name),
            selectors=self.selectors,
            source_language=self.source_language,
            target_language=target_language,
            cache=self.cache,
            client=self.client,
            ttl=self.ttl,
            supported_languages=self.supported_languages,
            single_flight=self.single_flight,
            max_attempts=self.max_attempts,
            backoff_seconds=self.backoff_seconds,
            sleep=self.sleep,
        )
