"""
Remote Translation Provider Implementations

This module contains the API call implementations for each provider:
- DeepL (/v2/translate, batch of texts in, batch of texts out)
- OpenAI-compatible chat completions (asked for a JSON array of translations)

Each function takes a TranslationClient instance plus the texts and language
pair, and returns the translated texts in input order. Failures are raised as
RemoteUnavailable, RemoteRejected or LanguageUnsupported.
"""

import json
from typing import Any, List

import httpx

from pagetrans import language_codes as lc
from pagetrans.config import get_prompt, DEFAULT_SYSTEM_MESSAGE
from pagetrans.errors import LanguageUnsupported, RemoteRejected, RemoteUnavailable
from pagetrans.logger import get_logger
from pagetrans.remote.parsing import parse_translations_response

logger = get_logger(__name__)

AUTH_STATUS_CODES = (401, 403)
# 456 is DeepL's "quota exceeded"
QUOTA_STATUS_CODES = (429, 456)


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (read timeout) or a dict with
            connect, write, read, pool keys
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 5.0),
            write=timeout_config.get('write', 10.0),
            read=timeout_config.get('read', 30.0),
            pool=timeout_config.get('pool', 5.0),
        )
    timeout_value = float(timeout_config) if timeout_config else 30.0
    return httpx.Timeout(
        connect=5.0,
        write=10.0,
        read=timeout_value,
        pool=5.0,
    )


def _error_text(response: httpx.Response) -> str:
    try:
        error_json = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(error_json, dict):
        detail = error_json.get("error", error_json.get("message", error_json))
        if isinstance(detail, dict):
            return str(detail.get("message", detail))
        return str(detail)
    return str(error_json)


def handle_http_error(e: httpx.HTTPStatusError, provider: str, source_language: str, target_language: str):
    """Translate an HTTP error status into the matching translation error."""
    status_code = e.response.status_code
    error_text = _error_text(e.response)
    details = {"provider": provider, "status_code": status_code}

    if status_code in AUTH_STATUS_CODES:
        raise RemoteRejected(f"{provider} rejected the credentials ({status_code}): {error_text}", details=details)
    if status_code in QUOTA_STATUS_CODES:
        raise RemoteRejected(f"{provider} quota or rate limit exceeded ({status_code}): {error_text}", details=details)
    if status_code == 400 and 'lang' in error_text.lower():
        raise LanguageUnsupported(source_language, target_language, message=f"{provider}: {error_text}")
    if status_code >= 500:
        raise RemoteUnavailable(f"{provider} API error ({status_code}): {error_text}", details=details)
    raise RemoteRejected(f"{provider} API error ({status_code}): {error_text}", details=details)


def _post(client, provider: str, url: str, headers: dict, body: dict,
          source_language: str, target_language: str) -> Any:
    """POST a JSON body and return the decoded JSON response."""
    try:
        with httpx.Client(timeout=client.timeout, transport=client.transport) as http:
            response = http.post(url, headers=headers, json=body)
            response.raise_for_status()
            return response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"{provider} API HTTP error: {e.response.status_code}")
        handle_http_error(e, provider, source_language, target_language)
    except httpx.TimeoutException as e:
        raise RemoteUnavailable(f"{provider} API request timeout", details={"provider": provider}) from e
    except httpx.TransportError as e:
        raise RemoteUnavailable(f"{provider} API unreachable: {e}", details={"provider": provider}) from e
    except ValueError as e:
        raise RemoteUnavailable(f"{provider} API returned invalid JSON", details={"provider": provider}) from e


def _check_languages(source_language: str, target_language: str):
    if not (lc.is_valid_language_code(source_language) and lc.is_valid_language_code(target_language)):
        raise LanguageUnsupported(source_language, target_language)


def call_deepl_api(client, texts: List[str], source_language: str, target_language: str) -> List[str]:
    """Call the DeepL translate endpoint with the whole batch."""
    provider_config = client.provider_config
    _check_languages(source_language, target_language)

    headers = {
        "Authorization": f"DeepL-Auth-Key {client.api_key}",
        "Content-Type": "application/json",
    }
    body = {
        "text": texts,
        "source_lang": lc.to_deepl_code(source_language),
        "target_lang": lc.to_deepl_code(target_language, target=True),
    }
    tag_handling = provider_config.get('tag_handling')
    if tag_handling:
        body["tag_handling"] = tag_handling

    logger.debug(f"Calling DeepL API: {len(texts)} texts {source_language} -> {target_language}")
    result = _post(client, "DeepL", client.api_url, headers, body, source_language, target_language)

    translations = result.get('translations') if isinstance(result, dict) else None
    if not isinstance(translations, list):
        raise RemoteUnavailable(f"Unexpected DeepL API response format: {result}", details={"provider": "DeepL"})
    return [item.get('text', '') if isinstance(item, dict) else '' for item in translations]


def build_array_prompt(texts: List[str], source_language: str, target_language: str) -> str:
    """Build the array translation prompt."""
    prompt_template = get_prompt('array_translation_prompt')['prompt']
    return prompt_template.format(
        source_language_name=lc.get_language_name(source_language) or source_language,
        source_language_code=source_language,
        target_language_name=lc.get_language_name(target_language) or target_language,
        target_language_code=target_language,
        text_count=len(texts),
        texts_json=json.dumps(texts, ensure_ascii=False),
    )


def call_openai_api(client, texts: List[str], source_language: str, target_language: str) -> List[str]:
    """Call an OpenAI-compatible chat completions endpoint and parse a JSON array back."""
    provider_config = client.provider_config
    _check_languages(source_language, target_language)

    models = provider_config.get('models') or [provider_config.get('model', 'gpt-4o-mini')]
    model = models[0]

    headers = {
        "Authorization": f"Bearer {client.api_key}",
        "Content-Type": "application/json",
    }
    body = {
        "model": model,
        "messages": [
            {"role": "system", "content": provider_config.get('system_message', DEFAULT_SYSTEM_MESSAGE)},
            {"role": "user", "content": build_array_prompt(texts, source_language, target_language)},
        ],
    }

    logger.debug(f"  Calling OpenAI API (model: {model})...")
    result = _post(client, "OpenAI", client.api_url, headers, body, source_language, target_language)

    choices = result.get('choices') if isinstance(result, dict) else None
    first = choices[0] if isinstance(choices, list) and choices else None
    message = first.get('message') if isinstance(first, dict) else None
    content = message.get('content') if isinstance(message, dict) else None
    if not content or not isinstance(content, str):
        raise RemoteUnavailable("No content in OpenAI response", details={"provider": "OpenAI"})
    logger.debug(f"  Received {len(content)} chars from OpenAI")

    translations = parse_translations_response(content)
    if translations is None:
        raise RemoteUnavailable("Could not parse translations from OpenAI response", details={"provider": "OpenAI"})
    return translations
