"""
JSON extraction from chat-completion responses.

Language models do not always return bare JSON, so parsing tries a few
strategies in order: the text as is, the text with markdown code fences
removed, and the outermost bracketed span.
"""

import json
from typing import Any, List, Optional

_BRACKETS = {list: ('[', ']'), dict: ('{', '}')}


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` block, if present."""
    text = text.strip()
    if not text.startswith('```'):
        return text
    lines = text.split('\n')[1:]
    if lines and lines[-1].strip() == '```':
        lines = lines[:-1]
    return '\n'.join(lines).strip()


def _outermost(text: str, opening: str, closing: str) -> Optional[str]:
    start = text.find(opening)
    end = text.rfind(closing)
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


def safe_parse_json(text: str, expected_type: type) -> Optional[Any]:
    """
    Parse text as JSON of expected_type (list or dict).

    Returns:
        The parsed value, or None if no strategy produced the expected type
    """
    if not text:
        return None

    candidates = [text.strip(), strip_code_fence(text)]
    opening, closing = _BRACKETS[expected_type]
    extracted = _outermost(text, opening, closing)
    if extracted:
        candidates.append(extracted)

    for candidate in candidates:
        try:
            result = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(result, expected_type):
            return result
    return None


def parse_translations_response(text: str) -> Optional[List[str]]:
    """
    Parse translations from a model response.

    Accepts a JSON array of strings, or an object with a "translations" list
    whose items are strings or {"text": ...} objects.
    """
    result = safe_parse_json(text, list)
    if result is None:
        obj = safe_parse_json(text, dict)
        if obj is None or not isinstance(obj.get('translations'), list):
            return None
        result = obj['translations']

    translations = []
    for item in result:
        if isinstance(item, dict):
            item = item.get('text')
        if not isinstance(item, str):
            return None
        translations.append(item)
    return translations
