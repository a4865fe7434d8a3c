"""
Put translated fragments back into the page they were extracted from.

Positional substitution is preferred: each fragment carries the span of raw
inner markup it was sliced from, and only those spans are rewritten. When a
fragment carries no span, its span no longer holds its text, or two spans
overlap (one selected element nested in another), the whole page falls back
to literal replacement of the first occurrence of each fragment's text, in
extraction order. A fragment that cannot be placed either way is an error.
"""

from typing import List, Optional, Sequence, Tuple

from pagetrans.errors import SubstitutionError
from pagetrans.logger import get_logger
from pagetrans.translation.extractor import Fragment

logger = get_logger(__name__)

Span = Tuple[int, int]


def fragment_span(markup: str, fragment: Fragment) -> Optional[Span]:
    """The fragment's recorded span, if it still holds the fragment's text in markup."""
    if fragment.start is None or fragment.end is None:
        return None
    if markup[fragment.start:fragment.end] != fragment.text:
        return None
    return fragment.start, fragment.end


def substitute_literal(markup: str, fragments: Sequence[Fragment], translations: Sequence[str]) -> str:
    """
    Replace the first occurrence of each fragment's text, in extraction order.

    Raises:
        SubstitutionError: If a non-empty fragment's text is not in the page
    """
    for fragment, translated in zip(fragments, translations):
        if not fragment.text:
            continue
        if fragment.text not in markup:
            logger.error("Fragment for selector '%s' no longer found in page", fragment.selector)
            raise SubstitutionError(fragment.selector)
        markup = markup.replace(fragment.text, translated, 1)
    return markup


def substitute_positional(markup: str, fragments: Sequence[Fragment], translations: Sequence[str]) -> Optional[str]:
    """
    Rewrite exactly the extracted spans.

    Returns None if any non-empty fragment has no usable span or two spans overlap.
    """
    replacements: List[Tuple[Span, str]] = []

    for fragment, translated in zip(fragments, translations):
        if not fragment.text:
            continue
        span = fragment_span(markup, fragment)
        if span is None:
            logger.debug("No source span for selector '%s'", fragment.selector)
            return None
        replacements.append((span, translated))

    replacements.sort(key=lambda item: item[0])
    for (previous, _), (current, _) in zip(replacements, replacements[1:]):
        if current[0] < previous[1]:
            logger.debug("Overlapping fragment spans %s and %s", previous, current)
            return None

    pieces = []
    cursor = 0
    for (start, end), translated in replacements:
        pieces.append(markup[cursor:start])
        pieces.append(translated)
        cursor = end
    pieces.append(markup[cursor:])
    return "".join(pieces)


def substitute(markup: str, fragments: Sequence[Fragment], translations: Sequence[str]) -> str:
    """
    Substitute translations[i] for fragments[i] in markup.

    Raises:
        ValueError: If the number of translations differs from the number of fragments
        SubstitutionError: If a fragment cannot be placed back into markup
    """
    if len(fragments) != len(translations):
        raise ValueError(
            f"Expected {len(fragments)} translations, got {len(translations)}"
        )

    result = substitute_positional(markup, fragments, translations)
    if result is not None:
        return result

    logger.info("Positional substitution not possible, falling back to literal replacement")
    return substitute_literal(markup, fragments, translations)
