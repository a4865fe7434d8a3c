"""
Fragment extraction for rendered pages.

Each selector picks exactly one element (the first match in document order).
Its raw inner markup, sliced straight from the rendered page, becomes one
Fragment together with the span it occupies. The order of the returned
fragments is the order of the selector list and is what ties translation
output back to the page during substitution, so it is never re-sorted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from pagetrans.errors import ElementNotFound
from pagetrans.logger import get_logger

logger = get_logger(__name__)

PARSER = "html.parser"

# A start tag from '<' to its closing '>', skipping quoted attribute values
START_TAG_PATTERN = re.compile(r'<[a-zA-Z][^\s/>]*(?:[^>"\']|"[^"]*"|\'[^\']*\')*>')

# Comments and whole script/style blocks are skipped, other tags capture their name
MARKUP_TOKEN_PATTERN = re.compile(
    r'<!--.*?-->'
    r'|<(?P<raw>script|style)\b(?:[^>"\']|"[^"]*"|\'[^\']*\')*>.*?</(?P=raw)\s*>'
    r'|<(?P<closing>/?)(?P<name>[a-zA-Z][^\s/>]*)(?:[^>"\']|"[^"]*"|\'[^\']*\')*>',
    re.DOTALL | re.IGNORECASE,
)

VOID_ELEMENTS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
}
# Content runs to the first matching end tag, tags inside are text
RAW_TEXT_ELEMENTS = {"script", "style", "title", "textarea"}

Span = Tuple[int, int]


@dataclass(frozen=True)
class Fragment:
    """One unit of translatable content taken from a rendered page."""

    selector: str
    text: str
    tag_name: str
    # 1-based line and 0-based column of the element's start tag, if known
    sourceline: Optional[int] = None
    sourcepos: Optional[int] = None
    # Offsets of text within the markup it was extracted from
    start: Optional[int] = None
    end: Optional[int] = None


def line_offsets(markup: str) -> List[int]:
    """Offsets at which each line of markup starts (index 0 is line 1)."""
    return [0] + [match.end() for match in re.finditer('\n', markup)]


def _find_content_end(markup: str, content_start: int, node: Tag) -> int:
    """
    Offset where node's inner markup ends.

    Tags are tracked the way the parser builds the tree: an end tag closes the
    most recent open element of that name, and unclosed elements inside node
    stay open until node itself or one of its ancestors is closed.
    """
    name = node.name.lower()

    if name in RAW_TEXT_ELEMENTS:
        match = re.compile(rf'</{re.escape(name)}\s*>', re.IGNORECASE).search(markup, content_start)
        return match.start() if match else len(markup)

    ancestors = {parent.name.lower() for parent in node.parents if parent.name != BeautifulSoup.ROOT_TAG_NAME}
    open_tags: List[str] = []
    for match in MARKUP_TOKEN_PATTERN.finditer(markup, content_start):
        tag_name = match.group("name")
        if tag_name is None:
            continue
        tag_name = tag_name.lower()

        if match.group("closing"):
            if tag_name in open_tags:
                del open_tags[len(open_tags) - 1 - open_tags[::-1].index(tag_name):]
            elif tag_name == name or tag_name in ancestors:
                return match.start()
        elif tag_name not in VOID_ELEMENTS and not match.group(0).endswith('/>'):
            open_tags.append(tag_name)

    return len(markup)


def inner_span(markup: str, offsets: Sequence[int], node: Tag, selector: str) -> Span:
    """
    Span of node's raw inner markup, located from its recorded start-tag position.

    Raises:
        ElementNotFound: If the start tag cannot be located in markup
    """
    if node.sourceline is None or node.sourcepos is None or not 1 <= node.sourceline <= len(offsets):
        raise ElementNotFound(selector, details={"reason": "element has no source position"})

    tag_start = offsets[node.sourceline - 1] + node.sourcepos
    match = START_TAG_PATTERN.match(markup, tag_start)
    if not match:
        raise ElementNotFound(selector, details={"reason": f"start tag not found at offset {tag_start}"})

    content_start = match.end()
    if node.name.lower() in VOID_ELEMENTS or match.group(0).endswith('/>'):
        return content_start, content_start
    return content_start, _find_content_end(markup, content_start, node)


def extract_fragments(markup: str, selectors: Sequence[str]) -> List[Fragment]:
    """
    Extract the raw inner markup of the first element matching each selector.

    Args:
        markup: Rendered page markup
        selectors: CSS selectors, evaluated in the given order

    Returns:
        One Fragment per selector, in selector order

    Raises:
        ElementNotFound: If a selector matches nothing or cannot be parsed
    """
    soup = BeautifulSoup(markup, PARSER)
    offsets = line_offsets(markup)
    fragments: List[Fragment] = []

    for selector in selectors:
        try:
            node = soup.select_one(selector)
        except SelectorSyntaxError as e:
            raise ElementNotFound(selector, details={"reason": str(e)}) from e

        if node is None:
            logger.warning("Selector '%s' matched nothing in rendered page", selector)
            raise ElementNotFound(selector)

        start, end = inner_span(markup, offsets, node, selector)
        fragments.append(Fragment(
            selector=selector,
            text=markup[start:end],
            tag_name=node.name,
            sourceline=node.sourceline,
            sourcepos=node.sourcepos,
            start=start,
            end=end,
        ))

    logger.debug("Extracted %d fragments using selectors %s", len(fragments), list(selectors))
    return fragments


def fragment_texts(fragments: Sequence[Fragment]) -> List[str]:
    """Texts of the given fragments, in extraction order."""
    return [fragment.text for fragment in fragments]
