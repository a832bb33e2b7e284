"""
Site-specific article parsers.

Some publishers wrap article bodies in markup the generic extractor reads
poorly. Each parser selects the publisher's body blocks directly and returns
None when the page does not look like one of its articles.
"""

import logging
import re
from typing import Callable, List, Optional, Pattern, Tuple
from urllib.parse import urlsplit

from .content_extractor import (
    ExtractedContent,
    element_text,
    extract_title,
    parse_html,
    strip_non_content,
)

logger = logging.getLogger(__name__)

# Parser output at or below this length is rejected
MIN_SITE_PARSER_CHARS = 100

SiteParser = Callable[[str], Optional[ExtractedContent]]


def _parse_with_selectors(html: str, selectors: List[str]) -> Optional[ExtractedContent]:
    soup = parse_html(html)
    title = extract_title(soup)
    strip_non_content(soup)

    blocks = []
    for selector in selectors:
        blocks.extend(soup.select(selector))

    if not blocks:
        return None

    seen = set()
    paragraphs = []
    for block in blocks:
        # nested matches would otherwise repeat text
        if id(block) in seen or any(id(parent) in seen for parent in block.parents):
            continue
        seen.add(id(block))
        text = element_text(block)
        if text:
            paragraphs.append(text)

    text = '\n\n'.join(paragraphs)
    if len(text) <= MIN_SITE_PARSER_CHARS:
        return None

    return ExtractedContent(text=text, title=title)


def parse_bbc(html: str) -> Optional[ExtractedContent]:
    """Parse a BBC News article body."""
    return _parse_with_selectors(html, [
        '[data-component*="text-block"]',
        '[class*="story-body"]',
    ])


def parse_sky_news(html: str) -> Optional[ExtractedContent]:
    """Parse a Sky News article body."""
    return _parse_with_selectors(html, [
        '[class*="sdc-article-body"]',
        '[data-module*="ArticleBody"]',
    ])


SITE_PARSERS: List[Tuple[Pattern, SiteParser]] = [
    (re.compile(r'(^|\.)sky\.com$'), parse_sky_news),
    (re.compile(r'(^|\.)bbc\.(com|co\.uk)$'), parse_bbc),
]


def get_site_parser(url: str) -> Optional[SiteParser]:
    """
    Look up the parser registered for a URL's host.

    Args:
        url: Page URL

    Returns:
        Parser callable, or None when no site parser matches
    """
    try:
        host = (urlsplit(url).hostname or '').lower()
    except ValueError:
        return None

    for pattern, parser in SITE_PARSERS:
        if pattern.search(host):
            logger.debug(f"Using site parser {parser.__name__} for {host}")
            return parser

    return None
