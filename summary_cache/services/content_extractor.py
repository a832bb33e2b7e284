"""
Article text extraction from raw page HTML.

Routes to a site-specific parser when one is registered for the URL and
falls back to a generic boilerplate stripper otherwise. The safe entry point
never raises: any failure degrades to the caller-supplied snippet.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol

from bs4 import BeautifulSoup, Comment

logger = logging.getLogger(__name__)

# Extractions shorter than this are treated as failures
MIN_EXTRACTED_CHARS = 50

NON_CONTENT_TAGS = ['script', 'style', 'noscript', 'nav', 'header', 'footer', 'aside', 'iframe']
BLOCK_TAGS = ['p', 'div', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'li', 'article', 'section']


@dataclass
class ExtractedContent:
    """Text and optional title pulled out of a page."""

    text: str
    title: Optional[str] = None


class ContentExtractor(Protocol):
    """Interface consumed by the orchestrator."""

    def extract(self, html: Optional[str], url: str, fallback_snippet: Optional[str] = None) -> str:
        ...

    def extract_title(self, html: Optional[str]) -> Optional[str]:
        ...


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'html.parser')


def strip_non_content(soup) -> None:
    """Remove scripts, chrome and comments in place."""
    for tag in soup.find_all(NON_CONTENT_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
        comment.extract()


def element_text(element) -> str:
    """
    Render an element as plain text, one line per block element.

    Args:
        element: BeautifulSoup tag or soup

    Returns:
        Text with collapsed whitespace and at most one blank line in a row
    """
    for br in element.find_all('br'):
        br.replace_with('\n')
    for block in element.find_all(BLOCK_TAGS):
        block.insert_before('\n')
        block.insert_after('\n')

    text = element.get_text().replace('\xa0', ' ')
    text = re.sub(r'[ \t]+', ' ', text)
    text = '\n'.join(line.strip() for line in text.split('\n'))
    text = re.sub(r'\n{3,}', '\n\n', text)
    return text.strip()


def extract_title(soup) -> Optional[str]:
    """
    Find the page title: og:title, then the first h1, then <title>.
    """
    meta = soup.find('meta', attrs={'property': 'og:title'})
    if meta and meta.get('content', '').strip():
        return meta['content'].strip()

    for tag_name in ('h1', 'title'):
        tag = soup.find(tag_name)
        if tag:
            title = tag.get_text().strip()
            if title:
                return title

    return None


def _find_article_container(soup):
    container = soup.find('article') or soup.find('main')
    if container:
        return container

    for attr in ('class', 'id'):
        for keyword in ('article', 'content'):
            container = soup.find(
                'div',
                attrs={attr: lambda value, kw=keyword: bool(value) and kw in ' '.join(
                    value if isinstance(value, list) else [value]
                )}
            )
            if container:
                return container

    return soup


def extract_article_content(html: str) -> ExtractedContent:
    """
    Generic extractor: strip page chrome and read the main content area.

    Args:
        html: Raw page HTML

    Returns:
        ExtractedContent (empty text for empty HTML)
    """
    if not html or not html.strip():
        return ExtractedContent(text='')

    soup = parse_html(html)
    title = extract_title(soup)
    strip_non_content(soup)
    text = element_text(_find_article_container(soup))

    return ExtractedContent(text=text, title=title)


class HtmlContentExtractor:
    """
    ContentExtractor backed by BeautifulSoup and the site parser registry.
    """

    def __init__(self, min_chars: int = MIN_EXTRACTED_CHARS):
        self.min_chars = min_chars

    def extract_content(self, html: str, url: str) -> ExtractedContent:
        """
        Extract article content, preferring a site-specific parser.

        Args:
            html: Raw page HTML
            url: Page URL, used to pick a site parser

        Returns:
            ExtractedContent
        """
        # late import: site parsers reuse the helpers above
        from .site_parsers import get_site_parser

        if not html or not html.strip():
            logger.warning(f"Empty HTML provided for extraction of {url}")
            return ExtractedContent(text='')

        site_parser = get_site_parser(url)
        if site_parser:
            try:
                result = site_parser(html)
                if result and len(result.text) > self.min_chars:
                    logger.info(f"Site parser extracted {len(result.text)} characters from {url}")
                    return result
                logger.info(f"Site parser returned insufficient content for {url}, using generic extractor")
            except Exception as e:
                logger.error(f"Site parser error for {url}: {e}")

        result = extract_article_content(html)
        if len(result.text) < self.min_chars:
            logger.warning(f"Generic extractor returned minimal content ({len(result.text)} chars) for {url}")
        else:
            logger.info(f"Generic extractor extracted {len(result.text)} characters from {url}")
        return result

    def extract(self, html: Optional[str], url: str, fallback_snippet: Optional[str] = None) -> str:
        """
        Extract article text, falling back to the snippet. Never raises.

        Args:
            html: Raw page HTML, may be empty or malformed
            url: Page URL
            fallback_snippet: Caller-supplied snippet

        Returns:
            Extracted text, the snippet, or an empty string
        """
        snippet = fallback_snippet or ''

        if not html or not html.strip():
            if snippet:
                logger.info(f"No HTML provided, using snippet for {url}")
            return snippet

        try:
            extracted = self.extract_content(html, url)
        except Exception as e:
            logger.error(f"Content extraction error for {url}, using snippet: {e}")
            return snippet

        if len(extracted.text) < self.min_chars and len(snippet) > len(extracted.text):
            logger.info(f"Extraction returned minimal content, using snippet for {url}")
            return snippet

        return extracted.text

    def extract_title(self, html: Optional[str]) -> Optional[str]:
        if not html or not html.strip():
            return None
        try:
            return extract_title(parse_html(html))
        except Exception as e:
            logger.warning(f"Title extraction failed: {e}")
            return None
