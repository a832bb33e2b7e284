"""
Unit tests for HTML content extraction and site parsers.
"""

from unittest.mock import patch

from summary_cache.services.content_extractor import (
    HtmlContentExtractor,
    extract_article_content,
)
from summary_cache.services.site_parsers import get_site_parser, parse_bbc, parse_sky_news

PARAGRAPH = (
    'The council approved the new transport plan on Tuesday after a lengthy '
    'debate about funding for cycle lanes and bus routes.'
)

GENERIC_PAGE = f"""
<html>
  <head>
    <title>Transport plan approved | Example News</title>
    <meta property="og:title" content="Transport plan approved">
    <script>trackPageView();</script>
    <style>body {{ color: red; }}</style>
  </head>
  <body>
    <nav>Home | World | Sport</nav>
    <header>Example News</header>
    <article>
      <h1>Transport plan approved</h1>
      <p>{PARAGRAPH}</p>
      <!-- advert slot -->
      <p>Work is expected to start&nbsp;next spring.</p>
    </article>
    <aside>Most read</aside>
    <footer>Copyright Example News</footer>
  </body>
</html>
"""

BBC_PAGE = f"""
<html><head><title>BBC News</title></head><body>
  <div class="nav">Menu</div>
  <article>
    <div data-component="headline-block"><h1>Transport plan approved</h1></div>
    <div data-component="text-block"><p>{PARAGRAPH}</p></div>
    <div data-component="related-links">Related stories</div>
    <div data-component="text-block"><p>Work is expected to start next spring.</p></div>
  </article>
</body></html>
"""

SKY_PAGE = f"""
<html><head><title>Sky News</title></head><body>
  <div class="sdc-site-header">Sky News</div>
  <div class="sdc-article-body sdc-article-body--story">
    <p>{PARAGRAPH}</p>
    <p>Work is expected to start next spring.</p>
  </div>
</body></html>
"""


class TestGenericExtractor:
    """Test suite for the generic extractor."""

    def test_keeps_article_text_and_drops_chrome(self):
        result = extract_article_content(GENERIC_PAGE)

        assert PARAGRAPH in result.text
        assert 'Work is expected to start next spring.' in result.text
        assert 'trackPageView' not in result.text
        assert 'Home | World' not in result.text
        assert 'Most read' not in result.text
        assert 'Copyright' not in result.text
        assert 'advert slot' not in result.text

    def test_block_elements_become_line_breaks(self):
        result = extract_article_content(GENERIC_PAGE)
        assert result.text.startswith('Transport plan approved\n\n')
        assert '\n\n\n' not in result.text

    def test_prefers_og_title(self):
        assert extract_article_content(GENERIC_PAGE).title == 'Transport plan approved'

    def test_title_falls_back_to_title_tag(self):
        html = '<html><head><title>Only Title</title></head><body><p>x</p></body></html>'
        assert extract_article_content(html).title == 'Only Title'

    def test_content_class_container(self):
        html = f'<body><div class="sidebar">Ignore me</div><div class="main-content"><p>{PARAGRAPH}</p></div></body>'
        result = extract_article_content(html)
        assert result.text == PARAGRAPH

    def test_empty_html(self):
        assert extract_article_content('   ').text == ''


class TestSiteParsers:
    """Test suite for site-specific parsers."""

    def test_registry_matches_hosts(self):
        assert get_site_parser('https://www.bbc.co.uk/news/uk-1') is parse_bbc
        assert get_site_parser('https://www.bbc.com/news/world-1') is parse_bbc
        assert get_site_parser('https://news.sky.com/story/a') is parse_sky_news
        assert get_site_parser('https://example.com/a') is None
        assert get_site_parser('https://notbbc.com/a') is None

    def test_bbc_joins_text_blocks(self):
        result = parse_bbc(BBC_PAGE)
        assert result.text == f'{PARAGRAPH}\n\nWork is expected to start next spring.'
        assert 'Related stories' not in result.text

    def test_sky_reads_article_body(self):
        result = parse_sky_news(SKY_PAGE)
        assert PARAGRAPH in result.text
        assert 'Sky News' not in result.text

    def test_short_match_rejected(self):
        html = '<div data-component="text-block"><p>Too short.</p></div>'
        assert parse_bbc(html) is None

    def test_no_match_returns_none(self):
        assert parse_sky_news(GENERIC_PAGE) is None


class TestHtmlContentExtractor:
    """Test suite for HtmlContentExtractor."""

    def test_site_parser_used_for_registered_host(self):
        result = HtmlContentExtractor().extract_content(BBC_PAGE, 'https://www.bbc.co.uk/news/uk-1')
        assert 'Related stories' not in result.text
        assert PARAGRAPH in result.text

    def test_falls_back_to_generic_when_site_parser_finds_nothing(self):
        result = HtmlContentExtractor().extract_content(GENERIC_PAGE, 'https://www.bbc.co.uk/news/uk-1')
        assert PARAGRAPH in result.text

    def test_extract_without_html_uses_snippet(self):
        extractor = HtmlContentExtractor()
        assert extractor.extract(None, 'https://example.com/a', 'S') == 'S'
        assert extractor.extract('', 'https://example.com/a', None) == ''

    def test_extract_prefers_longer_snippet_over_thin_extraction(self):
        html = '<html><body><article><p>Cookie notice</p></article></body></html>'
        snippet = 'A client-supplied snippet that is clearly longer than the extracted text.'
        assert HtmlContentExtractor().extract(html, 'https://example.com/a', snippet) == snippet

    def test_extract_returns_article_text(self):
        text = HtmlContentExtractor().extract(GENERIC_PAGE, 'https://example.com/a', 'S')
        assert PARAGRAPH in text

    def test_extract_never_raises(self):
        extractor = HtmlContentExtractor()
        with patch.object(extractor, 'extract_content', side_effect=RuntimeError('parser crashed')):
            assert extractor.extract('<html>', 'https://example.com/a', 'S') == 'S'

    def test_extract_title(self):
        extractor = HtmlContentExtractor()
        assert extractor.extract_title(GENERIC_PAGE) == 'Transport plan approved'
        assert extractor.extract_title(None) is None
