"""
Tests for the Article Scraper

HTTP is mocked through an injected session.
"""

import pytest
import requests
from unittest.mock import Mock

from news_rag.ingestion.scraper import ArticleScraper

PAGE = """
<html>
  <head><title>Gold rallies</title><style>body { color: red; }</style></head>
  <body>
    <header>Site header</header>
    <nav>Home | Markets | World</nav>
    <article>
      <h1>Gold rallies</h1>
      <p>Gold prices    rose sharply
      on Monday.</p>
      <script>trackPageView();</script>
    </article>
    <aside>Most read</aside>
    <footer>Copyright</footer>
  </body>
</html>
"""


def html_response(text):
    """Build a mock successful response."""
    response = Mock()
    response.text = text
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def scraper(session):
    return ArticleScraper(timeout=5, max_retries=3, backoff=0, session=session)


class TestExtractText:
    """Test HTML to text reduction."""

    def test_removes_page_furniture(self):
        """Scripts, styles, navigation, header, footer and aside are dropped."""
        text = ArticleScraper.extract_text(PAGE)

        assert "Gold prices rose sharply on Monday." in text
        for noise in ("Site header", "Markets", "trackPageView", "Most read", "Copyright", "color: red"):
            assert noise not in text

    def test_collapses_whitespace(self):
        """Runs of whitespace become single spaces."""
        text = ArticleScraper.extract_text("<body><p>a   b\n\n\tc</p></body>")

        assert text == "a b c"

    def test_page_without_body(self):
        """Fragments without a body tag are still read."""
        assert ArticleScraper.extract_text("<p>fragment</p>") == "fragment"


class TestFetchText:
    """Test fetching with retries."""

    def test_success(self, scraper, session):
        """Successful fetch returns page text."""
        session.get.return_value = html_response(PAGE)

        text = scraper.fetch_text("https://example.com/gold")

        assert "Gold prices rose sharply" in text
        kwargs = session.get.call_args[1]
        assert kwargs['timeout'] == 5
        assert 'Mozilla' in kwargs['headers']['User-Agent']

    def test_invalid_url_not_fetched(self, scraper, session):
        """Malformed URLs return None without a request."""
        assert scraper.fetch_text("not a url") is None
        session.get.assert_not_called()

    def test_unparseable_url_not_fetched(self, scraper, session):
        """URLs urlparse rejects return None instead of raising."""
        assert scraper.fetch_text("http://[bad") is None
        session.get.assert_not_called()

    def test_http_error_not_retried(self, scraper, session):
        """HTTP errors give up immediately."""
        response = Mock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Not Found")
        session.get.return_value = response

        assert scraper.fetch_text("https://example.com/missing") is None
        assert session.get.call_count == 1

    def test_timeouts_retried_then_none(self, scraper, session):
        """Transient errors are retried up to max_retries."""
        session.get.side_effect = requests.exceptions.Timeout()

        assert scraper.fetch_text("https://example.com/slow") is None
        assert session.get.call_count == 3

    def test_recovers_after_transient_error(self, scraper, session):
        """A retry can succeed after a connection error."""
        session.get.side_effect = [
            requests.exceptions.ConnectionError(),
            html_response("<body><p>Recovered text</p></body>"),
        ]

        assert scraper.fetch_text("https://example.com/flaky") == "Recovered text"

    def test_empty_page_returns_none(self, scraper, session):
        """A page with no text counts as a failure."""
        session.get.return_value = html_response("<body><script>x()</script></body>")

        assert scraper.fetch_text("https://example.com/empty") is None

    def test_user_agent_rotation(self, scraper, session):
        """Consecutive requests use different user agents."""
        session.get.return_value = html_response(PAGE)

        scraper.fetch_text("https://example.com/1")
        scraper.fetch_text("https://example.com/2")

        first = session.get.call_args_list[0][1]['headers']['User-Agent']
        second = session.get.call_args_list[1][1]['headers']['User-Agent']
        assert first != second
