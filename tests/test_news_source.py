"""
Tests for the News Source client.
"""

import pytest
import requests
from unittest.mock import Mock, patch

from news_rag.errors import NewsSourceError
from news_rag.ingestion.news_source import NewsSource
from news_rag.models import Article

FEED = [
    {
        'title': 'Gold rallies',
        'link': '/gold-rallies-188240501.chn',
        'description': '<a href="/x"><img src="thumb.jpg" /></a>Gold prices rose sharply.',
        'pubDate': '2024-05-01T08:00:00Z'
    },
    {
        'title': 'Oil slips',
        'link': 'https://other.example.com/oil',
        'description': 'Plain description',
        'pubDate': '2024-05-01T09:00:00Z'
    },
    {'title': '', 'link': '/no-title.chn', 'description': ''},
    {'title': 'No link', 'link': None, 'description': ''},
]


def feed_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def source():
    return NewsSource(api_url='https://feed.example.com/api/news', link_base='https://cafef.vn')


class TestListRecent:
    """Test listing and normalising feed items."""

    @patch('news_rag.ingestion.news_source.requests.get')
    def test_maps_items_to_articles(self, mock_get, source):
        """Valid items become Articles with absolute links and clean descriptions."""
        mock_get.return_value = feed_response(FEED)

        articles = source.list_recent(limit=20)

        assert articles == [
            Article(
                title='Gold rallies',
                link='https://cafef.vn/gold-rallies-188240501.chn',
                description='Gold prices rose sharply.',
                pub_date='2024-05-01T08:00:00Z'
            ),
            Article(
                title='Oil slips',
                link='https://other.example.com/oil',
                description='Plain description',
                pub_date='2024-05-01T09:00:00Z'
            ),
        ]

    @patch('news_rag.ingestion.news_source.requests.get')
    def test_passes_limit(self, mock_get, source):
        """The limit is sent as a query parameter."""
        mock_get.return_value = feed_response([])

        source.list_recent(limit=7)

        assert mock_get.call_args[1]['params'] == {'limit': 7}

    @patch('news_rag.ingestion.news_source.requests.get')
    def test_non_string_fields_dropped(self, mock_get, source):
        """Items whose title or link is not text are dropped, not fatal."""
        mock_get.return_value = feed_response([
            {'title': 2024, 'link': '/a.chn'},
            {'title': 'Numeric link', 'link': 42},
            {'title': '   ', 'link': '/blank-title.chn'},
            {'title': 'Valid', 'link': '/valid.chn', 'description': ['not', 'text']},
        ])

        articles = source.list_recent()

        assert articles == [Article(title='Valid', link='https://cafef.vn/valid.chn', description='')]

    @patch('news_rag.ingestion.news_source.requests.get')
    def test_unparseable_link(self, mock_get, source):
        """A link urljoin cannot parse raises NewsSourceError."""
        mock_get.return_value = feed_response([{'title': 'Bad', 'link': 'http://[bad'}])

        with pytest.raises(NewsSourceError) as exc_info:
            source.list_recent()

        assert isinstance(exc_info.value.cause, ValueError)

    @patch('news_rag.ingestion.news_source.requests.get')
    def test_network_error(self, mock_get, source):
        """Transport failures raise NewsSourceError."""
        mock_get.side_effect = requests.exceptions.ConnectionError("down")

        with pytest.raises(NewsSourceError) as exc_info:
            source.list_recent()

        assert isinstance(exc_info.value.cause, requests.exceptions.ConnectionError)

    @patch('news_rag.ingestion.news_source.requests.get')
    def test_invalid_json(self, mock_get, source):
        """Unparseable payloads raise NewsSourceError."""
        response = feed_response(None)
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response

        with pytest.raises(NewsSourceError):
            source.list_recent()

    @patch('news_rag.ingestion.news_source.requests.get')
    def test_non_list_payload(self, mock_get, source):
        """Payloads that are not lists raise NewsSourceError."""
        mock_get.return_value = feed_response({'error': 'rate limited'})

        with pytest.raises(NewsSourceError):
            source.list_recent()
