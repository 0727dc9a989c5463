"""
News Source

Lists recent articles from a JSON news feed.
"""

import logging
from typing import List, Dict, Any, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from ..errors import NewsSourceError
from ..models import Article

logger = logging.getLogger(__name__)


class NewsSource:
    """Client for a news feed that returns a JSON list of article items."""

    def __init__(
        self,
        api_url: str = "https://cafef-api-2hna.onrender.com/api/news",
        link_base: str = "https://cafef.vn",
        timeout: int = 30
    ):
        """
        Initialize the news source.

        Args:
            api_url: Feed endpoint, called with a ``limit`` query parameter
            link_base: Base URL prepended to relative article links
            timeout: Request timeout in seconds
        """
        self.api_url = api_url
        self.link_base = link_base
        self.timeout = timeout

    @staticmethod
    def _clean_description(description: Optional[str]) -> str:
        # Feed descriptions start with an inline <img .../> thumbnail
        tail = (description or "").split('/>')[-1]
        return BeautifulSoup(tail, 'html.parser').get_text().strip()

    @staticmethod
    def _has_text(item: Dict[str, Any], key: str) -> bool:
        value = item.get(key)
        return isinstance(value, str) and bool(value.strip())

    def _to_article(self, item: Dict[str, Any]) -> Article:
        description = item.get('description')
        try:
            return Article(
                title=item['title'].strip(),
                link=urljoin(self.link_base, item['link'].strip()),
                description=self._clean_description(description if isinstance(description, str) else None),
                pub_date=item.get('pubDate')
            )
        except ValueError as e:
            raise NewsSourceError(f"News feed returned a malformed item: {e}", cause=e) from e

    def list_recent(self, limit: int = 20) -> List[Article]:
        """
        Fetch the most recent articles.

        Items without a title or link are dropped.

        Args:
            limit: Maximum number of articles to request

        Returns:
            List of articles in feed order

        Raises:
            NewsSourceError: On network, HTTP or payload errors
        """
        logger.info(f"Fetching up to {limit} articles from {self.api_url}")

        try:
            response = requests.get(
                self.api_url,
                params={'limit': limit},
                timeout=self.timeout
            )
            response.raise_for_status()
            items = response.json()
        except requests.exceptions.RequestException as e:
            raise NewsSourceError(f"Failed to fetch news: {e}", cause=e) from e
        except ValueError as e:
            raise NewsSourceError(f"News feed returned invalid JSON: {e}", cause=e) from e

        if not isinstance(items, list):
            raise NewsSourceError(
                f"News feed returned {type(items).__name__}, expected a list"
            )

        articles = [
            self._to_article(item)
            for item in items
            if isinstance(item, dict) and self._has_text(item, 'title') and self._has_text(item, 'link')
        ]

        logger.info(f"Fetched {len(articles)} articles ({len(items) - len(articles)} dropped)")
        return articles
