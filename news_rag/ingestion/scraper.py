"""
Article Scraper

Fetches article pages and reduces them to plain body text using requests and
BeautifulSoup. Failures never raise: an unrecoverable page yields ``None``.
"""

import re
import time
import logging
from typing import Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Page furniture that never carries article content
NOISE_TAGS = ['script', 'style', 'nav', 'footer', 'header', 'aside']


class ArticleScraper:
    """
    Extracts readable text from article URLs.

    Features:
    - Retry logic with exponential backoff on timeouts and connection errors
    - User agent rotation
    - Removal of scripts, styles and navigation blocks before text extraction
    """

    def __init__(
        self,
        timeout: int = 15,
        max_retries: int = 2,
        backoff: float = 1.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the article scraper.

        Args:
            timeout: Request timeout in seconds
            max_retries: Maximum attempts per URL
            backoff: Base delay in seconds between attempts (doubled each retry)
            session: Optional requests session (default: module-level requests)
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff
        self.http = session or requests

        self.user_agents = [
            'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
            'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
            'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
        ]
        self.current_user_agent_idx = 0

    def _get_user_agent(self) -> str:
        """Get next user agent from rotation."""
        user_agent = self.user_agents[self.current_user_agent_idx]
        self.current_user_agent_idx = (self.current_user_agent_idx + 1) % len(self.user_agents)
        return user_agent

    @staticmethod
    def _validate_url(url: str) -> bool:
        try:
            parsed = urlparse(url or "")
        except ValueError:
            # e.g. unbalanced brackets in the host ("http://[bad")
            return False
        return parsed.scheme in ('http', 'https') and bool(parsed.netloc)

    @staticmethod
    def extract_text(html: str) -> str:
        """
        Reduce an HTML page to its body text.

        Args:
            html: Raw HTML

        Returns:
            Body text with whitespace runs collapsed to single spaces
        """
        soup = BeautifulSoup(html, 'html.parser')
        for tag in soup.find_all(NOISE_TAGS):
            tag.decompose()

        root = soup.body or soup
        text = root.get_text(separator=' ')
        return re.sub(r'\s+', ' ', text).strip()

    def _fetch_html(self, url: str) -> Optional[str]:
        """Download a page, retrying transient failures."""
        for attempt in range(self.max_retries):
            try:
                response = self.http.get(
                    url,
                    headers={'User-Agent': self._get_user_agent()},
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.text

            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                logger.warning(
                    f"Transient error on attempt {attempt + 1}/{self.max_retries} for {url}: {e}"
                )
                if attempt < self.max_retries - 1:
                    time.sleep(self.backoff * (2 ** attempt))

            except requests.exceptions.RequestException as e:
                # HTTP errors (404, 403, ...) are not worth retrying
                logger.error(f"Error scraping {url}: {e}")
                return None

        logger.error(f"Failed to fetch {url} after {self.max_retries} attempts")
        return None

    def fetch_text(self, url: str) -> Optional[str]:
        """
        Fetch an article and return its plain text.

        Args:
            url: Article URL

        Returns:
            Extracted text, or None if the page could not be fetched
        """
        if not self._validate_url(url):
            logger.warning(f"Invalid URL: {url}")
            return None

        html = self._fetch_html(url)
        if html is None:
            return None

        text = self.extract_text(html)
        logger.debug(f"Scraped {len(text)} characters from {url}")
        return text or None
