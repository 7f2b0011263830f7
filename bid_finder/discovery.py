"""
Bid Discovery for Bid Finder.
Scrapes government procurement pages and turns them into bid records.

Pages are fetched through the Firecrawl scrape API, which returns clean
markdown. Without an API key the page is fetched directly and its HTML
reduced to markdown-like lines with BeautifulSoup.
"""

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from .config import SCRAPE_CONFIG, BID_SOURCES
from .errors import ScrapeError
from .filtering import filter_with_fallback
from .models import BidRecord
from .parser import parse_bids

logger = logging.getLogger(__name__)

# Request headers to appear as a browser
HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
}


def html_to_markdown(html: str, base_url: str = '') -> str:
    """
    Reduce an HTML page to the line structure the bid parser expects:
    table rows become "| cell | cell |" lines and links become [text](url).
    """
    soup = BeautifulSoup(html, 'lxml')

    for tag in soup(['script', 'style', 'nav', 'header', 'footer']):
        tag.decompose()

    for link in soup.find_all('a', href=True):
        text = link.get_text(' ', strip=True)
        link.replace_with(f"[{text}]({urljoin(base_url, link['href'])})")

    for row in soup.find_all('tr'):
        cells = [cell.get_text(' ', strip=True) for cell in row.find_all(['td', 'th'])]
        if any(cells):
            row.replace_with(f"\n| {' | '.join(cells)} |\n")
        else:
            row.decompose()

    lines = [line.strip() for line in soup.get_text('\n').split('\n')]
    return '\n'.join(line for line in lines if line)


class ScrapeClient:
    """Fetches procurement pages as markdown."""

    def __init__(self, api_key: str = None, api_url: str = None, timeout: int = None):
        self.api_key = api_key if api_key is not None else SCRAPE_CONFIG['api_key']
        self.api_url = api_url or SCRAPE_CONFIG['api_url']
        self.timeout = timeout or SCRAPE_CONFIG['timeout']

    def scrape_markdown(self, url: str) -> str:
        """Return page content as markdown. Raises ScrapeError on failure."""
        if not self.api_key:
            logger.debug("FIRECRAWL_API_KEY not set, fetching page directly")
            return html_to_markdown(self.fetch_page(url), url)

        try:
            response = requests.post(
                self.api_url,
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'Content-Type': 'application/json',
                },
                json={'url': url, 'formats': ['markdown']},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ScrapeError(f"Scrape request failed for {url}", detail=str(e)) from e

        if response.status_code != 200:
            raise ScrapeError(f"Scrape failed for {url}", status=response.status_code, detail=response.text)

        payload = response.json()
        data = payload.get('data') or {}
        return data.get('markdown') or payload.get('markdown') or ''

    def fetch_page(self, url: str) -> str:
        """Fetch a web page and return its HTML content."""
        try:
            response = requests.get(url, headers=HEADERS, timeout=self.timeout)
            response.raise_for_status()
            return response.text
        except requests.RequestException as e:
            status = e.response.status_code if e.response is not None else None
            raise ScrapeError(f"Error fetching {url}", status=status, detail=str(e)) from e


class BidDiscoveryEngine:
    """Engine for discovering bids across procurement sources."""

    def __init__(self, sources: List[Dict] = None, scrape_client: ScrapeClient = None,
                 max_workers: int = None, rng: Optional[random.Random] = None):
        self.sources = sources if sources is not None else BID_SOURCES
        self.scrape_client = scrape_client or ScrapeClient()
        self.max_workers = max_workers or SCRAPE_CONFIG['max_workers']
        self.rng = rng

    def scrape_source(self, source: Dict) -> List[BidRecord]:
        """Scrape and parse one source. Errors propagate to the caller."""
        markdown = self.scrape_client.scrape_markdown(source['url'])
        if not markdown:
            logger.info(f"No content returned for {source['agency']}")
            return []
        return parse_bids(markdown, source['url'], source['agency'], rng=self.rng)

    def discover_all(self) -> List[BidRecord]:
        """
        Scrape all sources concurrently.
        A failing source contributes no bids; the others are still returned, in source order.
        """
        if not self.sources:
            return []

        workers = max(1, min(self.max_workers, len(self.sources)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [(source, executor.submit(self.scrape_source, source)) for source in self.sources]

            all_bids = []
            for source, future in futures:
                try:
                    bids = future.result()
                except Exception as e:
                    logger.warning(f"Error scraping {source['agency']}: {e}")
                    continue
                logger.info(f"{source['agency']}: {len(bids)} bids")
                all_bids.extend(bids)

        return all_bids

    def find_bids(self, query: str) -> List[BidRecord]:
        """All discovered bids narrowed to the query, or all of them if none match."""
        all_bids = self.discover_all()
        bids = filter_with_fallback(all_bids, query)
        logger.info(f"Discovery complete. {len(all_bids)} bids found, {len(bids)} kept for '{query}'")
        return bids
