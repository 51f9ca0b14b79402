"""Confluence REST client for the guideline pipeline.

Fetches rendered page bodies and child page listings with retry and backoff.
"""

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional, Protocol

import aiohttp

from guidelines.models import PageContent

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class ConfluenceError(Exception):
    """Raised when the remote source answers with a non-success status."""

    def __init__(self, page_id: str, status: int, message: str = ""):
        self.page_id = page_id
        self.status = status
        self.message = message
        super().__init__(f"Failed to fetch page {page_id}: {status} {message}".rstrip())


class PageSource(Protocol):
    """The two remote operations the aggregator consumes."""

    async def fetch_page(self, page_id: str) -> PageContent:
        ...

    async def fetch_child_ids(self, page_id: str) -> List[str]:
        ...


class ConfluenceClient:
    """Asynchronous Confluence content API client."""

    def __init__(self,
                 base_url: str,
                 email: str,
                 api_token: str,
                 request_timeout: int = 30,
                 max_retries: int = 2,
                 retry_delay: float = 0.5,
                 max_retry_delay: float = 8.0):
        """Initialize client.

        Args:
            base_url: Confluence base URL, e.g. https://example.atlassian.net/wiki
            email: Account email used for basic auth
            api_token: API token used for basic auth
            request_timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            retry_delay: Base delay between retries (seconds)
            max_retry_delay: Maximum delay between retries (seconds)
        """
        self.base_url = base_url.rstrip("/")
        self.auth = aiohttp.BasicAuth(email, api_token)
        self.request_timeout = request_timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        timeout = aiohttp.ClientTimeout(total=self.request_timeout)
        self.session = aiohttp.ClientSession(
            timeout=timeout,
            auth=self.auth,
            headers={"Accept": "application/json"}
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None

    def page_url(self, page_id: str) -> str:
        """Fallback canonical URL for a page."""
        return f"{self.base_url}/pages/viewpage.action?pageId={page_id}"

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate exponential backoff delay with jitter."""
        base_delay = self.retry_delay * (2 ** attempt)
        jitter = random.uniform(0.1, 0.3) * base_delay
        return min(base_delay + jitter, self.max_retry_delay)

    async def _get_json(self, url: str, page_id: str) -> Dict[str, Any]:
        """GET a JSON document, retrying transient failures."""
        if not self.session:
            await self.__aenter__()

        last_exception: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            try:
                logger.debug(f"Fetching {url} (attempt {attempt + 1}/{self.max_retries + 1})")
                async with self.session.get(url) as response:
                    if response.status in RETRYABLE_STATUS_CODES and attempt < self.max_retries:
                        delay = self._calculate_retry_delay(attempt)
                        logger.warning(f"Retryable status {response.status} for {url}, retrying in {delay:.2f}s")
                        await asyncio.sleep(delay)
                        continue

                    if response.status < 200 or response.status >= 300:
                        body = await response.text()
                        raise ConfluenceError(page_id, response.status, f"{response.reason or ''} - {body[:200]}")

                    return await response.json(content_type=None)

            except (asyncio.TimeoutError, aiohttp.ClientConnectionError) as e:
                last_exception = e
                if attempt < self.max_retries:
                    delay = self._calculate_retry_delay(attempt)
                    logger.warning(f"Transient error fetching {url}: {e!r}, retrying in {delay:.2f}s")
                    await asyncio.sleep(delay)
                    continue
                break

        raise ConfluenceError(page_id, 0, f"{type(last_exception).__name__}: {last_exception}")

    async def fetch_page(self, page_id: str) -> PageContent:
        """Fetch a page's rendered body and title."""
        url = f"{self.base_url}/rest/api/content/{page_id}?expand=body.view"
        data = await self._get_json(url, page_id)
        return parse_page(data, page_id, self.page_url(page_id))

    async def fetch_child_ids(self, page_id: str) -> List[str]:
        """List the ids of a page's direct children."""
        url = f"{self.base_url}/rest/api/content/{page_id}/child/page"
        data = await self._get_json(url, page_id)
        return parse_child_ids(data)


def parse_page(data: Dict[str, Any], page_id: str, fallback_url: str) -> PageContent:
    """Build a PageContent from a content API payload."""
    html = ((data.get("body") or {}).get("view") or {}).get("value") or ""
    links = data.get("_links") or {}
    if links.get("base") and links.get("webui"):
        url = f"{links['base'].rstrip('/')}{links['webui']}"
    else:
        url = fallback_url
    return PageContent(
        page_id=page_id,
        title=data.get("title") or "",
        html=html,
        url=url,
    )


def parse_child_ids(data: Dict[str, Any]) -> List[str]:
    results = data.get("results")
    if not results:
        return []
    return [str(page["id"]) for page in results if page.get("id") is not None]
