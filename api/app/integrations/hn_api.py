import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from app.core.config import Settings
from app.core.exceptions import ExternalAPIError, ResourceNotFoundError

logger = logging.getLogger(__name__)


class HackerNewsAPI:
    """Client for the Algolia Hacker News search and items API."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.search_url = settings.HN_SEARCH_URL
        self.items_url = settings.HN_ITEMS_URL
        self.title_keywords = [k.lower() for k in settings.AMA_TITLE_KEYWORDS]
        self._session: Optional[aiohttp.ClientSession] = None

    async def setup(self):
        """Initialize the API client."""
        if not self._session:
            timeout = aiohttp.ClientTimeout(total=self.settings.HN_REQUEST_TIMEOUT)
            self._session = aiohttp.ClientSession(timeout=timeout)

    async def cleanup(self):
        """Clean up resources."""
        if self._session:
            await self._session.close()
            self._session = None

    async def _get_json(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """GET a JSON document, retrying transient failures with backoff."""
        if not self._session:
            await self.setup()

        max_retries = self.settings.HN_MAX_RETRIES
        last_error = ""
        for attempt in range(max_retries):
            try:
                async with self._session.get(url, params=params) as response:
                    if response.status == 404:
                        raise ResourceNotFoundError("Hacker News item", url)
                    if response.status == 200:
                        return await response.json()
                    last_error = f"HTTP {response.status}"
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = str(e) or type(e).__name__
            except ValueError as e:
                # Body was not valid JSON
                last_error = f"invalid JSON: {e}"

            logger.warning(
                f"Attempt {attempt + 1}/{max_retries}: request to {url} failed: {last_error}"
            )
            if attempt < max_retries - 1:
                await asyncio.sleep(self.settings.HN_RETRY_DELAY * (2**attempt))

        logger.error(f"Giving up on {url} after {max_retries} attempts")
        raise ExternalAPIError("hackernews", f"{url}: {last_error}")

    def is_ama_title(self, title: Optional[str]) -> bool:
        """True when the title contains every configured AMA keyword."""
        if not title:
            return False
        lowered = title.lower()
        return all(keyword in lowered for keyword in self.title_keywords)

    async def search_ama_threads(self) -> List[Dict[str, Any]]:
        """Search stories and keep the ones that look like the persona's AMAs."""
        params = {
            "query": self.settings.HN_SEARCH_QUERY,
            "tags": "story",
            "hitsPerPage": self.settings.HN_HITS_PER_PAGE,
        }
        results = await self._get_json(self.search_url, params=params)
        hits = results.get("hits") or []
        threads = [
            hit
            for hit in hits
            if isinstance(hit, dict) and self.is_ama_title(hit.get("title"))
        ]
        logger.info(f"Found {len(threads)} AMA threads out of {len(hits)} search hits")
        return threads

    async def fetch_thread(self, object_id: str) -> Dict[str, Any]:
        """Fetch a story with its full nested comment tree."""
        return await self._get_json(f"{self.items_url}/{object_id}")
