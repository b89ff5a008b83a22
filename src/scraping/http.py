"""HTTP session management using aiohttp.

One ClientSession per run, shared by every concurrent source fetch.
"""

import logging
from types import TracebackType

import aiohttp

from src.core.config import HttpConfig
from src.scraping.base import FetchError, PageFetcher

logger = logging.getLogger(__name__)

_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


class HttpSession(PageFetcher):
    """Async context manager that owns one aiohttp ClientSession.

    Usage::

        async with HttpSession(config) as session:
            html = await session.fetch_page("https://...")
    """

    def __init__(self, config: HttpConfig) -> None:
        self._config = config
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """The underlying client session. Raises if not entered."""
        if self._session is None:
            msg = "HttpSession not entered — use 'async with'"
            raise RuntimeError(msg)
        return self._session

    async def __aenter__(self) -> "HttpSession":
        self._session = aiohttp.ClientSession(
            headers=build_headers(self._config.user_agent),
            timeout=aiohttp.ClientTimeout(total=self._config.timeout_seconds),
            connector=aiohttp.TCPConnector(limit=self._config.max_connections),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def fetch_page(self, url: str) -> str:
        logger.debug("GET %s", url)
        async with self.session.get(url) as response:
            if response.status < 200 or response.status >= 300:
                raise FetchError(url, response.status)
            return await response.text()


def build_headers(user_agent: str) -> dict[str, str]:
    """Browser-like request headers; some portals block obvious bots."""
    return {
        "User-Agent": user_agent,
        "Accept": _ACCEPT,
        "Accept-Language": "en-US,en;q=0.9",
    }
