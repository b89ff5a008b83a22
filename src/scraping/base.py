"""Abstract page fetcher that the paginator depends on."""

from abc import ABC, abstractmethod


class FetchError(Exception):
    """A listing page could not be retrieved (non-2xx response)."""

    def __init__(self, url: str, status: int) -> None:
        super().__init__(f"HTTP {status} for {url}")
        self.url = url
        self.status = status


class PageFetcher(ABC):
    """Base class for anything that can return the HTML of a listing page."""

    @abstractmethod
    async def fetch_page(self, url: str) -> str:
        """Return the response body for ``url``.

        Raises:
            FetchError: On a non-2xx response.
        """
