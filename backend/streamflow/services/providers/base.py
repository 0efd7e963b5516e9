"""Source provider interface and shared HTTP plumbing"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import asyncio
import logging

import requests

from streamflow.errors import ProviderError
from streamflow.schemas import Track
from streamflow.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)


class SourceProvider(ABC):
    """One external audio catalog"""

    name: str = ""
    supports_trending: bool = False

    @abstractmethod
    async def search(self, query: str) -> List[Track]:
        """Search the catalog"""

    async def get_trending(self) -> List[Track]:
        """Trending tracks (only for providers with a native trending feed)"""
        raise ProviderError(self.name, "trending is not supported")

    @abstractmethod
    async def resolve_stream_url(self, track: Track) -> str:
        """Playable URL for a track of this source"""

    def fallback_stream_url(self, track: Track) -> Optional[str]:
        """URL to use when resolve_stream_url fails, if the source has one"""
        return None

    async def get_track_metadata(self, track: Track) -> Optional[Dict[str, Any]]:
        return None

    async def download(self, url: str) -> bytes:
        raise ProviderError(self.name, "downloads are not supported")

    def close(self) -> None:
        pass

    def __repr__(self):
        return f"<{self.__class__.__name__}(name='{self.name}')>"


class HttpJsonClient:
    """
    JSON-over-HTTP plumbing shared by providers and proxy lookups.

    Blocking requests calls run in a worker thread; cacheable calls go
    through the shared ResponseCache. Every transport, status or decode
    failure is raised as ProviderError.
    """

    name: str = ""

    def __init__(self, cache: ResponseCache, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        """
        Initialize HTTP client

        Args:
            cache: Shared response cache
            timeout: Per-request timeout in seconds
            session: requests session (one is created if omitted)
        """
        self.cache = cache
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("Content-Type", "application/json")

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None, cached: bool = True) -> Any:
        """GET a JSON document, through the response cache unless cached=False"""
        if not cached:
            return await asyncio.to_thread(self._blocking_get_json, url, params)

        key = self.cache.make_key(url, params)
        return await self.cache.fetch_with_cache(
            key,
            lambda: asyncio.to_thread(self._blocking_get_json, url, params)
        )

    async def post_json(self, url: str, body: Dict[str, Any], cached: bool = True) -> Any:
        """
        POST a JSON body and decode the JSON answer

        The body is part of the cache key, so distinct bodies are cached apart.
        """
        if not cached:
            return await asyncio.to_thread(self._blocking_post_json, url, body)

        key = self.cache.make_key(url, {"method": "POST", "body": body})
        return await self.cache.fetch_with_cache(
            key,
            lambda: asyncio.to_thread(self._blocking_post_json, url, body)
        )

    async def download(self, url: str) -> bytes:
        return await asyncio.to_thread(self._blocking_get_bytes, url)

    def close(self) -> None:
        self.session.close()

    def map_items(self, items: Any, mapper) -> List[Track]:
        """Apply a record-to-Track mapper, turning schema surprises into ProviderError"""
        try:
            return [mapper(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(self.name, f"unexpected response shape: {e}") from e

    def _blocking_get_json(self, url: str, params: Optional[Dict[str, Any]]) -> Any:
        return self._decode(url, lambda: self.session.get(url, params=params, timeout=self.timeout))

    def _blocking_post_json(self, url: str, body: Dict[str, Any]) -> Any:
        return self._decode(url, lambda: self.session.post(url, json=body, timeout=self.timeout))

    def _decode(self, url: str, send) -> Any:
        try:
            response = send()
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise ProviderError(self.name, f"request to {url} failed: {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON from {url}: {e}") from e

    def _blocking_get_bytes(self, url: str) -> bytes:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.content
        except requests.RequestException as e:
            raise ProviderError(self.name, f"download from {url} failed: {e}") from e


class HttpSourceProvider(HttpJsonClient, SourceProvider):
    """Source provider talking JSON over HTTP"""
