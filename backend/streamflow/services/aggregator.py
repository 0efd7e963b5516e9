"""Source aggregator: concurrent multi-source search with graceful degradation"""
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Sequence
import asyncio
import logging
import random

from streamflow.config import settings
from streamflow.errors import ProviderError, UnknownSource
from streamflow.schemas import Track
from streamflow.services.providers.base import SourceProvider
from streamflow.services.providers.discovery import DiscoveryClient

logger = logging.getLogger(__name__)


def merge_results(result_lists: Sequence[Sequence[Track]]) -> List[Track]:
    """
    Round-robin interleave: the i-th result of each list in list order,
    for i = 0, 1, 2, ... until every list is exhausted.
    """
    merged = []
    longest = max((len(results) for results in result_lists), default=0)
    for i in range(longest):
        for results in result_lists:
            if i < len(results):
                merged.append(results[i])
    return merged


class SourceAggregator:
    """Queries a registry of source providers and combines their answers"""

    def __init__(self, providers: Iterable[SourceProvider], timeout: Optional[float] = None,
                 trending_limit: Optional[int] = None, rng: Optional[random.Random] = None,
                 discovery: Optional[DiscoveryClient] = None):
        """
        Initialize aggregator

        Args:
            providers: Providers in merge order; names must be unique
            timeout: Per-provider call timeout in seconds (None waits forever)
            trending_limit: Maximum number of trending tracks returned
            rng: Random source used to shuffle trending results
            discovery: Lyrics, artist info and recommendation lookups (optional)
        """
        self._providers: Dict[str, SourceProvider] = {}
        for provider in providers:
            if provider.name in self._providers:
                raise ValueError(f"Duplicate provider for source '{provider.name}'")
            self._providers[provider.name] = provider
        self.timeout = timeout
        self.trending_limit = trending_limit if trending_limit is not None else settings.trending_limit
        self._rng = rng or random.Random()
        self.discovery = discovery

    def sources(self) -> List[str]:
        return list(self._providers)

    def get_provider(self, source: str) -> SourceProvider:
        provider = self._providers.get(source)
        if provider is None:
            raise UnknownSource(source)
        return provider

    async def search(self, query: str, source_filter: str = "all") -> List[Track]:
        """
        Search every matching provider concurrently and interleave the results

        A failing or timed out provider contributes no results.

        Args:
            query: Search text
            source_filter: A source name, or "all"
        """
        providers = [
            p for p in self._providers.values()
            if source_filter == "all" or p.name == source_filter
        ]
        if not providers:
            logger.warning(f"No provider matches source filter '{source_filter}'")
            return []

        results = await self._gather(
            providers,
            [p.search(query) for p in providers],
            action="search"
        )
        return merge_results(results)

    async def get_trending(self) -> List[Track]:
        """Trending tracks from every provider with a trending feed, shuffled"""
        providers = [p for p in self._providers.values() if p.supports_trending]
        results = await self._gather(
            providers,
            [p.get_trending() for p in providers],
            action="trending"
        )

        combined = [track for provider_results in results for track in provider_results]
        self._rng.shuffle(combined)
        return combined[:self.trending_limit]

    async def get_stream_url(self, track: Track) -> str:
        """
        Resolve a playable URL for a track

        Falls back to the provider's fallback URL (e.g. an embeddable
        player) when resolution fails and one exists.

        Raises:
            UnknownSource: if no provider handles track.source
            ProviderError: if resolution fails and there is no fallback
        """
        provider = self.get_provider(track.source)
        try:
            return await self._bounded(provider.resolve_stream_url(track))
        except Exception as e:
            fallback = provider.fallback_stream_url(track)
            if fallback:
                logger.warning(f"Stream resolution failed for {track.key}, using fallback: {e}")
                return fallback
            logger.error(f"Stream resolution failed for {track.key}: {e}")
            if isinstance(e, ProviderError):
                raise
            raise ProviderError(provider.name, f"stream resolution failed: {e}") from e

    async def get_track_metadata(self, track: Track) -> Optional[Dict[str, Any]]:
        """Provider metadata for a track, or None if the provider fails"""
        provider = self.get_provider(track.source)
        try:
            return await self._bounded(provider.get_track_metadata(track))
        except Exception as e:
            logger.warning(f"Metadata lookup failed for {track.key}: {e}")
            return None

    async def download_audio(self, track: Track) -> bytes:
        """Fetch the raw audio of a track"""
        url = await self.get_stream_url(track)
        provider = self.get_provider(track.source)
        try:
            return await provider.download(url)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(provider.name, f"download failed: {e}") from e

    async def get_lyrics(self, title: str, artist: str) -> Optional[str]:
        """Lyrics text, or None when unavailable"""
        return await self._lookup("lyrics", None, lambda d: d.get_lyrics(title, artist))

    async def get_artist_info(self, artist: str) -> Optional[Dict[str, Any]]:
        """Artist information, or None when unavailable"""
        return await self._lookup("artist info", None, lambda d: d.get_artist_info(artist))

    async def get_recommendations(self, track: Track) -> List[Track]:
        """Tracks related to a track; empty when the lookup fails"""
        return await self._lookup("recommendations", [], lambda d: d.get_recommendations(track))

    def close(self) -> None:
        for provider in self._providers.values():
            provider.close()
        if self.discovery is not None:
            self.discovery.close()

    async def _lookup(self, what: str, default: Any, call) -> Any:
        if self.discovery is None:
            return default
        try:
            return await self._bounded(call(self.discovery))
        except Exception as e:
            logger.warning(f"{what.capitalize()} lookup failed: {e}")
            return default

    async def _bounded(self, call: Awaitable) -> Any:
        if self.timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.timeout)

    async def _gather(self, providers: List[SourceProvider], calls: List[Awaitable],
                      action: str) -> List[List[Track]]:
        """Run provider calls concurrently; wait for all to settle; failures become []"""
        outcomes = await asyncio.gather(
            *(self._bounded(call) for call in calls),
            return_exceptions=True
        )

        results = []
        for provider, outcome in zip(providers, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                reason = "timed out" if isinstance(outcome, asyncio.TimeoutError) else outcome
                logger.warning(f"{provider.name} {action} failed: {reason}")
                results.append([])
            else:
                results.append(list(outcome))
        return results
