"""Lyrics, artist info and recommendations, served by the proxy server"""
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from streamflow.errors import ProviderError
from streamflow.schemas import Track
from streamflow.services.providers.base import HttpJsonClient


class DiscoveryClient(HttpJsonClient):
    """Cached lookups that are not tied to one source catalog"""

    name = "discovery"

    def __init__(self, base_url: str, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    async def get_lyrics(self, title: str, artist: str) -> Optional[str]:
        data = await self.get_json(f"{self.base_url}/api/lyrics", {"title": title, "artist": artist})
        if not isinstance(data, dict):
            raise ProviderError(self.name, "lyrics response is not an object")
        return data.get("lyrics") or None

    async def get_artist_info(self, artist: str) -> Optional[Dict[str, Any]]:
        data = await self.get_json(f"{self.base_url}/api/artist/{quote(artist, safe='')}")
        if not isinstance(data, dict):
            raise ProviderError(self.name, "artist response is not an object")
        return data

    async def get_recommendations(self, track: Track) -> List[Track]:
        """
        Tracks related to a track

        The request is a POST; its body is part of the cache key.
        """
        data = await self.post_json(f"{self.base_url}/api/recommendations", {"track": track.to_record()})
        if not isinstance(data, dict) or not isinstance(data.get("recommendations"), list):
            raise ProviderError(self.name, "response has no recommendations list")
        return self.map_items(data["recommendations"], lambda item: Track(**item))
