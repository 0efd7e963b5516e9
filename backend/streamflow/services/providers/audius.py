"""Audius source (public API)"""
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from streamflow.errors import ProviderError
from streamflow.schemas import Track
from streamflow.services.providers.base import HttpSourceProvider


class AudiusProvider(HttpSourceProvider):
    """Audius search, trending, stream resolution and metadata"""

    name = "audius"
    supports_trending = True

    def __init__(self, api_url: str, **kwargs):
        super().__init__(**kwargs)
        self.api_url = api_url.rstrip("/")

    async def search(self, query: str) -> List[Track]:
        data = await self.get_json(f"{self.api_url}/tracks/search", {"query": query})
        return self.map_items(self._data(data), self._to_track)

    async def get_trending(self) -> List[Track]:
        data = await self.get_json(f"{self.api_url}/tracks/trending")
        return self.map_items(self._data(data), self._to_track)

    async def resolve_stream_url(self, track: Track) -> str:
        data = await self.get_json(f"{self.api_url}/tracks/{quote(track.id, safe='')}/stream", cached=False)
        url = data.get("url") if isinstance(data, dict) else None
        if not url:
            raise ProviderError(self.name, f"no stream URL for {track.id}")
        return url

    async def get_track_metadata(self, track: Track) -> Optional[Dict[str, Any]]:
        data = await self.get_json(f"{self.api_url}/tracks/{quote(track.id, safe='')}")
        return data.get("data") if isinstance(data, dict) else None

    def _data(self, data: Any) -> List[Dict[str, Any]]:
        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            raise ProviderError(self.name, "response has no data list")
        return data["data"]

    def _to_track(self, item: Dict[str, Any]) -> Track:
        artwork = item.get("artwork") or {}
        return Track(
            id=str(item["id"]),
            title=item["title"],
            artist=(item.get("user") or {}).get("name") or "",
            thumbnail=artwork.get("480x480"),
            duration=item.get("duration") or 0,
            source=self.name,
            url=f"https://audius.co/tracks/{item['id']}",
        )
