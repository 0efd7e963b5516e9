"""YouTube source, reached through the proxy server"""
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from streamflow.errors import ProviderError
from streamflow.schemas import Track
from streamflow.services.providers.base import HttpSourceProvider

EMBED_URL = "https://www.youtube.com/embed/{video_id}?autoplay=1"


class YouTubeProvider(HttpSourceProvider):
    """YouTube search, trending and stream resolution via the proxy"""

    name = "youtube"
    supports_trending = True

    def __init__(self, base_url: str, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    async def search(self, query: str) -> List[Track]:
        data = await self.get_json(f"{self.base_url}/api/youtube/search", {"q": query})
        return self.map_items(_items(data), self._to_track)

    async def get_trending(self) -> List[Track]:
        data = await self.get_json(f"{self.base_url}/api/youtube/trending")
        return self.map_items(_items(data), self._to_track)

    async def resolve_stream_url(self, track: Track) -> str:
        # Stream URLs expire, never cache them
        data = await self.get_json(
            f"{self.base_url}/api/youtube/stream/{quote(track.id, safe='')}",
            cached=False
        )
        url = data.get("url") if isinstance(data, dict) else None
        if not url:
            raise ProviderError(self.name, f"no stream URL for {track.id}")
        return url

    def fallback_stream_url(self, track: Track) -> Optional[str]:
        return EMBED_URL.format(video_id=track.id)

    async def get_track_metadata(self, track: Track) -> Optional[Dict[str, Any]]:
        return await self.get_json(f"{self.base_url}/api/youtube/info/{quote(track.id, safe='')}")

    def _to_track(self, item: Dict[str, Any]) -> Track:
        return Track(
            id=str(item["id"]),
            title=item["title"],
            artist=item.get("channel") or "",
            thumbnail=item.get("thumbnail"),
            duration=item.get("duration") or 0,
            source=self.name,
            url=item.get("url") or "",
        )


def _items(data: Any) -> List[Dict[str, Any]]:
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise ProviderError(YouTubeProvider.name, "response has no items list")
    return data["items"]
