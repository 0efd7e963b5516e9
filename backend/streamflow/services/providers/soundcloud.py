"""SoundCloud source, reached through the proxy server"""
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from streamflow.errors import ProviderError
from streamflow.schemas import Track
from streamflow.services.providers.base import HttpSourceProvider


class SoundCloudProvider(HttpSourceProvider):
    """SoundCloud search via the proxy; tracks are streamed from their permalink"""

    name = "soundcloud"

    def __init__(self, base_url: str, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")

    async def search(self, query: str) -> List[Track]:
        data = await self.get_json(f"{self.base_url}/api/soundcloud/search", {"q": query})
        if not isinstance(data, dict) or not isinstance(data.get("collection"), list):
            raise ProviderError(self.name, "response has no collection list")
        return self.map_items(data["collection"], self._to_track)

    async def resolve_stream_url(self, track: Track) -> str:
        if not track.url:
            raise ProviderError(self.name, f"track {track.id} has no permalink")
        return track.url

    async def get_track_metadata(self, track: Track) -> Optional[Dict[str, Any]]:
        return await self.get_json(f"{self.base_url}/api/soundcloud/track/{quote(track.id, safe='')}")

    def _to_track(self, item: Dict[str, Any]) -> Track:
        user = item.get("user") or {}
        return Track(
            id=str(item["id"]),
            title=item["title"],
            artist=user.get("username") or "",
            thumbnail=item.get("artwork_url") or user.get("avatar_url"),
            duration=(item.get("duration") or 0) // 1000,  # Milliseconds upstream
            source=self.name,
            url=item.get("permalink_url") or "",
        )
