import os

# In-memory database for the whole test session; must be set before streamflow is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from typing import Dict, List, Optional

from streamflow.database import Base, SessionLocal, engine
from streamflow.errors import ProviderError
from streamflow.schemas import Track
from streamflow.services.providers.base import SourceProvider
import streamflow.models  # noqa: F401


def build_track(track_id: str = "t1", source: str = "youtube", **fields) -> Track:
    values = {
        "id": track_id,
        "title": f"Song {track_id}",
        "artist": "Artist",
        "duration": 180,
        "source": source,
        "url": f"https://{source}.example/{track_id}",
    }
    values.update(fields)
    return Track(**values)


class FakeProvider(SourceProvider):
    """Provider returning canned results, or failing on demand"""

    def __init__(self, name: str, results: Optional[List[Track]] = None, trending: Optional[List[Track]] = None,
                 fail: bool = False, stream_url: Optional[str] = None, fallback: Optional[str] = None,
                 audio: bytes = b"audio"):
        self.name = name
        self.results = results or []
        self.trending = trending
        self.supports_trending = trending is not None
        self.fail = fail
        self.stream_url = stream_url
        self.fallback = fallback
        self.audio = audio
        self.calls: Dict[str, int] = {"search": 0, "trending": 0, "stream": 0}

    async def search(self, query: str) -> List[Track]:
        self.calls["search"] += 1
        if self.fail:
            raise ProviderError(self.name, "boom")
        return list(self.results)

    async def get_trending(self) -> List[Track]:
        self.calls["trending"] += 1
        if self.fail:
            raise ProviderError(self.name, "boom")
        return list(self.trending or [])

    async def resolve_stream_url(self, track: Track) -> str:
        self.calls["stream"] += 1
        if self.fail or self.stream_url is None:
            raise ProviderError(self.name, "no stream")
        return self.stream_url

    def fallback_stream_url(self, track: Track) -> Optional[str]:
        return self.fallback

    async def download(self, url: str) -> bytes:
        if self.fail:
            raise ProviderError(self.name, "download failed")
        return self.audio


class FakeDiscovery:
    """Lyrics, artist and recommendation lookups with canned answers"""

    def __init__(self, lyrics=None, artists=None, recommendations=None, fail=False):
        self.lyrics = lyrics or {}
        self.artists = artists or {}
        self.recommendations = recommendations or []
        self.fail = fail
        self.closed = False

    async def get_lyrics(self, title, artist):
        if self.fail:
            raise ProviderError("discovery", "boom")
        return self.lyrics.get(title)

    async def get_artist_info(self, artist):
        if self.fail:
            raise ProviderError("discovery", "boom")
        return self.artists.get(artist)

    async def get_recommendations(self, track):
        if self.fail:
            raise ProviderError("discovery", "boom")
        return list(self.recommendations)

    def close(self):
        self.closed = True


@pytest.fixture
def make_track():
    return build_track


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def db():
    """Fresh schema per test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_discovery():
    return FakeDiscovery
