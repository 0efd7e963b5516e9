"""Search API endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List
from pydantic import BaseModel
from datetime import datetime
import asyncio
import logging

from streamflow.api.deps import get_aggregator, get_cache
from streamflow.database import get_db, session_scope
from streamflow.errors import StoreUnavailable
from streamflow.schemas import Track
from streamflow.services.aggregator import SourceAggregator
from streamflow.services.library_service import LibraryService
from streamflow.services.response_cache import ResponseCache

router = APIRouter(prefix="/api", tags=["search"])
logger = logging.getLogger(__name__)


class SearchHistoryResponse(BaseModel):
    id: int
    query: str
    timestamp: datetime

    class Config:
        from_attributes = True


class StreamResponse(BaseModel):
    url: str


class LyricsResponse(BaseModel):
    lyrics: str


@router.get("/search", response_model=List[Track])
async def search(
    q: str = Query(..., description="Search text"),
    source: str = Query("all", description="Source name or 'all'"),
    aggregator: SourceAggregator = Depends(get_aggregator),
):
    """Search every source and interleave the results"""
    query = q.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Query parameter required")
    if source != "all" and source not in aggregator.sources():
        raise HTTPException(status_code=400, detail=f"Unknown source '{source}'")

    results = await aggregator.search(query, source)
    await asyncio.to_thread(record_search, query)
    return results


def record_search(query: str) -> None:
    """Append a query to search history; a store failure does not fail the search"""
    try:
        with session_scope() as db:
            LibraryService(db).add_to_search_history(query)
    except StoreUnavailable as e:
        logger.error(f"Could not record search '{query}': {e}")


@router.get("/search/history", response_model=List[SearchHistoryResponse])
def get_search_history(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    """Recent distinct searches, most recent first"""
    return LibraryService(db).get_search_history(limit)


@router.delete("/search/history/{entry_id}")
def remove_search_history_entry(entry_id: int, db: Session = Depends(get_db)):
    LibraryService(db).remove_from_search_history(entry_id)
    return {"message": "Search removed"}


@router.delete("/search/history")
def clear_search_history(db: Session = Depends(get_db)):
    count = LibraryService(db).clear_search_history()
    return {"message": f"Cleared {count} searches", "count": count}


@router.get("/trending", response_model=List[Track])
async def get_trending(aggregator: SourceAggregator = Depends(get_aggregator)):
    """Shuffled trending tracks from sources with a trending feed"""
    return await aggregator.get_trending()


@router.post("/stream", response_model=StreamResponse)
async def get_stream_url(track: Track, aggregator: SourceAggregator = Depends(get_aggregator)):
    """Resolve a playable URL for a track"""
    return {"url": await aggregator.get_stream_url(track)}


@router.post("/metadata")
async def get_track_metadata(track: Track, aggregator: SourceAggregator = Depends(get_aggregator)):
    metadata = await aggregator.get_track_metadata(track)
    if metadata is None:
        raise HTTPException(status_code=404, detail=f"No metadata for '{track.key}'")
    return metadata


@router.delete("/cache")
def clear_cache(cache: ResponseCache = Depends(get_cache)):
    cache.clear_cache()
    return {"message": "Cache cleared"}


@router.get("/lyrics", response_model=LyricsResponse)
async def get_lyrics(
    title: str = Query(..., min_length=1),
    artist: str = Query(""),
    aggregator: SourceAggregator = Depends(get_aggregator),
):
    lyrics = await aggregator.get_lyrics(title, artist)
    if lyrics is None:
        raise HTTPException(status_code=404, detail=f"No lyrics for '{title}'")
    return {"lyrics": lyrics}


@router.get("/artist/{name}")
async def get_artist_info(name: str, aggregator: SourceAggregator = Depends(get_aggregator)):
    info = await aggregator.get_artist_info(name)
    if info is None:
        raise HTTPException(status_code=404, detail=f"No information for artist '{name}'")
    return info


@router.post("/recommendations", response_model=List[Track])
async def get_recommendations(track: Track, aggregator: SourceAggregator = Depends(get_aggregator)):
    """Tracks related to the given one (empty when unavailable)"""
    return await aggregator.get_recommendations(track)
