"""Library API endpoints (liked tracks, history, downloads, pending actions)"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Any, List
from pydantic import BaseModel
from datetime import datetime
import logging

from streamflow.api.deps import get_offline
from streamflow.database import get_db
from streamflow.schemas import Track
from streamflow.services.download_service import DownloadService
from streamflow.services.library_service import LibraryService
from streamflow.services.offline_service import OfflineService
from streamflow.services.pending_action_service import PendingActionService

router = APIRouter(prefix="/api/library", tags=["library"])
logger = logging.getLogger(__name__)


class LibraryTrackResponse(BaseModel):
    """A stored copy of a track plus its collection key and timestamp"""
    id: str | int
    track: Track
    timestamp: datetime


class DownloadResponse(BaseModel):
    id: str
    track: Track
    size: int
    timestamp: datetime

    class Config:
        from_attributes = True


class PendingActionRequest(BaseModel):
    type: str
    data: Any = None


class PendingActionResponse(BaseModel):
    id: int
    type: str
    data: Any = None
    timestamp: datetime

    class Config:
        from_attributes = True


def _library_item(row) -> dict:
    return {"id": row.id, "track": row.to_track(), "timestamp": row.timestamp}


@router.get("/liked", response_model=List[LibraryTrackResponse])
def get_liked_songs(db: Session = Depends(get_db)):
    return [_library_item(row) for row in LibraryService(db).get_liked_songs()]


@router.post("/liked/toggle")
def toggle_like(track: Track, db: Session = Depends(get_db)):
    """Like or unlike a track"""
    is_liked = LibraryService(db).toggle_like(track)
    return {"message": "Added to likes" if is_liked else "Removed from likes", "liked": is_liked}


@router.post("/liked/check")
def is_liked(track: Track, db: Session = Depends(get_db)):
    return {"liked": LibraryService(db).is_liked(track)}


@router.get("/history", response_model=List[LibraryTrackResponse])
def get_play_history(limit: int = Query(50, ge=1, le=500), db: Session = Depends(get_db)):
    return [_library_item(row) for row in LibraryService(db).get_play_history(limit)]


@router.delete("/history")
def clear_history(db: Session = Depends(get_db)):
    count = LibraryService(db).clear_history()
    return {"message": f"Cleared {count} history entries", "count": count}


@router.post("/cleanup")
def cleanup(db: Session = Depends(get_db)):
    """Run the history retention sweep"""
    history_removed, searches_removed = LibraryService(db).cleanup()
    return {"history_removed": history_removed, "searches_removed": searches_removed}


@router.get("/downloads", response_model=List[DownloadResponse])
def get_downloads(db: Session = Depends(get_db)):
    return DownloadService(db).get_downloads()


@router.post("/downloads")
async def download_track(track: Track, offline: OfflineService = Depends(get_offline)):
    """Download a track for offline playback"""
    if not await offline.download_track(track):
        raise HTTPException(status_code=502, detail=f"Could not download '{track.key}'")
    return {"message": "Downloaded", "id": track.key}


@router.delete("/downloads/{track_key}")
def delete_download(track_key: str, db: Session = Depends(get_db)):
    DownloadService(db).delete_download(track_key)
    return {"message": "Download deleted"}


@router.get("/pending-actions", response_model=List[PendingActionResponse])
def get_pending_actions(type: str | None = Query(None), db: Session = Depends(get_db)):
    return PendingActionService(db).get_pending_actions(type)


@router.post("/pending-actions", status_code=201)
def add_pending_action(request: PendingActionRequest, db: Session = Depends(get_db)):
    """Queue an action performed while offline"""
    action_id = PendingActionService(db).add_pending_action(request.type, request.data)
    return {"message": "Action queued", "id": action_id}


@router.delete("/pending-actions")
def clear_pending_actions(db: Session = Depends(get_db)):
    count = PendingActionService(db).clear_pending_actions()
    return {"message": f"Cleared {count} pending actions", "count": count}
