"""Playlist API endpoints"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from pydantic import BaseModel
from datetime import datetime

from streamflow.database import get_db
from streamflow.schemas import Track
from streamflow.services.playlist_service import PlaylistService

router = APIRouter(prefix="/api/playlists", tags=["playlists"])


class PlaylistResponse(BaseModel):
    id: int
    name: str
    description: str
    tracks: List[Track]
    created: datetime
    modified: datetime

    class Config:
        from_attributes = True


class CreatePlaylistRequest(BaseModel):
    name: str
    description: str = ""


class UpdatePlaylistRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    tracks: List[Track] | None = None


@router.get("", response_model=List[PlaylistResponse])
def get_playlists(db: Session = Depends(get_db)):
    return PlaylistService(db).get_playlists()


@router.post("", status_code=201)
def create_playlist(request: CreatePlaylistRequest, db: Session = Depends(get_db)):
    """Create an empty playlist"""
    name = request.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Please enter a playlist name")
    playlist_id = PlaylistService(db).create_playlist(name, request.description)
    return {"message": "Playlist created", "id": playlist_id}


@router.get("/{playlist_id}", response_model=PlaylistResponse)
def get_playlist(playlist_id: int, db: Session = Depends(get_db)):
    return PlaylistService(db).get_playlist(playlist_id)


@router.patch("/{playlist_id}", response_model=PlaylistResponse)
def update_playlist(playlist_id: int, request: UpdatePlaylistRequest, db: Session = Depends(get_db)):
    """Update name, description or the whole track list"""
    updates = request.model_dump(exclude_unset=True, exclude_none=True)
    return PlaylistService(db).update_playlist(playlist_id, updates)


@router.delete("/{playlist_id}")
def delete_playlist(playlist_id: int, db: Session = Depends(get_db)):
    PlaylistService(db).delete_playlist(playlist_id)
    return {"message": "Playlist deleted"}


@router.post("/{playlist_id}/tracks")
def add_to_playlist(playlist_id: int, track: Track, db: Session = Depends(get_db)):
    """Append a track unless it is already in the playlist"""
    added = PlaylistService(db).add_to_playlist(playlist_id, track)
    if not added:
        return {"message": "Already in playlist", "added": False}
    return {"message": "Added to playlist", "added": True}


@router.delete("/{playlist_id}/tracks/{source}/{track_id}")
def remove_from_playlist(playlist_id: int, source: str, track_id: str, db: Session = Depends(get_db)):
    if not PlaylistService(db).remove_from_playlist(playlist_id, source, track_id):
        raise HTTPException(status_code=404, detail=f"Track '{source}_{track_id}' not in playlist {playlist_id}")
    return {"message": "Removed from playlist"}
