"""Playlist service for managing user playlists"""
from sqlalchemy.orm import Session
from typing import Any, Callable, Dict, List, Optional
from datetime import datetime
import logging

from streamflow.database import reading, transaction
from streamflow.errors import NotFound, WriteConflict
from streamflow.models.playlist import Playlist
from streamflow.schemas import Track

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "tracks")

# Read-modify-write attempts before a conflicting playlist update gives up
MAX_WRITE_ATTEMPTS = 3

TrackListChange = Callable[[List[Dict[str, Any]]], Optional[List[Dict[str, Any]]]]


class PlaylistService:
    """
    Service for playlist-related operations.

    Updates read, change and write a playlist inside one transaction. The
    row is locked where the backend supports it, and the version counter
    on Playlist rejects a write that raced another session; such writes
    are retried against the fresh row.
    """

    def __init__(self, db: Session):
        """
        Initialize playlist service

        Args:
            db: Database session
        """
        self.db = db

    def create_playlist(self, name: str, description: str = "") -> int:
        """
        Create an empty playlist

        Args:
            name: Playlist name
            description: Optional description

        Returns:
            Generated playlist id
        """
        now = datetime.utcnow()
        playlist = Playlist(
            name=name,
            description=description or "",
            tracks=[],
            created=now,
            modified=now
        )
        with transaction(self.db):
            self.db.add(playlist)

        logger.info(f"Created playlist {playlist.id}: {name}")
        return playlist.id

    def get_playlists(self) -> List[Playlist]:
        """Get all playlists in creation order"""
        with reading(self.db):
            return self.db.query(Playlist).order_by(Playlist.created, Playlist.id).all()

    def get_playlist(self, playlist_id: int) -> Playlist:
        """
        Get playlist by id

        Raises:
            NotFound: if the playlist does not exist
        """
        with reading(self.db):
            playlist = self.db.query(Playlist).filter(Playlist.id == playlist_id).first()
        if not playlist:
            raise NotFound("Playlist", playlist_id)
        return playlist

    def update_playlist(self, playlist_id: int, updates: Dict[str, Any]) -> Playlist:
        """
        Merge updates over an existing playlist and bump its modified time

        Args:
            playlist_id: Playlist id
            updates: Any of name, description, tracks

        Returns:
            Updated Playlist instance
        """
        unknown = set(updates) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update playlist fields: {', '.join(sorted(unknown))}")

        values = dict(updates)
        if "tracks" in values:
            values["tracks"] = [_track_record(t) for t in values["tracks"]]

        def apply(playlist: Playlist) -> bool:
            for field, value in values.items():
                setattr(playlist, field, value)
            return True

        playlist = self._modify(playlist_id, apply)
        logger.info(f"Updated playlist {playlist_id}")
        return playlist

    def delete_playlist(self, playlist_id: int) -> None:
        """Delete a playlist (NotFound if absent)"""
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            try:
                with transaction(self.db):
                    self.db.delete(self._locked_playlist(playlist_id))
                break
            except WriteConflict:
                if attempt == MAX_WRITE_ATTEMPTS:
                    raise
        logger.info(f"Deleted playlist {playlist_id}")

    def add_to_playlist(self, playlist_id: int, track: Track) -> bool:
        """
        Append a track unless a track with the same identity is already present

        Returns:
            True if appended, False if it was already in the playlist
        """
        def append(tracks):
            if any(_same_track(t, track.source, track.id) for t in tracks):
                logger.debug(f"Track {track.key} already in playlist {playlist_id}, skipping duplicate")
                return None
            return tracks + [track.to_record()]

        return self._change_tracks(playlist_id, append)

    def remove_from_playlist(self, playlist_id: int, source: str, track_id: str) -> bool:
        """
        Remove a track (by identity) from a playlist

        Returns:
            True if a track was removed
        """
        def remove(tracks):
            remaining = [t for t in tracks if not _same_track(t, source, track_id)]
            return remaining if len(remaining) != len(tracks) else None

        return self._change_tracks(playlist_id, remove)

    def get_playlist_tracks(self, playlist_id: int) -> List[Track]:
        """Tracks of a playlist in playback order"""
        return [Track(**t) for t in self.get_playlist(playlist_id).tracks or []]

    def clear(self) -> int:
        """Delete every playlist"""
        with transaction(self.db):
            count = self.db.query(Playlist).delete()
        logger.info(f"Cleared {count} playlists")
        return count

    def _locked_playlist(self, playlist_id: int) -> Playlist:
        # populate_existing: a retry must see the row as committed by the other writer
        playlist = self.db.query(Playlist).filter(
            Playlist.id == playlist_id
        ).with_for_update().populate_existing().first()
        if not playlist:
            raise NotFound("Playlist", playlist_id)
        return playlist

    def _change_tracks(self, playlist_id: int, change: TrackListChange) -> bool:
        """Apply a track list change; False when the change is a no-op"""
        def apply(playlist: Playlist) -> bool:
            tracks = change(list(playlist.tracks or []))
            if tracks is None:
                return False
            playlist.tracks = tracks
            return True

        return self._modify(playlist_id, apply, return_changed=True)

    def _modify(self, playlist_id: int, apply: Callable[[Playlist], bool], return_changed: bool = False):
        """
        Read, change and write one playlist in a single transaction

        Args:
            playlist_id: Playlist id
            apply: Mutates the playlist; returns False to leave it untouched
            return_changed: Return whether anything changed instead of the playlist
        """
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            try:
                with transaction(self.db):
                    playlist = self._locked_playlist(playlist_id)
                    changed = apply(playlist)
                    if changed:
                        playlist.modified = datetime.utcnow()
                return changed if return_changed else playlist
            except WriteConflict:
                if attempt == MAX_WRITE_ATTEMPTS:
                    raise
                logger.info(f"Playlist {playlist_id} changed concurrently, retrying ({attempt}/{MAX_WRITE_ATTEMPTS})")


def _same_track(record: Dict[str, Any], source: str, track_id: str) -> bool:
    return record.get("id") == track_id and record.get("source") == source


def _track_record(track: Any) -> Dict[str, Any]:
    if isinstance(track, Track):
        return track.to_record()
    return Track(**track).to_record()
