"""Library service for liked tracks, play history and search history"""
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from datetime import datetime, timedelta
import logging

from streamflow.config import settings
from streamflow.database import reading, transaction
from streamflow.errors import NotFound
from streamflow.models.history import HistoryEntry, SearchHistoryEntry
from streamflow.models.liked_track import LikedTrack
from streamflow.schemas import Track

logger = logging.getLogger(__name__)


class LibraryService:
    """Service for the user's listening library"""

    def __init__(self, db: Session, retention_days: Optional[int] = None):
        """
        Initialize library service

        Args:
            db: Database session
            retention_days: Age after which history entries are swept
        """
        self.db = db
        self.retention_days = retention_days if retention_days is not None else settings.history_retention_days

    # Liked tracks

    def toggle_like(self, track: Track) -> bool:
        """
        Flip the liked state of a track

        Returns:
            The new liked state
        """
        with transaction(self.db):
            liked = self.db.query(LikedTrack).filter(LikedTrack.id == track.key).first()
            if liked:
                self.db.delete(liked)
                is_liked = False
            else:
                self.db.add(LikedTrack(
                    id=track.key,
                    timestamp=datetime.utcnow(),
                    **LikedTrack.track_values(track)
                ))
                is_liked = True

        logger.info(f"{'Liked' if is_liked else 'Unliked'} track {track.key}")
        return is_liked

    def is_liked(self, track: Track) -> bool:
        with reading(self.db):
            return self.db.query(LikedTrack.id).filter(LikedTrack.id == track.key).first() is not None

    def get_liked_songs(self) -> List[LikedTrack]:
        """Liked tracks, most recently liked first"""
        with reading(self.db):
            return self.db.query(LikedTrack).order_by(LikedTrack.timestamp.desc()).all()

    # Play history

    def add_to_history(self, track: Track) -> int:
        """
        Append a play to the history log

        Returns:
            Id of the new history entry
        """
        entry = HistoryEntry(
            track_key=track.key,
            timestamp=datetime.utcnow(),
            **HistoryEntry.track_values(track)
        )
        with transaction(self.db):
            self.db.add(entry)
        return entry.id

    def get_play_history(self, limit: int = 50) -> List[HistoryEntry]:
        """Most recent plays first, truncated to limit"""
        with reading(self.db):
            return self.db.query(HistoryEntry).order_by(
                HistoryEntry.timestamp.desc(),
                HistoryEntry.id.desc()
            ).limit(limit).all()

    def clear_history(self) -> int:
        with transaction(self.db):
            count = self.db.query(HistoryEntry).delete()
        logger.info(f"Cleared {count} history entries")
        return count

    # Search history

    def add_to_search_history(self, query: str) -> int:
        entry = SearchHistoryEntry(query=query, timestamp=datetime.utcnow())
        with transaction(self.db):
            self.db.add(entry)
        return entry.id

    def get_search_history(self, limit: int = 10) -> List[SearchHistoryEntry]:
        """
        Recent distinct searches

        Keeps only the most recent occurrence of each query text,
        most recent first, at most `limit` entries.
        """
        with reading(self.db):
            entries = self.db.query(SearchHistoryEntry).order_by(
                SearchHistoryEntry.timestamp.desc(),
                SearchHistoryEntry.id.desc()
            ).all()

        unique = []
        seen = set()
        for entry in entries:
            if entry.query in seen:
                continue
            seen.add(entry.query)
            unique.append(entry)
            if len(unique) >= limit:
                break
        return unique

    def remove_from_search_history(self, entry_id: int) -> None:
        with transaction(self.db):
            entry = self.db.query(SearchHistoryEntry).filter(SearchHistoryEntry.id == entry_id).first()
            if not entry:
                raise NotFound("Search history entry", entry_id)
            self.db.delete(entry)

    def clear_search_history(self) -> int:
        with transaction(self.db):
            count = self.db.query(SearchHistoryEntry).delete()
        logger.info(f"Cleared {count} search history entries")
        return count

    # Retention

    def cleanup(self, now: Optional[datetime] = None) -> Tuple[int, int]:
        """
        Delete history and search history older than the retention window

        Each collection is swept in its own transaction.

        Args:
            now: Reference time (defaults to current UTC time)

        Returns:
            (history entries removed, search history entries removed)
        """
        cutoff = (now or datetime.utcnow()) - timedelta(days=self.retention_days)

        with transaction(self.db):
            history_removed = self.db.query(HistoryEntry).filter(
                HistoryEntry.timestamp <= cutoff
            ).delete(synchronize_session=False)

        with transaction(self.db):
            searches_removed = self.db.query(SearchHistoryEntry).filter(
                SearchHistoryEntry.timestamp <= cutoff
            ).delete(synchronize_session=False)

        logger.info(
            f"Retention sweep removed {history_removed} history and "
            f"{searches_removed} search entries older than {cutoff.isoformat()}"
        )
        return history_removed, searches_removed
