"""Download service for tracks saved for offline playback"""
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime
import logging

from streamflow.database import reading, transaction
from streamflow.errors import ConsistencyViolation, NotFound
from streamflow.models.download import Download, OfflineTrack
from streamflow.schemas import Track

logger = logging.getLogger(__name__)


class DownloadService:
    """
    Service for offline downloads.

    A download is two rows, the audio payload (OfflineTrack) and its
    metadata (Download), keyed by the same '<source>_<id>'. They are
    written and deleted in a single transaction.
    """

    def __init__(self, db: Session):
        """
        Initialize download service

        Args:
            db: Database session
        """
        self.db = db

    def save_offline_track(self, track: Track, blob: bytes) -> bool:
        """
        Store the audio payload and the download record together

        Args:
            track: Downloaded track
            blob: Raw audio bytes

        Returns:
            True once both rows are committed
        """
        now = datetime.utcnow()
        with transaction(self.db):
            self.db.merge(self._offline_record(track, blob, now))
            self.db.flush()
            self.db.merge(self._download_record(track, len(blob), now))
            self.db.flush()

        logger.info(f"Saved offline track {track.key} ({len(blob)} bytes)")
        return True

    def get_downloads(self) -> List[Download]:
        """Download records, most recent first"""
        with reading(self.db):
            return self.db.query(Download).order_by(Download.timestamp.desc()).all()

    def get_download(self, key: str) -> Optional[Download]:
        with reading(self.db):
            return self.db.query(Download).filter(Download.id == key).first()

    def is_downloaded(self, track: Track) -> bool:
        return self.get_download(track.key) is not None

    def get_offline_track(self, key: str) -> OfflineTrack:
        """
        Get the stored audio for a download

        Raises:
            NotFound: if the track was never downloaded
            ConsistencyViolation: if only one half of the pair exists
        """
        with reading(self.db):
            offline = self.db.query(OfflineTrack).filter(OfflineTrack.id == key).first()
        download = self.get_download(key)
        if offline is None and download is None:
            raise NotFound("Download", key)
        if offline is None or download is None:
            missing = "audio payload" if offline is None else "download record"
            raise ConsistencyViolation(f"Download '{key}' is missing its {missing}")
        return offline

    def delete_download(self, key: str) -> bool:
        """
        Delete the audio payload and the download record together

        A half-written pair is removed as well.

        Raises:
            NotFound: if neither row exists
        """
        with transaction(self.db):
            offline_count = self.db.query(OfflineTrack).filter(OfflineTrack.id == key).delete()
            download_count = self.db.query(Download).filter(Download.id == key).delete()
            if not offline_count and not download_count:
                raise NotFound("Download", key)

        if offline_count != download_count:
            logger.warning(f"Removed orphaned half of download {key}")
        logger.info(f"Deleted download {key}")
        return True

    def _offline_record(self, track: Track, blob: bytes, timestamp: datetime) -> OfflineTrack:
        return OfflineTrack(
            id=track.key,
            blob=blob,
            timestamp=timestamp,
            **OfflineTrack.track_values(track)
        )

    def _download_record(self, track: Track, size: int, timestamp: datetime) -> Download:
        return Download(
            id=track.key,
            track=track.to_record(),
            size=size,
            timestamp=timestamp
        )
