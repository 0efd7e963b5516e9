"""Download record and offline audio models (always written and deleted together)"""
from sqlalchemy import Column, String, Integer, JSON, DateTime, LargeBinary, Index
from datetime import datetime

from streamflow.database import Base
from streamflow.models.track import TrackColumns


class Download(Base):
    """Download metadata for a track saved for offline playback"""

    __tablename__ = "downloads"

    id = Column(String, primary_key=True)  # '<source>_<id>'
    track = Column(JSON, nullable=False)
    size = Column(Integer, nullable=False, default=0)  # Bytes
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<Download(id={self.id}, size={self.size})>"


class OfflineTrack(TrackColumns, Base):
    """Raw audio payload of a downloaded track"""

    __tablename__ = "offline_tracks"
    __table_args__ = (Index("ix_offline_tracks_source", "source"),)

    id = Column(String, primary_key=True)  # '<source>_<id>'
    blob = Column(LargeBinary, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<OfflineTrack(id={self.id}, source={self.source})>"
