"""Playlist model"""
from sqlalchemy import Column, String, Integer, JSON, DateTime
from datetime import datetime

from streamflow.database import Base


class Playlist(Base):
    """User playlist; tracks are an ordered list of track records (playback order)"""

    __tablename__ = "playlists"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False, default="")
    tracks = Column(JSON, nullable=False, default=list)
    created = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    modified = Column(DateTime, nullable=False, default=datetime.utcnow)
    version = Column(Integer, nullable=False)  # Bumped on every update

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Playlist(id={self.id}, name='{self.name}', tracks={len(self.tracks or [])})>"
