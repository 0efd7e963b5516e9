"""Liked track model"""
from sqlalchemy import Column, String, DateTime
from datetime import datetime

from streamflow.database import Base
from streamflow.models.track import TrackColumns


class LikedTrack(TrackColumns, Base):
    """A liked track. Presence of the row is the liked flag."""

    __tablename__ = "liked"

    id = Column(String, primary_key=True)  # '<source>_<id>'
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<LikedTrack(id={self.id}, title='{self.title}')>"
