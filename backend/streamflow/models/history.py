"""Play history and search history models"""
from sqlalchemy import Column, String, Integer, DateTime
from datetime import datetime

from streamflow.database import Base
from streamflow.models.track import TrackColumns


class HistoryEntry(TrackColumns, Base):
    """One play of a track (append-only; repeat plays share track_key)"""

    __tablename__ = "history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    track_key = Column(String, nullable=False, index=True)  # '<source>_<id>'
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<HistoryEntry(id={self.id}, track_key={self.track_key})>"


class SearchHistoryEntry(Base):
    """One submitted search query (append-only)"""

    __tablename__ = "search_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    query = Column(String, nullable=False, index=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<SearchHistoryEntry(id={self.id}, query='{self.query}')>"
