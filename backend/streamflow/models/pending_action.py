"""Pending action model"""
from sqlalchemy import Column, String, Integer, JSON, DateTime
from datetime import datetime

from streamflow.database import Base


class PendingAction(Base):
    """A mutation queued while offline, consumed after a successful replay"""

    __tablename__ = "pending_actions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String, nullable=False, index=True)
    data = Column(JSON, nullable=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<PendingAction(id={self.id}, type='{self.type}')>"
