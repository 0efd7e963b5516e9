"""Setting model for key-value player settings (e.g. preferences)"""
from sqlalchemy import Column, String, JSON

from streamflow.database import Base


class Setting(Base):
    """Key-value store for settings (last write wins)"""

    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<Setting(key='{self.key}', value={self.value!r})>"
