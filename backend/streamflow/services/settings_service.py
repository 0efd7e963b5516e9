"""Settings service for key-value player settings"""
from sqlalchemy.orm import Session
from typing import Any, Dict
import logging

from streamflow.database import reading, transaction
from streamflow.errors import NotFound
from streamflow.models.setting import Setting

logger = logging.getLogger(__name__)


class SettingsService:
    """Service for settings (last write wins)"""

    def __init__(self, db: Session):
        self.db = db

    def get_setting(self, key: str, default: Any = None) -> Any:
        with reading(self.db):
            row = self.db.query(Setting).filter(Setting.key == key).first()
        return row.value if row else default

    def set_setting(self, key: str, value: Any) -> None:
        with transaction(self.db):
            row = self.db.query(Setting).filter(Setting.key == key).first()
            if row:
                row.value = value
            else:
                self.db.add(Setting(key=key, value=value))
        logger.debug(f"Set setting {key}")

    def get_all_settings(self) -> Dict[str, Any]:
        with reading(self.db):
            return {row.key: row.value for row in self.db.query(Setting).all()}

    def delete_setting(self, key: str) -> None:
        with transaction(self.db):
            deleted = self.db.query(Setting).filter(Setting.key == key).delete()
            if not deleted:
                raise NotFound("Setting", key)
