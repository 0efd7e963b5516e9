"""Settings API endpoints"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Any, Dict
from pydantic import BaseModel

from streamflow.database import get_db
from streamflow.services.settings_service import SettingsService

router = APIRouter(prefix="/api/settings", tags=["settings"])


class SettingValue(BaseModel):
    value: Any = None


@router.get("", response_model=Dict[str, Any])
def get_settings(db: Session = Depends(get_db)):
    """All settings as a key-value mapping"""
    return SettingsService(db).get_all_settings()


@router.put("/{key}")
def set_setting(key: str, body: SettingValue, db: Session = Depends(get_db)):
    SettingsService(db).set_setting(key, body.value)
    return {"key": key, "value": body.value}


@router.delete("/{key}")
def delete_setting(key: str, db: Session = Depends(get_db)):
    SettingsService(db).delete_setting(key)
    return {"message": f"Setting '{key}' deleted"}
