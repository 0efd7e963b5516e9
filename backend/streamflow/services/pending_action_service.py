"""Pending action service for mutations queued while offline"""
from sqlalchemy.orm import Session
from typing import Any, List, Optional
from datetime import datetime
import logging

from streamflow.database import reading, transaction
from streamflow.errors import NotFound
from streamflow.models.pending_action import PendingAction

logger = logging.getLogger(__name__)


class PendingActionService:
    """Service for the offline action log"""

    def __init__(self, db: Session):
        self.db = db

    def add_pending_action(self, action_type: str, data: Any = None) -> int:
        action = PendingAction(type=action_type, data=data, timestamp=datetime.utcnow())
        with transaction(self.db):
            self.db.add(action)
        logger.info(f"Queued pending {action_type} action {action.id}")
        return action.id

    def get_pending_actions(self, action_type: Optional[str] = None) -> List[PendingAction]:
        """Pending actions, oldest first (replay order)"""
        query = self.db.query(PendingAction)
        if action_type is not None:
            query = query.filter(PendingAction.type == action_type)
        with reading(self.db):
            return query.order_by(PendingAction.timestamp, PendingAction.id).all()

    def delete_pending_action(self, action_id: int) -> None:
        with transaction(self.db):
            deleted = self.db.query(PendingAction).filter(PendingAction.id == action_id).delete()
            if not deleted:
                raise NotFound("Pending action", action_id)

    def clear_pending_actions(self) -> int:
        with transaction(self.db):
            count = self.db.query(PendingAction).delete()
        logger.info(f"Cleared {count} pending actions")
        return count
