# app/modules/audit/repository.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from app.shared.database.models import AuditLog, User

logger = logging.getLogger(__name__)

class AuditRepository:
    def __init__(self, db: Session):
        self.db = db

    def log_event(
        self,
        user_id: Optional[int],
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        details: Optional[Dict[str, Any]] = None
    ) -> Optional[AuditLog]:
        """Insert an audit row; failures are logged and rolled back"""
        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            created_at=datetime.now()
        )
        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Audit log failed for {action} {entity_type}#{entity_id}: {e}")
            return None
        return entry

    def list_logs(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Newest first, with the acting user's name and role"""
        rows = (
            self.db.query(AuditLog, User.username, User.role)
            .outerjoin(User, User.id == AuditLog.user_id)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": log.id,
                "user_id": log.user_id,
                "action": log.action,
                "entity_type": log.entity_type,
                "entity_id": log.entity_id,
                "details": log.details,
                "created_at": log.created_at,
                "username": username,
                "user_type": role
            }
            for log, username, role in rows
        ]
