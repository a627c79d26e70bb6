# app/modules/audit/schemas.py
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime

class AuditLogEntry(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    entity_type: str
    entity_id: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime
    username: Optional[str] = None
    user_type: Optional[str] = None

class AuditLogListResponse(BaseModel):
    logs: List[AuditLogEntry]
    count: int
