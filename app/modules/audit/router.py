# app/modules/audit/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import require_permission
from .repository import AuditRepository
from .schemas import AuditLogListResponse

router = APIRouter()

@router.get("/logs", response_model=AuditLogListResponse)
async def get_audit_logs(
    limit: int = Query(100, ge=1, le=1000),
    current_user = Depends(require_permission("audit", "read")),
    db: Session = Depends(get_db)
):
    """Most recent audit events (worker only)"""
    logs = AuditRepository(db).list_logs(limit)
    return AuditLogListResponse(logs=logs, count=len(logs))
