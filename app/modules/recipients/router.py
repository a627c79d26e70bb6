# app/modules/recipients/router.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import require_permission
from app.shared.schemas.common import DeleteResponse
from .service import RecipientsService
from .schemas import (
    RecipientCreateRequest, RecipientUpdateRequest,
    RecipientResponse, RecipientListResponse
)

router = APIRouter()

@router.get("", response_model=RecipientListResponse)
async def list_recipients(
    current_user = Depends(require_permission("recipients", "read")),
    db: Session = Depends(get_db)
):
    """All recipients ordered by name"""
    recipients = await RecipientsService(db).get_all_recipients()
    return RecipientListResponse(recipients=recipients, count=len(recipients))

@router.get("/by-l-number/{l_number}", response_model=RecipientResponse)
async def get_recipient_by_l_number(
    l_number: str,
    current_user = Depends(require_permission("recipients", "read")),
    db: Session = Depends(get_db)
):
    return await RecipientsService(db).get_recipient_by_l_number(l_number)

@router.get("/{recipient_id}", response_model=RecipientResponse)
async def get_recipient(
    recipient_id: int,
    current_user = Depends(require_permission("recipients", "read")),
    db: Session = Depends(get_db)
):
    return await RecipientsService(db).get_recipient(recipient_id)

@router.post("", response_model=RecipientResponse, status_code=status.HTTP_201_CREATED)
async def create_recipient(
    recipient_data: RecipientCreateRequest,
    current_user = Depends(require_permission("recipients", "create")),
    db: Session = Depends(get_db)
):
    """
    Add a recipient to the directory

    **Errors:**
    - 400 if the L number is already registered or a field is missing
    """
    service = RecipientsService(db, current_user.id)
    return await service.create_recipient(recipient_data)

@router.put("/{recipient_id}", response_model=RecipientResponse)
async def update_recipient(
    recipient_id: int,
    recipient_data: RecipientUpdateRequest,
    current_user = Depends(require_permission("recipients", "update")),
    db: Session = Depends(get_db)
):
    service = RecipientsService(db, current_user.id)
    return await service.update_recipient(recipient_id, recipient_data)

@router.delete("/{recipient_id}", response_model=DeleteResponse)
async def delete_recipient(
    recipient_id: int,
    current_user = Depends(require_permission("recipients", "delete")),
    db: Session = Depends(get_db)
):
    """
    Remove a recipient

    Refused with 400 while any of the recipient's packages is still checked in.
    """
    service = RecipientsService(db, current_user.id)
    deleted = await service.delete_recipient(recipient_id)
    return DeleteResponse(
        message="Recipient deleted successfully",
        id=recipient_id,
        l_number=deleted["l_number"]
    )
