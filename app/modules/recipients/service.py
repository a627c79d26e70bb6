# app/modules/recipients/service.py
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateLNumber, RecipientNotFound
from app.modules.audit.repository import AuditRepository
from app.shared.database.models import Recipient
from .repository import RecipientsRepository
from .schemas import RecipientCreateRequest, RecipientUpdateRequest


class RecipientsService:
    def __init__(self, db: Session, current_user_id: Optional[int] = None):
        self.db = db
        self.current_user_id = current_user_id
        self.repository = RecipientsRepository(db)
        self.audit = AuditRepository(db)

    async def create_recipient(self, recipient_data: RecipientCreateRequest) -> Recipient:
        """Add a recipient; the L number must be unused"""
        data = recipient_data.dict()
        data['type'] = recipient_data.type.value

        if self.repository.get_recipient_by_l_number(data['l_number']):
            raise DuplicateLNumber(data['l_number'])

        recipient = self.repository.create_recipient(data)
        self.audit.log_event(
            self.current_user_id, "recipient.create", "recipient", recipient.id,
            {"l_number": recipient.l_number, "name": recipient.name}
        )
        return recipient

    async def get_all_recipients(self) -> List[Recipient]:
        return self.repository.get_all_recipients()

    async def get_recipient(self, recipient_id: int) -> Recipient:
        recipient = self.repository.get_recipient_by_id(recipient_id)
        if recipient is None:
            raise RecipientNotFound(recipient_id)
        return recipient

    async def get_recipient_by_l_number(self, l_number: str) -> Recipient:
        recipient = self.repository.get_recipient_by_l_number(l_number)
        if recipient is None:
            raise RecipientNotFound(l_number)
        return recipient

    async def update_recipient(self, recipient_id: int, recipient_data: RecipientUpdateRequest) -> Recipient:
        """Replace every field. Packages keep the snapshot taken at check-in."""
        recipient = await self.get_recipient(recipient_id)

        data = recipient_data.dict()
        data['type'] = recipient_data.type.value

        if data['l_number'] != recipient.l_number:
            other = self.repository.get_recipient_by_l_number(data['l_number'])
            if other is not None and other.id != recipient.id:
                raise DuplicateLNumber(data['l_number'])

        recipient = self.repository.update_recipient(recipient, data)
        self.audit.log_event(
            self.current_user_id, "recipient.update", "recipient", recipient.id,
            {"l_number": recipient.l_number}
        )
        return recipient

    async def delete_recipient(self, recipient_id: int) -> Dict[str, Any]:
        """Delete unless packages are waiting for pickup"""
        deleted = self.repository.delete_recipient(recipient_id)
        self.audit.log_event(
            self.current_user_id, "recipient.delete", "recipient", recipient_id,
            {"l_number": deleted["l_number"], "name": deleted["name"]}
        )
        return deleted
