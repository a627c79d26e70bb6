# app/modules/recipients/repository.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from app.core.exceptions import DuplicateLNumber, HasPendingPackages, RecipientNotFound
from app.shared.database.models import Recipient, Package, PackageStatus

logger = logging.getLogger(__name__)

class RecipientsRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_recipient(self, recipient_data: Dict[str, Any]) -> Recipient:
        recipient = Recipient(
            name=recipient_data['name'],
            l_number=recipient_data['l_number'],
            type=recipient_data['type'],
            mailbox=recipient_data['mailbox'],
            email=recipient_data['email'],
            created_at=datetime.now(),
            updated_at=datetime.now()
        )
        self.db.add(recipient)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateLNumber(recipient_data['l_number'])
        self.db.refresh(recipient)
        return recipient

    def get_all_recipients(self) -> List[Recipient]:
        return self.db.query(Recipient).order_by(Recipient.name.asc(), Recipient.id.asc()).all()

    def get_recipient_by_id(self, recipient_id: int, for_update: bool = False) -> Optional[Recipient]:
        query = self.db.query(Recipient).filter(Recipient.id == recipient_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    def get_recipient_by_l_number(self, l_number: str) -> Optional[Recipient]:
        return self.db.query(Recipient).filter(Recipient.l_number == l_number).first()

    def update_recipient(self, recipient: Recipient, recipient_data: Dict[str, Any]) -> Recipient:
        recipient.name = recipient_data['name']
        recipient.l_number = recipient_data['l_number']
        recipient.type = recipient_data['type']
        recipient.mailbox = recipient_data['mailbox']
        recipient.email = recipient_data['email']
        recipient.updated_at = datetime.now()
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateLNumber(recipient_data['l_number'])
        self.db.refresh(recipient)
        return recipient

    def count_pending_packages(self, l_number: str) -> int:
        return self.db.query(func.count(Package.id)).filter(
            Package.l_number == l_number,
            Package.status == PackageStatus.CHECKED_IN.value
        ).scalar() or 0

    def delete_recipient(self, recipient_id: int) -> Dict[str, Any]:
        """Delete a recipient that has no packages waiting for pickup.

        The recipient row stays locked from the pending check until commit, and
        check-in takes the same lock, so a package cannot slip in between.
        """
        try:
            recipient = self.get_recipient_by_id(recipient_id, for_update=True)
            if recipient is None:
                raise RecipientNotFound(recipient_id)

            pending = self.count_pending_packages(recipient.l_number)
            if pending > 0:
                raise HasPendingPackages(recipient.l_number, pending)

            deleted = {"id": recipient.id, "l_number": recipient.l_number, "name": recipient.name}
            self.db.delete(recipient)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"🗑️ Recipient {deleted['l_number']} deleted")
        return deleted
