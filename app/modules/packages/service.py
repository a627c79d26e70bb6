# app/modules/packages/service.py
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import (
    ValidationError, PackageNotFound, RecipientNotFound,
    DuplicateTrackingCode, AlreadyPickedUp
)
from app.modules.audit.repository import AuditRepository
from app.modules.recipients.repository import RecipientsRepository
from app.modules.tracking.classifier import classify, TrackingClassification
from app.shared.database.models import Package, PackageStatus
from app.shared.services.notification_service import NotificationService
from app.shared.services.usps_client import USPSTrackingClient
from .repository import PackagesRepository
from .schemas import PackageUpdateRequest

logger = logging.getLogger(__name__)


class PackagesService:
    def __init__(
        self,
        db: Session,
        tracking_client: Optional[USPSTrackingClient] = None,
        notifier: Optional[NotificationService] = None,
        current_user_id: Optional[int] = None
    ):
        self.db = db
        self.tracking_client = tracking_client
        self.notifier = notifier
        self.current_user_id = current_user_id
        self.repository = PackagesRepository(db)
        self.recipients = RecipientsRepository(db)
        self.audit = AuditRepository(db)

    # ==================== CHECK-IN ====================

    async def check_in(self, tracking_code: str, recipient_id: int) -> Package:
        """
        Register an arrived package for a recipient.

        USPS lookups and the arrival email are best effort: neither can make
        the check-in fail.
        """
        if not tracking_code or not tracking_code.strip() or recipient_id is None:
            raise ValidationError("Tracking code and recipient ID are required")

        classification = classify(tracking_code)
        code = classification.normalized

        if self.repository.get_package_by_tracking_code(code):
            raise DuplicateTrackingCode(code)

        if self.recipients.get_recipient_by_id(recipient_id) is None:
            raise RecipientNotFound(recipient_id)

        enrichment = await self._enrich(classification)

        # Lock the recipient until the insert commits so a concurrent delete waits
        recipient = self.recipients.get_recipient_by_id(recipient_id, for_update=True)
        if recipient is None:
            self.db.rollback()
            raise RecipientNotFound(recipient_id)

        package = self.repository.create_package({
            'tracking_code': code,
            'carrier': classification.carrier.value,
            'recipient_id': recipient.id,
            'recipient_name': recipient.name,
            'l_number': recipient.l_number,
            'mailbox': recipient.mailbox,
            **enrichment
        })
        logger.info(f"📦 Package {package.tracking_code} checked in for {package.l_number} ({package.carrier})")

        await self._notify(recipient, package.tracking_code)

        self.audit.log_event(
            self.current_user_id, "package.check_in", "package", package.id,
            {"tracking_code": package.tracking_code, "l_number": package.l_number, "carrier": package.carrier}
        )
        return package

    async def _enrich(self, classification: TrackingClassification) -> Dict[str, Any]:
        """Carrier fields for a new package, or nothing when the lookup is skipped or fails"""
        if not classification.is_usps:
            return {}
        if self.tracking_client is None or not self.tracking_client.is_configured():
            return {}

        try:
            info = await self.tracking_client.track(classification.normalized)
        except Exception as e:
            logger.warning(
                f"⚠️ USPS lookup failed for {classification.normalized}, checking in without carrier data: {e}"
            )
            return {}

        return {
            'carrier_status': info.status,
            'service_type': info.service,
            'expected_delivery': info.delivery_date,
            'last_location': info.last_location,
            'carrier_data': info.dict()
        }

    async def _notify(self, recipient, tracking_code: str) -> bool:
        if self.notifier is None:
            return False
        try:
            return await self.notifier.notify_package_arrival(recipient, tracking_code)
        except Exception as e:
            logger.warning(f"⚠️ Arrival notification failed for {tracking_code}: {e}")
            return False

    # ==================== CHECK-OUT ====================

    async def check_out(self, package_id: int) -> Package:
        """Record pickup. A second checkout of the same package is rejected."""
        package = self.repository.get_package_by_id(package_id)
        if package is None:
            raise PackageNotFound(package_id)
        if package.is_picked_up:
            raise AlreadyPickedUp(package_id)

        if not self.repository.checkout_package(package_id):
            # Another request picked it up between the read and the update
            raise AlreadyPickedUp(package_id)

        self.db.refresh(package)
        logger.info(f"✅ Package {package.tracking_code} picked up by {package.l_number}")
        self.audit.log_event(
            self.current_user_id, "package.check_out", "package", package.id,
            {"tracking_code": package.tracking_code, "l_number": package.l_number}
        )
        return package

    # ==================== CRUD ====================

    async def get_package(self, package_id: int) -> Package:
        package = self.repository.get_package_by_id(package_id)
        if package is None:
            raise PackageNotFound(package_id)
        return package

    async def update_package(self, package_id: int, update_data: PackageUpdateRequest) -> Package:
        package = await self.get_package(package_id)
        fields = update_data.dict(exclude_unset=True)

        # carrier and status are NOT NULL; an explicit null means "leave as is"
        for enum_field in ('carrier', 'status'):
            if enum_field in fields:
                if fields[enum_field] is None:
                    fields.pop(enum_field)
                else:
                    fields[enum_field] = fields[enum_field].value

        if 'tracking_code' in fields:
            fields['tracking_code'] = classify(fields['tracking_code']).normalized
            if not fields['tracking_code']:
                raise ValidationError("Tracking code cannot be empty")
            other = self.repository.get_package_by_tracking_code(fields['tracking_code'])
            if other is not None and other.id != package.id:
                raise DuplicateTrackingCode(fields['tracking_code'])

        new_status = fields.get('status')
        if new_status == PackageStatus.CHECKED_IN.value and package.is_picked_up:
            raise AlreadyPickedUp(package_id)
        elif new_status == PackageStatus.PICKED_UP.value and not package.is_picked_up:
            package.checkout_date = datetime.now()

        package = self.repository.update_package(package, fields)

        self.audit.log_event(
            self.current_user_id, "package.update", "package", package.id,
            {"fields": sorted(fields)}
        )
        return package

    async def delete_package(self, package_id: int) -> bool:
        """Remove a package in any state. False when it did not exist."""
        deleted = self.repository.delete_package(package_id)
        if deleted:
            self.audit.log_event(self.current_user_id, "package.delete", "package", package_id)
        return deleted

    async def list_all(self) -> List[Package]:
        return self.repository.get_all_packages()

    async def list_by_recipient(self, l_number: str) -> List[Package]:
        return self.repository.get_packages_by_l_number(l_number)

    async def get_stats(self) -> Dict[str, int]:
        return self.repository.get_package_stats()

    async def resend_notification(self, package_id: int) -> bool:
        """Send the arrival email again to the package's current recipient record"""
        package = await self.get_package(package_id)
        recipient = None
        if package.recipient_id is not None:
            recipient = self.recipients.get_recipient_by_id(package.recipient_id)
        if recipient is None:
            raise RecipientNotFound(package.recipient_id)
        return await self._notify(recipient, package.tracking_code)
