# app/modules/packages/repository.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func, distinct, case
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.core.exceptions import DuplicateTrackingCode
from app.shared.database.models import Package, PackageStatus

# Fields a worker may patch on an existing package
UPDATABLE_FIELDS = (
    'tracking_code', 'carrier', 'status', 'recipient_id', 'recipient_name',
    'l_number', 'mailbox', 'carrier_status', 'service_type',
    'expected_delivery', 'last_location', 'carrier_data'
)

class PackagesRepository:
    def __init__(self, db: Session):
        self.db = db

    def _ordered(self, query):
        return query.order_by(
            Package.check_in_date.desc(),
            Package.created_at.desc(),
            Package.id.desc()
        )

    def get_package_by_id(self, package_id: int) -> Optional[Package]:
        return self.db.query(Package).filter(Package.id == package_id).first()

    def get_package_by_tracking_code(self, tracking_code: str) -> Optional[Package]:
        return self.db.query(Package).filter(Package.tracking_code == tracking_code).first()

    def get_all_packages(self) -> List[Package]:
        return self._ordered(self.db.query(Package)).all()

    def get_packages_by_l_number(self, l_number: str) -> List[Package]:
        return self._ordered(self.db.query(Package).filter(Package.l_number == l_number)).all()

    def create_package(self, package_data: Dict[str, Any]) -> Package:
        """Insert a checked-in package.

        The unique index on tracking_code is what settles two concurrent
        check-ins of the same code; the loser gets DuplicateTrackingCode.
        """
        now = datetime.now()
        package = Package(
            tracking_code=package_data['tracking_code'],
            carrier=package_data['carrier'],
            status=PackageStatus.CHECKED_IN.value,
            recipient_id=package_data['recipient_id'],
            recipient_name=package_data['recipient_name'],
            l_number=package_data['l_number'],
            mailbox=package_data['mailbox'],
            carrier_status=package_data.get('carrier_status'),
            service_type=package_data.get('service_type'),
            expected_delivery=package_data.get('expected_delivery'),
            last_location=package_data.get('last_location'),
            carrier_data=package_data.get('carrier_data') or {},
            check_in_date=now,
            checkout_date=None,
            last_updated=now,
            created_at=now
        )
        self.db.add(package)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateTrackingCode(package_data['tracking_code'])
        self.db.refresh(package)
        return package

    def checkout_package(self, package_id: int) -> bool:
        """Move a package to Picked Up if, and only if, it is still Checked In"""
        now = datetime.now()
        updated = self.db.query(Package).filter(
            Package.id == package_id,
            Package.status == PackageStatus.CHECKED_IN.value
        ).update(
            {
                Package.status: PackageStatus.PICKED_UP.value,
                Package.checkout_date: now,
                Package.last_updated: now
            },
            synchronize_session=False
        )
        self.db.commit()
        return updated > 0

    def update_package(self, package: Package, fields: Dict[str, Any]) -> Package:
        for name, value in fields.items():
            if name in UPDATABLE_FIELDS:
                setattr(package, name, value)
        package.last_updated = datetime.now()
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateTrackingCode(fields.get('tracking_code', package.tracking_code))
        self.db.refresh(package)
        return package

    def delete_package(self, package_id: int) -> bool:
        deleted = self.db.query(Package).filter(Package.id == package_id).delete(
            synchronize_session=False
        )
        self.db.commit()
        return deleted > 0

    def get_package_stats(self) -> Dict[str, int]:
        total, checked_in, picked_up, carriers, recipients = self.db.query(
            func.count(Package.id),
            func.sum(case((Package.status == PackageStatus.CHECKED_IN.value, 1), else_=0)),
            func.sum(case((Package.status == PackageStatus.PICKED_UP.value, 1), else_=0)),
            func.count(distinct(Package.carrier)),
            func.count(distinct(Package.l_number))
        ).one()
        return {
            "total_packages": int(total or 0),
            "checked_in": int(checked_in or 0),
            "picked_up": int(picked_up or 0),
            "unique_carriers": int(carriers or 0),
            "unique_recipients": int(recipients or 0)
        }
