# app/modules/packages/router.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import require_permission
from app.core.exceptions import PackageNotFound, ValidationError
from app.shared.schemas.common import DeleteResponse, NotificationResponse
from app.shared.services.notification_service import NotificationService, get_notification_service
from app.shared.services.usps_client import USPSTrackingClient, get_tracking_client
from .service import PackagesService
from .schemas import (
    PackageCheckInRequest, PackageUpdateRequest,
    PackageResponse, PackageListResponse, PackageStatsResponse
)

router = APIRouter()

@router.post("", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
async def check_in_package(
    check_in: PackageCheckInRequest,
    current_user = Depends(require_permission("packages", "create")),
    db: Session = Depends(get_db),
    tracking_client: USPSTrackingClient = Depends(get_tracking_client),
    notifier: NotificationService = Depends(get_notification_service)
):
    """
    Check in an arrived package

    **Process:**
    - Carrier detected from the tracking code (USPS or Other)
    - USPS packages are looked up when the USPS API is configured; a failed
      lookup does not block the check-in
    - Recipient name, L number and mailbox are copied onto the package
    - Recipient is emailed

    **Errors:**
    - 400 duplicate tracking code
    - 404 recipient not found
    """
    service = PackagesService(db, tracking_client, notifier, current_user.id)
    return await service.check_in(check_in.tracking_code, check_in.recipient_id)

@router.get("", response_model=PackageListResponse)
async def list_packages(
    current_user = Depends(require_permission("packages", "read_all")),
    db: Session = Depends(get_db)
):
    """Every package, newest check-in first"""
    packages = await PackagesService(db).list_all()
    return PackageListResponse(packages=packages, count=len(packages))

@router.get("/mine", response_model=PackageListResponse)
async def list_my_packages(
    current_user = Depends(require_permission("packages", "read_own")),
    db: Session = Depends(get_db)
):
    """Packages addressed to the caller's own L number"""
    if not current_user.l_number:
        raise ValidationError("User L number not found")
    packages = await PackagesService(db).list_by_recipient(current_user.l_number)
    return PackageListResponse(packages=packages, count=len(packages))

@router.get("/stats", response_model=PackageStatsResponse)
async def get_package_stats(
    current_user = Depends(require_permission("packages", "read_all")),
    db: Session = Depends(get_db)
):
    return await PackagesService(db).get_stats()

@router.get("/{package_id}", response_model=PackageResponse)
async def get_package(
    package_id: int,
    current_user = Depends(require_permission("packages", "read_all")),
    db: Session = Depends(get_db)
):
    return await PackagesService(db).get_package(package_id)

@router.patch("/{package_id}/checkout", response_model=PackageResponse)
async def check_out_package(
    package_id: int,
    current_user = Depends(require_permission("packages", "checkout")),
    db: Session = Depends(get_db)
):
    """Record pickup; 400 if the package was already picked up"""
    service = PackagesService(db, current_user_id=current_user.id)
    return await service.check_out(package_id)

@router.put("/{package_id}", response_model=PackageResponse)
async def update_package(
    package_id: int,
    update_data: PackageUpdateRequest,
    current_user = Depends(require_permission("packages", "update")),
    db: Session = Depends(get_db)
):
    service = PackagesService(db, current_user_id=current_user.id)
    return await service.update_package(package_id, update_data)

@router.delete("/{package_id}", response_model=DeleteResponse)
async def delete_package(
    package_id: int,
    current_user = Depends(require_permission("packages", "delete")),
    db: Session = Depends(get_db)
):
    service = PackagesService(db, current_user_id=current_user.id)
    if not await service.delete_package(package_id):
        raise PackageNotFound(package_id)
    return DeleteResponse(message="Package deleted successfully", id=package_id)

@router.post("/{package_id}/notify", response_model=NotificationResponse)
async def resend_notification(
    package_id: int,
    current_user = Depends(require_permission("packages", "notify")),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service)
):
    """Email the recipient about this package again"""
    service = PackagesService(db, notifier=notifier, current_user_id=current_user.id)
    sent = await service.resend_notification(package_id)
    return NotificationResponse(
        success=sent,
        message="Notification sent successfully" if sent else "Notification not sent",
        sent=sent
    )
