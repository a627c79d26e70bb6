# app/core/exceptions.py
from fastapi import HTTPException, status


class ValidationError(HTTPException):
    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """Duplicate key or invalid state transition.

    Reported as 400 to keep the status codes the mailroom clients already handle.
    """
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthenticatedError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(HTTPException):
    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UpstreamError(HTTPException):
    def __init__(self, detail: str = "Carrier service error"):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


class UnavailableError(HTTPException):
    def __init__(self, detail: str = "Service not configured"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


# ==================== DOMAIN ERRORS ====================

class PackageNotFound(NotFoundError):
    def __init__(self, package_id=None):
        super().__init__("Package not found")
        self.package_id = package_id


class RecipientNotFound(NotFoundError):
    def __init__(self, recipient_id=None):
        super().__init__("Recipient not found")
        self.recipient_id = recipient_id


class TrackingNotFoundError(NotFoundError):
    def __init__(self, tracking_number: str):
        super().__init__("Tracking number not found")
        self.tracking_number = tracking_number


class DuplicateTrackingCode(ConflictError):
    def __init__(self, tracking_code: str):
        super().__init__("Package with this tracking code already exists")
        self.tracking_code = tracking_code


class AlreadyPickedUp(ConflictError):
    def __init__(self, package_id=None):
        super().__init__("Package already picked up")
        self.package_id = package_id


class DuplicateLNumber(ConflictError):
    def __init__(self, l_number: str):
        super().__init__("Recipient with this L number already exists")
        self.l_number = l_number


class HasPendingPackages(ConflictError):
    def __init__(self, l_number: str, pending: int):
        super().__init__(
            f"Recipient has {pending} package(s) waiting for pickup and cannot be deleted"
        )
        self.l_number = l_number
        self.pending = pending
