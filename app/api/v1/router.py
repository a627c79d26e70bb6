# app/api/v1/router.py
from fastapi import APIRouter
from app.api.v1.auth import router as auth_router
from app.modules.packages.router import router as packages_router
from app.modules.recipients.router import router as recipients_router
from app.modules.tracking.router import router as tracking_router
from app.modules.audit.router import router as audit_router


# Main API v1 router
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["authentication"])

api_router.include_router(
    packages_router,
    prefix="/packages",
    tags=["Packages"]
)

api_router.include_router(
    recipients_router,
    prefix="/recipients",
    tags=["Recipients"]
)

api_router.include_router(
    tracking_router,
    prefix="/tracking",
    tags=["Tracking"]
)

api_router.include_router(
    audit_router,
    prefix="/audit",
    tags=["Audit"]
)
