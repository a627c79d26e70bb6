# app/modules/packages/__init__.py
"""
Packages module - package lifecycle

Check-in registers an arrived package against a recipient (status
"Checked In"); check-out records the pickup (status "Picked Up"). Picked-up
packages are never re-opened.

- router.py: package endpoints (worker, plus the student "mine" view)
- service.py: lifecycle rules, USPS enrichment, arrival notification
- repository.py: data access
- schemas.py: request/response models
"""

from .router import router
from .service import PackagesService
from .repository import PackagesRepository

__all__ = [
    "router",
    "PackagesService",
    "PackagesRepository"
]
