# app/modules/recipients/__init__.py
"""
Recipients module - mailroom directory

People and departments packages are checked in against. The L number is
the business key shared with student accounts and package records.

- router.py: worker-only CRUD endpoints
- service.py: uniqueness and pending-package deletion guard
- repository.py: data access
- schemas.py: request/response models
"""

from .router import router
from .service import RecipientsService
from .repository import RecipientsRepository

__all__ = [
    "router",
    "RecipientsService",
    "RecipientsRepository"
]
