# app/modules/audit/__init__.py
"""
Audit module - trail of mailroom mutations

Records who checked packages in and out and who edited recipients.
Writes are best effort: a failed audit insert never fails the operation
that produced it.

- router.py: worker endpoint to read the trail
- repository.py: inserts and queries
- schemas.py: response models
"""

from .router import router
from .repository import AuditRepository

__all__ = [
    "router",
    "AuditRepository"
]
