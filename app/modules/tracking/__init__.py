# app/modules/tracking/__init__.py
"""
Tracking module - carrier detection and USPS lookups

- classifier.py: USPS tracking-number recognition (pure)
- router.py: format check (public), USPS validation and status (worker)
- service.py: validation flow over the USPS client
- schemas.py: request/response models

Only the classifier is exported here; the router is imported directly by
the API router.
"""

from .classifier import classify, detect_carrier, is_usps_tracking_number, TrackingClassification

__all__ = [
    "classify",
    "detect_carrier",
    "is_usps_tracking_number",
    "TrackingClassification"
]
