# app/modules/tracking/classifier.py
"""
USPS tracking-number recognition.

The patterns below must stay exactly as they are: they decide which packages
get enriched through the USPS API and which are stored as carrier "Other".
"""
import re
from typing import NamedTuple, Optional

from app.shared.database.models import Carrier

_WHITESPACE = re.compile(r"\s+")

USPS_PATTERNS = (
    re.compile(r"^[0-9]{20}$"),                     # 20 digits
    re.compile(r"^(94|93|92|95)[0-9]{20}$"),        # 22 digits starting with 94, 93, 92 or 95
    re.compile(r"^(9407|9303|9270)[0-9]{17}$"),     # Priority Mail Express
    re.compile(r"^(EA|EC|CP|RA|RS)[0-9]{9}US$"),    # International
)


class TrackingClassification(NamedTuple):
    is_usps: bool
    normalized: str

    @property
    def carrier(self) -> Carrier:
        return Carrier.USPS if self.is_usps else Carrier.OTHER


def normalize(raw: Optional[str]) -> str:
    """Remove all whitespace and upper-case"""
    if not raw:
        return ""
    return _WHITESPACE.sub("", raw).upper()


def classify(raw: Optional[str]) -> TrackingClassification:
    normalized = normalize(raw)
    is_usps = bool(normalized) and any(p.match(normalized) for p in USPS_PATTERNS)
    return TrackingClassification(is_usps=is_usps, normalized=normalized)


def is_usps_tracking_number(raw: Optional[str]) -> bool:
    return classify(raw).is_usps


def detect_carrier(raw: Optional[str]) -> Carrier:
    return classify(raw).carrier
