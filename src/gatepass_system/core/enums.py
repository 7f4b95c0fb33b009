from __future__ import annotations

from enum import Enum
from typing import Optional


class VisitorType(str, Enum):
    """Visitor category printed on the gate pass."""

    CUSTOMER = "Customer"
    VENDOR = "Vendor"
    VISITOR = "Visitor"
    MAINTENANCE = "Maintenance"


class CompanyType(str, Enum):
    RICO = "RICO"
    OTHER = "Other"
    NONE = ""


class PassStatus(str, Enum):
    """Pass status. Only `active` and `completed` are ever written.

    `UNKNOWN` marks legacy rows whose stored status is neither. Validation
    and analytics count only `ACTIVE`; the active listing also shows
    `UNKNOWN` rows that have no exit time.
    """

    ACTIVE = "active"
    COMPLETED = "completed"
    UNKNOWN = "unknown"

    @classmethod
    def from_stored(cls, raw: Optional[str]) -> "PassStatus":
        # Legacy rows may carry mixed case.
        value = (raw or "").strip().lower()
        if value == cls.ACTIVE.value:
            return cls.ACTIVE
        if value == cls.COMPLETED.value:
            return cls.COMPLETED
        return cls.UNKNOWN


class VipCodeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
