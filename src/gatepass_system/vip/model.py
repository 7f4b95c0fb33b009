from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import VipCodeStatus


@dataclass(frozen=True)
class VipAccessCode:
    """Reusable VIP code that mints gate passes without full data entry."""

    code_id: int
    vip_access_id: str
    label: str
    status: VipCodeStatus
    issue_count: int = 0
    last_issued_pass_id: str = ""
    last_issued_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == VipCodeStatus.ACTIVE

    def to_dict(self) -> dict:
        return {
            "vipAccessId": self.vip_access_id,
            "label": self.label,
            "status": self.status.value,
            "issueCount": self.issue_count,
            "lastIssuedPassId": self.last_issued_pass_id,
            "lastIssuedAt": to_iso(self.last_issued_at),
            "createdAt": to_iso(self.created_at),
        }
