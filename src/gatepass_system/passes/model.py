from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import CompanyType, PassStatus, VisitorType


@dataclass(frozen=True)
class PassDraft:
    """Normalized visitor details for a pass that is about to be issued."""

    name: str
    phone: str
    visit_type: str
    person_to_meet: str
    visitor_type: VisitorType = VisitorType.VISITOR
    company_type: CompanyType = CompanyType.NONE
    company: str = ""
    rico_unit: str = ""
    department: str = ""
    id_proof_type: str = ""
    id_proof_number: str = ""
    carries_laptop: bool = False
    laptop_serial_number: str = ""
    remarks: str = ""
    is_vip: bool = False
    vip_access_id: str = ""

    def with_changes(self, **changes) -> "PassDraft":
        return replace(self, **changes)


@dataclass(frozen=True)
class VisitorPass:
    """One issued gate pass (one physical visit)."""

    visitor_id: int
    pass_id: str
    name: str
    phone: str
    visitor_type: VisitorType
    company_type: CompanyType
    company: str
    rico_unit: str
    visit_type: str
    person_to_meet: str
    department: str
    id_proof_type: str
    id_proof_number: str
    carries_laptop: bool
    laptop_serial_number: str
    is_vip: bool
    vip_access_id: str
    remarks: str
    qr_payload: str
    status: PassStatus
    date: datetime
    time_in: datetime
    time_out: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def is_active(self) -> bool:
        return self.status == PassStatus.ACTIVE

    def to_dict(self) -> dict:
        return {
            "passId": self.pass_id,
            "name": self.name,
            "phone": self.phone,
            "visitorType": self.visitor_type.value,
            "companyType": self.company_type.value,
            "company": self.company,
            "ricoUnit": self.rico_unit,
            "visitType": self.visit_type,
            "personToMeet": self.person_to_meet,
            "department": self.department,
            "idProofType": self.id_proof_type,
            "idProofNumber": self.id_proof_number,
            "carriesLaptop": self.carries_laptop,
            "laptopSerialNumber": self.laptop_serial_number,
            "isVip": self.is_vip,
            "vipAccessId": self.vip_access_id,
            "remarks": self.remarks,
            "qrPayload": self.qr_payload,
            "status": self.status.value,
            "date": to_iso(self.date),
            "timeIn": to_iso(self.time_in),
            "timeOut": to_iso(self.time_out),
            "createdAt": to_iso(self.created_at),
        }

    def to_log_dict(self) -> dict:
        return {
            "name": self.name,
            "passId": self.pass_id,
            "vipAccessId": self.vip_access_id,
            "status": self.status.value,
            "timeIn": to_iso(self.time_in),
            "timeOut": to_iso(self.time_out),
        }
