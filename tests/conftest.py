from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from gatepass_system.core.enums import CompanyType, PassStatus, VipCodeStatus, VisitorType
from gatepass_system.core.exceptions import DuplicateKeyError
from gatepass_system.passes.model import PassDraft, VisitorPass
from gatepass_system.vip.model import VipAccessCode

ADMIN = "admin123"


class InMemoryPasses:
    def __init__(self):
        self.rows: list[VisitorPass] = []
        self._id = 0
        self.create_calls: list[str] = []
        self.completed: list[str] = []

    def _newest_first(self, rows):
        return sorted(rows, key=lambda r: (r.created_at or datetime.min, r.visitor_id), reverse=True)

    def add(self, *, pass_id: str, name: str = "Asha Rao", phone: str = "9876543210", created_at=None, **fields) -> VisitorPass:
        self._id += 1
        when = fields.pop("time_in", None) or created_at or datetime(2026, 1, 1, 10, 0)
        row = VisitorPass(
            visitor_id=self._id,
            pass_id=pass_id,
            name=name,
            phone=phone,
            visitor_type=fields.pop("visitor_type", VisitorType.VISITOR),
            company_type=fields.pop("company_type", CompanyType.NONE),
            company=fields.pop("company", ""),
            rico_unit=fields.pop("rico_unit", ""),
            visit_type=fields.pop("visit_type", "Meeting"),
            person_to_meet=fields.pop("person_to_meet", "Ravi"),
            department=fields.pop("department", ""),
            id_proof_type=fields.pop("id_proof_type", ""),
            id_proof_number=fields.pop("id_proof_number", ""),
            carries_laptop=fields.pop("carries_laptop", False),
            laptop_serial_number=fields.pop("laptop_serial_number", ""),
            is_vip=fields.pop("is_vip", False),
            vip_access_id=fields.pop("vip_access_id", ""),
            remarks=fields.pop("remarks", ""),
            qr_payload=fields.pop("qr_payload", ""),
            status=fields.pop("status", PassStatus.ACTIVE),
            date=fields.pop("date", when),
            time_in=when,
            time_out=fields.pop("time_out", None),
            created_at=created_at or when,
        )
        assert not fields, f"unknown fields: {fields}"
        self.rows.append(row)
        return row

    def count_keys_with_prefix(self, prefix: str) -> int:
        return sum(1 for r in self.rows if r.pass_id.startswith(prefix))

    def key_exists(self, key: str) -> bool:
        return any(r.pass_id == key for r in self.rows)

    def phone_exists(self, phone: str) -> bool:
        return any(r.phone == phone for r in self.rows)

    def create(self, draft: PassDraft, *, pass_id: str, qr_payload: str, issued_at: datetime) -> VisitorPass:
        self.create_calls.append(pass_id)
        if self.key_exists(pass_id):
            raise DuplicateKeyError(pass_id)
        self._id += 1
        row = VisitorPass(
            visitor_id=self._id,
            pass_id=pass_id,
            name=draft.name,
            phone=draft.phone,
            visitor_type=draft.visitor_type,
            company_type=draft.company_type,
            company=draft.company,
            rico_unit=draft.rico_unit,
            visit_type=draft.visit_type,
            person_to_meet=draft.person_to_meet,
            department=draft.department,
            id_proof_type=draft.id_proof_type,
            id_proof_number=draft.id_proof_number,
            carries_laptop=draft.carries_laptop,
            laptop_serial_number=draft.laptop_serial_number,
            is_vip=draft.is_vip,
            vip_access_id=draft.vip_access_id,
            remarks=draft.remarks,
            qr_payload=qr_payload,
            status=PassStatus.ACTIVE,
            date=issued_at,
            time_in=issued_at,
            time_out=None,
            created_at=issued_at,
        )
        self.rows.append(row)
        return row

    def get_by_pass_id(self, pass_id: str, *, phone: Optional[str] = None) -> Optional[VisitorPass]:
        hits = [r for r in self.rows if r.pass_id == pass_id and (not phone or r.phone == phone)]
        hits = self._newest_first(hits)
        return hits[0] if hits else None

    def mark_completed(self, pass_id: str, *, time_out: datetime) -> bool:
        for i, r in enumerate(self.rows):
            if r.pass_id == pass_id:
                self.rows[i] = replace(r, status=PassStatus.COMPLETED, time_out=time_out)
                self.completed.append(pass_id)
                return True
        return False

    def delete_by_pass_id(self, pass_id: str) -> bool:
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.pass_id != pass_id]
        return len(self.rows) < before

    def find_latest(self, *, name: Optional[str] = None, phone: Optional[str] = None) -> Optional[VisitorPass]:
        if not name and not phone:
            return None
        hits = [
            r
            for r in self.rows
            if (not name or r.name.lower() == name.lower()) and (not phone or r.phone == phone)
        ]
        hits = self._newest_first(hits)
        return hits[0] if hits else None

    def list_names_with_prefix(self, prefix: str):
        return [r.name for r in self._newest_first(self.rows) if r.name.lower().startswith(prefix.lower())]

    def list_by_date_between(self, start: datetime, end: datetime):
        hits = [r for r in self.rows if start <= r.date <= end]
        return sorted(hits, key=lambda r: r.time_in, reverse=True)

    def list_active(self):
        hits = [r for r in self.rows if r.status == PassStatus.ACTIVE]
        return sorted(hits, key=lambda r: r.time_in)

    def list_history(self, *, start=None, end=None):
        hits = self.rows
        if start is not None and end is not None:
            hits = [
                r
                for r in self.rows
                if start <= r.date <= end or start <= r.time_in <= end or (r.created_at and start <= r.created_at <= end)
            ]
        return sorted(hits, key=lambda r: (r.time_in, r.created_at or datetime.min), reverse=True)

    def find_latest_vip(self, *, pass_id=None, vip_access_id=None, active_only=False):
        hits = [r for r in self.rows if r.is_vip]
        if pass_id:
            hits = [r for r in hits if r.pass_id == pass_id]
        elif vip_access_id:
            hits = [r for r in hits if r.vip_access_id == vip_access_id]
        else:
            return None
        if active_only:
            hits = [r for r in hits if r.status == PassStatus.ACTIVE]
        hits = sorted(hits, key=lambda r: (r.time_in, r.visitor_id), reverse=True)
        return hits[0] if hits else None

    def list_vip(self, *, limit: int):
        hits = sorted((r for r in self.rows if r.is_vip), key=lambda r: r.time_in, reverse=True)
        return hits[:limit]


class InMemoryVipCodes:
    def __init__(self):
        self.codes: dict[str, VipAccessCode] = {}
        self._id = 0

    def add(self, vip_access_id: str, *, label: str = "VIP", status: VipCodeStatus = VipCodeStatus.ACTIVE) -> VipAccessCode:
        self._id += 1
        code = VipAccessCode(code_id=self._id, vip_access_id=vip_access_id, label=label, status=status)
        self.codes[vip_access_id] = code
        return code

    def count_keys_with_prefix(self, prefix: str) -> int:
        return sum(1 for k in self.codes if k.startswith(prefix))

    def key_exists(self, key: str) -> bool:
        return key in self.codes

    def create(self, *, vip_access_id: str, label: str, created_at: datetime) -> VipAccessCode:
        if vip_access_id in self.codes:
            raise DuplicateKeyError(vip_access_id)
        code = self.add(vip_access_id, label=label)
        code = replace(code, created_at=created_at)
        self.codes[vip_access_id] = code
        return code

    def get_active(self, vip_access_id: str) -> Optional[VipAccessCode]:
        code = self.codes.get(vip_access_id)
        return code if code and code.is_active else None

    def record_issue(self, vip_access_id: str, *, pass_id: str, issued_at: datetime) -> bool:
        code = self.codes.get(vip_access_id)
        if not code:
            return False
        self.codes[vip_access_id] = replace(
            code,
            issue_count=code.issue_count + 1,
            last_issued_pass_id=pass_id,
            last_issued_at=issued_at,
        )
        return True


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 1, 31, 9, 15, 0)


@pytest.fixture
def passes_repo() -> InMemoryPasses:
    return InMemoryPasses()


@pytest.fixture
def codes_repo() -> InMemoryVipCodes:
    return InMemoryVipCodes()
