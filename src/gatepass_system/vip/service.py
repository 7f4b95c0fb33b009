from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import clamp, clean_text, normalize_pass_id, parse_int
from ..core.constants import (
    VIP_ACCESS_ID_PREFIX,
    VIP_DEFAULT_DEPARTMENT,
    VIP_DEFAULT_LABEL,
    VIP_DEFAULT_UNIT,
    VIP_LOG_DEFAULT_LIMIT,
    VIP_LOG_MAX_LIMIT,
    VIP_LOG_MIN_LIMIT,
    VIP_PASS_ID_PREFIX,
)
from ..core.enums import CompanyType, VisitorType
from ..core.exceptions import NotFoundError, ValidationError
from ..identifiers.generator import IdentifierGenerator
from ..passes.model import PassDraft, VisitorPass
from ..passes.repository import PassRepository
from ..passes.service import IssuedPass, PassService, check_admin, complete_pass
from .model import VipAccessCode
from .repository import VipCodeRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VipIssueResult:
    issued: IssuedPass
    code: VipAccessCode


def vip_pass_draft(code: VipAccessCode, *, phone: str) -> PassDraft:
    """Fixed visitor details for a pass minted from a VIP code."""
    return PassDraft(
        name=f"VIP Visitor - {code.label}" if code.label else "VIP Visitor",
        phone=phone,
        visit_type="VIP Visit",
        person_to_meet="Management",
        visitor_type=VisitorType.VISITOR,
        company_type=CompanyType.RICO,
        company="RICO",
        rico_unit=VIP_DEFAULT_UNIT,
        department=VIP_DEFAULT_DEPARTMENT,
        id_proof_type="VIP PASS",
        id_proof_number=code.vip_access_id,
        carries_laptop=False,
        laptop_serial_number="",
        remarks="VIP auto entry",
        is_vip=True,
        vip_access_id=code.vip_access_id,
    )


class VipService:
    def __init__(
        self,
        passes: PassRepository,
        codes: VipCodeRepository,
        pass_service: PassService,
        *,
        admin_password: str,
        id_generator: Optional[IdentifierGenerator] = None,
    ):
        self._passes = passes
        self._codes = codes
        self._pass_service = pass_service
        self._admin_password = admin_password
        self._ids = id_generator or IdentifierGenerator()

    def generate(self, label: Any = None, *, admin_password: Optional[str], now: Optional[datetime] = None) -> VipAccessCode:
        check_admin(self._admin_password, admin_password)
        now = now or now_local()
        clean_label = clean_text(label) or VIP_DEFAULT_LABEL

        code = self._ids.insert_with_next_id(
            self._codes,
            VIP_ACCESS_ID_PREFIX,
            lambda vip_access_id: self._codes.create(vip_access_id=vip_access_id, label=clean_label, created_at=now),
            now=now,
        )
        logger.info("Generated VIP access code %s (%s)", code.vip_access_id, code.label)
        return code

    def issue(self, vip_access_id: Any, *, now: Optional[datetime] = None) -> VipIssueResult:
        code_id = normalize_pass_id(vip_access_id)
        if not code_id:
            raise ValidationError("VIP pass ID is required.")

        code = self._codes.get_active(code_id)
        if not code:
            raise NotFoundError("VIP pass ID not found or inactive.")

        now = now or now_local()
        phone = self._ids.synthetic_phone(self._passes)
        issued = self._pass_service.issue_draft(vip_pass_draft(code, phone=phone), prefix=VIP_PASS_ID_PREFIX, now=now)

        self._codes.record_issue(code.vip_access_id, pass_id=issued.pass_id, issued_at=now)
        code = replace(
            code,
            issue_count=code.issue_count + 1,
            last_issued_pass_id=issued.pass_id,
            last_issued_at=now,
        )
        logger.info("Issued VIP pass %s from %s", issued.pass_id, code.vip_access_id)
        return VipIssueResult(issued=issued, code=code)

    def _lookup_args(self, pass_id: Any, vip_access_id: Any) -> dict:
        pass_id = normalize_pass_id(pass_id)
        vip_access_id = normalize_pass_id(vip_access_id)
        if not pass_id and not vip_access_id:
            raise ValidationError("Enter pass ID or VIP pass ID.")
        if pass_id:
            return {"pass_id": pass_id}
        return {"vip_access_id": vip_access_id}

    def verify(self, *, pass_id: Any = None, vip_access_id: Any = None) -> VisitorPass:
        visitor = self._passes.find_latest_vip(**self._lookup_args(pass_id, vip_access_id))
        if not visitor:
            raise NotFoundError("VIP visit record not found.")
        return visitor

    def checkout(self, *, pass_id: Any = None, vip_access_id: Any = None, now: Optional[datetime] = None) -> VisitorPass:
        visitor = self._passes.find_latest_vip(**self._lookup_args(pass_id, vip_access_id), active_only=True)
        if not visitor:
            raise NotFoundError("Active VIP visit not found.")

        visitor = complete_pass(self._passes, visitor, now=now or now_local())
        logger.info("VIP pass %s checked out", visitor.pass_id)
        return visitor

    def list_logs(self, limit: Any = None) -> Sequence[VisitorPass]:
        parsed = parse_int(limit)
        bounded = clamp(parsed, VIP_LOG_MIN_LIMIT, VIP_LOG_MAX_LIMIT) if parsed is not None else VIP_LOG_DEFAULT_LIMIT
        return self._passes.list_vip(limit=bounded)
