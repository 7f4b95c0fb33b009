from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import day_bounds, now_local, parse_iso_date, trailing_window
from ..common.validators import (
    clamp,
    clean_text,
    normalize_company_type,
    normalize_department,
    normalize_name,
    normalize_pass_id,
    normalize_phone,
    normalize_rico_unit,
    normalize_visitor_type,
    parse_flag,
    parse_int,
)
from ..core.constants import HISTORY_MAX_DAYS, HISTORY_MIN_DAYS, PASS_ID_PREFIX, REQUIRED_PASS_FIELDS
from ..core.enums import CompanyType, PassStatus
from ..core.exceptions import AuthorizationError, InactivePassError, NotFoundError, ValidationError
from ..identifiers.generator import IdentifierGenerator
from .model import PassDraft, VisitorPass
from .qr import build_qr_payload, try_render_qr_data_url
from .repository import PassRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedPass:
    visitor: VisitorPass
    qr_code_data_url: str

    @property
    def pass_id(self) -> str:
        return self.visitor.pass_id


@dataclass(frozen=True)
class ExitResult:
    visitor: VisitorPass
    already_completed: bool

    @property
    def message(self) -> str:
        return "Exit already marked." if self.already_completed else "Exit marked successfully."


@dataclass(frozen=True)
class HistoryResult:
    visitors: Sequence[VisitorPass]
    range_days: Optional[int]
    from_date: Optional[str]
    to_date: Optional[str]

    def filters(self) -> dict:
        return {"rangeDays": self.range_days, "fromDate": self.from_date, "toDate": self.to_date}


def check_admin(expected: str, supplied: Optional[str]) -> None:
    if clean_text(supplied) != expected:
        raise AuthorizationError("Unauthorized")


def complete_pass(passes: PassRepository, visitor: VisitorPass, *, now: datetime) -> VisitorPass:
    """active -> completed. Callers handle the already-completed case."""
    passes.mark_completed(visitor.pass_id, time_out=now)
    return replace(visitor, status=PassStatus.COMPLETED, time_out=now)


def build_pass_draft(form: Mapping[str, Any]) -> PassDraft:
    """Normalize raw issue-form input and enforce the field rules."""
    company_type = normalize_company_type(form.get("companyType"))
    other_company = clean_text(
        form.get("otherCompanyName")
        or form.get("companyName")
        or (form.get("company") if company_type != CompanyType.RICO else "")
    )
    carries_laptop = bool(parse_flag(form.get("carriesLaptop")))

    draft = PassDraft(
        name=normalize_name(form.get("name")),
        phone=normalize_phone(form.get("phone")),
        visit_type=clean_text(form.get("visitType")),
        person_to_meet=clean_text(form.get("personToMeet")),
        visitor_type=normalize_visitor_type(form.get("visitorType")),
        company_type=company_type,
        company="RICO" if company_type == CompanyType.RICO else other_company,
        rico_unit=normalize_rico_unit(form.get("ricoUnit")),
        department=normalize_department(form.get("department")),
        id_proof_type=clean_text(form.get("idProofType")),
        id_proof_number=clean_text(form.get("idProofNumber")),
        carries_laptop=carries_laptop,
        laptop_serial_number=clean_text(form.get("laptopSerialNumber")),
        remarks=clean_text(form.get("remarks")),
    )

    values = {
        "name": draft.name,
        "phone": draft.phone,
        "personToMeet": draft.person_to_meet,
        "visitType": draft.visit_type,
    }
    missing = [f for f in REQUIRED_PASS_FIELDS if not values[f]]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    if company_type == CompanyType.RICO:
        if clean_text(form.get("ricoUnit")) and not draft.rico_unit:
            raise ValidationError("Select a valid RICO unit.")
    else:
        draft = draft.with_changes(rico_unit="")

    if clean_text(form.get("department")) and not draft.department:
        raise ValidationError("Select a valid department.")

    if not draft.carries_laptop:
        draft = draft.with_changes(laptop_serial_number="")

    return draft


class PassService:
    """Use cases for the gate pass lifecycle (issue, validate, exit, delete, listings)."""

    def __init__(
        self,
        passes: PassRepository,
        *,
        admin_password: str,
        id_generator: Optional[IdentifierGenerator] = None,
        qr_renderer: Callable[[str], str] = try_render_qr_data_url,
    ):
        self._passes = passes
        self._admin_password = admin_password
        self._ids = id_generator or IdentifierGenerator()
        self._render_qr = qr_renderer

    def require_admin(self, admin_password: Optional[str]) -> None:
        check_admin(self._admin_password, admin_password)

    def _require_pass_id(self, pass_id: Any) -> str:
        normalized = normalize_pass_id(pass_id)
        if not normalized:
            raise ValidationError("Pass ID is required.")
        return normalized

    def _find(self, pass_id: Any, phone: Any = None) -> VisitorPass:
        visitor = self._passes.get_by_pass_id(self._require_pass_id(pass_id), phone=normalize_phone(phone) or None)
        if not visitor:
            raise NotFoundError("Pass not found.")
        return visitor

    def issue_draft(self, draft: PassDraft, *, prefix: str = PASS_ID_PREFIX, now: Optional[datetime] = None) -> IssuedPass:
        """Persist an already-validated draft under a freshly allocated id."""
        now = now or now_local()

        def insert(pass_id: str) -> VisitorPass:
            return self._passes.create(
                draft,
                pass_id=pass_id,
                qr_payload=build_qr_payload(pass_id, draft.phone),
                issued_at=now,
            )

        visitor = self._ids.insert_with_next_id(self._passes, prefix, insert, now=now)
        logger.info("Issued pass %s for %s", visitor.pass_id, visitor.name)
        return IssuedPass(visitor=visitor, qr_code_data_url=self._render_qr(visitor.qr_payload))

    def issue(self, form: Mapping[str, Any], *, admin_password: Optional[str], now: Optional[datetime] = None) -> IssuedPass:
        self.require_admin(admin_password)
        return self.issue_draft(build_pass_draft(form), now=now)

    def renew(
        self,
        pass_id: Any,
        overrides: Optional[Mapping[str, Any]] = None,
        *,
        admin_password: Optional[str],
        now: Optional[datetime] = None,
    ) -> IssuedPass:
        """Issue a new pass from a previous visit's details."""
        self.require_admin(admin_password)
        previous = self._find(pass_id)

        form: dict[str, Any] = previous.to_dict()
        if previous.company_type == CompanyType.RICO:
            # company "RICO" is implied by the company type
            form.pop("company", None)
        for key, value in (overrides or {}).items():
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            form[key] = value

        issued = self.issue_draft(build_pass_draft(form), now=now)
        logger.info("Renewed pass %s as %s", previous.pass_id, issued.pass_id)
        return issued

    def validate(self, pass_id: Any, phone: Any = None) -> VisitorPass:
        visitor = self._find(pass_id, phone)
        if not visitor.is_active:
            raise InactivePassError("Pass is not active.")
        return visitor

    def mark_exit(self, pass_id: Any, phone: Any = None, *, now: Optional[datetime] = None) -> ExitResult:
        visitor = self._find(pass_id, phone)
        if visitor.status == PassStatus.COMPLETED:
            return ExitResult(visitor=visitor, already_completed=True)

        visitor = complete_pass(self._passes, visitor, now=now or now_local())
        logger.info("Marked exit for pass %s", visitor.pass_id)
        return ExitResult(visitor=visitor, already_completed=False)

    def delete(self, pass_id: Any, *, admin_password: Optional[str]) -> str:
        self.require_admin(admin_password)
        normalized = self._require_pass_id(pass_id)
        if not self._passes.delete_by_pass_id(normalized):
            raise NotFoundError("Pass not found.")
        logger.info("Deleted pass %s", normalized)
        return normalized

    def list_today(self, *, now: Optional[datetime] = None) -> Sequence[VisitorPass]:
        start, end = day_bounds((now or now_local()).date())
        return self._passes.list_by_date_between(start, end)

    def list_active(self, *, admin_password: Optional[str]) -> Sequence[VisitorPass]:
        self.require_admin(admin_password)
        return self._passes.list_active()

    def list_history(
        self,
        *,
        admin_password: Optional[str],
        range_days: Any = None,
        from_date: Any = None,
        to_date: Any = None,
        now: Optional[datetime] = None,
    ) -> HistoryResult:
        """Passes in an explicit date range, a trailing day window, or all of them.

        Explicit FROM/TO dates take precedence over `range_days`, which is
        clamped to [1, 3650].
        """
        self.require_admin(admin_password)

        days = parse_int(range_days)
        days = clamp(days, HISTORY_MIN_DAYS, HISTORY_MAX_DAYS) if days is not None else None
        from_raw = clean_text(from_date)
        to_raw = clean_text(to_date)

        start: Optional[datetime] = None
        end: Optional[datetime] = None
        if from_raw or to_raw:
            if not from_raw or not to_raw:
                raise ValidationError("Both FROM and TO dates are required.")
            try:
                start = day_bounds(parse_iso_date(from_raw))[0]
                end = day_bounds(parse_iso_date(to_raw))[1]
            except ValueError:
                raise ValidationError("Enter valid FROM and TO dates.")
            if start > end:
                raise ValidationError("FROM date cannot be after TO date.")
        elif days is not None:
            start, end = trailing_window((now or now_local()).date(), days)

        return HistoryResult(
            visitors=self._passes.list_history(start=start, end=end),
            range_days=days,
            from_date=from_raw or None,
            to_date=to_raw or None,
        )
