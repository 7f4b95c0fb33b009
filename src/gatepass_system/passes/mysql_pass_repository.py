from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import CompanyType, PassStatus, VisitorType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, escape_like, fetchall, fetchone
from .model import PassDraft, VisitorPass
from .repository import PassRepository

_COLUMNS = """
    visitor_id, pass_id, name, phone, visitor_type, company_type, company, rico_unit,
    visit_type, person_to_meet, department, id_proof_type, id_proof_number,
    carries_laptop, laptop_serial_number, is_vip, vip_access_id, remarks, qr_payload,
    status, date, time_in, time_out, created_at, updated_at
"""

_NEWEST_FIRST = "ORDER BY created_at DESC, visitor_id DESC"

_NAME_SCAN_LIMIT = 200


def _enum_or(enum_cls, value, default):
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _row_to_pass(r: Dict[str, Any]) -> VisitorPass:
    return VisitorPass(
        visitor_id=int(r["visitor_id"]),
        pass_id=r["pass_id"],
        name=r["name"],
        phone=r["phone"],
        visitor_type=_enum_or(VisitorType, r.get("visitor_type"), VisitorType.VISITOR),
        company_type=_enum_or(CompanyType, r.get("company_type") or "", CompanyType.NONE),
        company=r.get("company") or "",
        rico_unit=r.get("rico_unit") or "",
        visit_type=r.get("visit_type") or "",
        person_to_meet=r.get("person_to_meet") or "",
        department=r.get("department") or "",
        id_proof_type=r.get("id_proof_type") or "",
        id_proof_number=r.get("id_proof_number") or "",
        carries_laptop=bool(r.get("carries_laptop")),
        laptop_serial_number=r.get("laptop_serial_number") or "",
        is_vip=bool(r.get("is_vip")),
        vip_access_id=r.get("vip_access_id") or "",
        remarks=r.get("remarks") or "",
        qr_payload=r.get("qr_payload") or "",
        status=PassStatus.from_stored(r.get("status")),
        date=r["date"],
        time_in=r["time_in"],
        time_out=r.get("time_out"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLPassRepository(PassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, where: str, params: tuple, order: str = _NEWEST_FIRST) -> Optional[VisitorPass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM visitor_passes WHERE {where} {order} LIMIT 1", params)
            r = fetchone(cur)
            return _row_to_pass(r) if r else None

    def _select_many(self, where: str, params: tuple, order: str, limit: Optional[int] = None) -> Sequence[VisitorPass]:
        sql = f"SELECT {_COLUMNS} FROM visitor_passes WHERE {where} {order}"
        if limit is not None:
            sql += " LIMIT %s"
            params = params + (int(limit),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_pass(r) for r in fetchall(cur)]

    def count_keys_with_prefix(self, prefix: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS total FROM visitor_passes WHERE pass_id LIKE %s",
                (escape_like(prefix) + "%",),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def key_exists(self, key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM visitor_passes WHERE pass_id=%s LIMIT 1", (key,))
            return fetchone(cur) is not None

    def phone_exists(self, phone: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM visitor_passes WHERE phone=%s LIMIT 1", (phone,))
            return fetchone(cur) is not None

    def create(self, draft: PassDraft, *, pass_id: str, qr_payload: str, issued_at: datetime) -> VisitorPass:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO visitor_passes(
                    pass_id, name, phone, visitor_type, company_type, company, rico_unit,
                    visit_type, person_to_meet, department, id_proof_type, id_proof_number,
                    carries_laptop, laptop_serial_number, is_vip, vip_access_id, remarks,
                    qr_payload, status, date, time_in, time_out, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,NULL,%s)
                """,
                (
                    pass_id,
                    draft.name,
                    draft.phone,
                    draft.visitor_type.value,
                    draft.company_type.value,
                    draft.company,
                    draft.rico_unit,
                    draft.visit_type,
                    draft.person_to_meet,
                    draft.department,
                    draft.id_proof_type,
                    draft.id_proof_number,
                    int(draft.carries_laptop),
                    draft.laptop_serial_number,
                    int(draft.is_vip),
                    draft.vip_access_id,
                    draft.remarks,
                    qr_payload,
                    PassStatus.ACTIVE.value,
                    issued_at,
                    issued_at,
                    issued_at,
                ),
            )
            visitor_id = int(cur.lastrowid)

        return VisitorPass(
            visitor_id=visitor_id,
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

    def get_by_pass_id(self, pass_id: str, *, phone: Optional[str] = None) -> Optional[VisitorPass]:
        if phone:
            return self._select_one("pass_id=%s AND phone=%s", (pass_id, phone))
        return self._select_one("pass_id=%s", (pass_id,))

    def mark_completed(self, pass_id: str, *, time_out: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE visitor_passes
                SET status=%s, time_out=%s
                WHERE pass_id=%s
                """,
                (PassStatus.COMPLETED.value, time_out, pass_id),
            )
            return cur.rowcount > 0

    def delete_by_pass_id(self, pass_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM visitor_passes WHERE pass_id=%s", (pass_id,))
            return cur.rowcount > 0

    def find_latest(self, *, name: Optional[str] = None, phone: Optional[str] = None) -> Optional[VisitorPass]:
        clauses: list[str] = []
        params: list[object] = []
        if name:
            clauses.append("LOWER(name)=LOWER(%s)")
            params.append(name)
        if phone:
            clauses.append("phone=%s")
            params.append(phone)
        if not clauses:
            return None
        return self._select_one(" AND ".join(clauses), tuple(params))

    def list_names_with_prefix(self, prefix: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            # GROUP BY name follows the column collation, so case variants collapse.
            cur.execute(
                """
                SELECT name, MAX(created_at) AS last_seen
                FROM visitor_passes
                WHERE LOWER(name) LIKE %s
                GROUP BY name
                ORDER BY last_seen DESC
                LIMIT %s
                """,
                (escape_like(prefix.lower()) + "%", _NAME_SCAN_LIMIT),
            )
            return [r["name"] for r in fetchall(cur)]

    def list_by_date_between(self, start: datetime, end: datetime) -> Sequence[VisitorPass]:
        return self._select_many("date BETWEEN %s AND %s", (start, end), "ORDER BY time_in DESC")

    def list_active(self) -> Sequence[VisitorPass]:
        return self._select_many(
            "LOWER(status)=%s OR (time_out IS NULL AND LOWER(status)<>%s)",
            (PassStatus.ACTIVE.value, PassStatus.COMPLETED.value),
            "ORDER BY time_in ASC, created_at ASC",
        )

    def list_history(self, *, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Sequence[VisitorPass]:
        order = "ORDER BY time_in DESC, created_at DESC"
        if start is None or end is None:
            return self._select_many("1=1", (), order)
        return self._select_many(
            "(date BETWEEN %s AND %s) OR (time_in BETWEEN %s AND %s) OR (created_at BETWEEN %s AND %s)",
            (start, end, start, end, start, end),
            order,
        )

    def find_latest_vip(
        self,
        *,
        pass_id: Optional[str] = None,
        vip_access_id: Optional[str] = None,
        active_only: bool = False,
    ) -> Optional[VisitorPass]:
        clauses = ["is_vip=1"]
        params: list[object] = []
        if pass_id:
            clauses.append("pass_id=%s")
            params.append(pass_id)
        elif vip_access_id:
            clauses.append("vip_access_id=%s")
            params.append(vip_access_id)
        else:
            return None
        if active_only:
            clauses.append("status=%s")
            params.append(PassStatus.ACTIVE.value)
        return self._select_one(" AND ".join(clauses), tuple(params), "ORDER BY time_in DESC, visitor_id DESC")

    def list_vip(self, *, limit: int) -> Sequence[VisitorPass]:
        return self._select_many("is_vip=1", (), "ORDER BY time_in DESC", limit=limit)
