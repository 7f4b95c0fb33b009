from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import VipCodeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, escape_like, fetchone
from .model import VipAccessCode
from .repository import VipCodeRepository


def _row_to_code(r: Dict[str, Any]) -> VipAccessCode:
    status = (r.get("status") or "").strip().lower()
    return VipAccessCode(
        code_id=int(r["code_id"]),
        vip_access_id=r["vip_access_id"],
        label=r.get("label") or "",
        status=VipCodeStatus.ACTIVE if status == VipCodeStatus.ACTIVE.value else VipCodeStatus.INACTIVE,
        issue_count=int(r.get("issue_count") or 0),
        last_issued_pass_id=r.get("last_issued_pass_id") or "",
        last_issued_at=r.get("last_issued_at"),
        created_at=r.get("created_at"),
    )


class MySQLVipCodeRepository(VipCodeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def count_keys_with_prefix(self, prefix: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS total FROM vip_access_codes WHERE vip_access_id LIKE %s",
                (escape_like(prefix) + "%",),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def key_exists(self, key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM vip_access_codes WHERE vip_access_id=%s LIMIT 1", (key,))
            return fetchone(cur) is not None

    def create(self, *, vip_access_id: str, label: str, created_at: datetime) -> VipAccessCode:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO vip_access_codes(vip_access_id, label, status, issue_count, created_at)
                VALUES(%s,%s,%s,0,%s)
                """,
                (vip_access_id, label, VipCodeStatus.ACTIVE.value, created_at),
            )
            code_id = int(cur.lastrowid)
        return VipAccessCode(
            code_id=code_id,
            vip_access_id=vip_access_id,
            label=label,
            status=VipCodeStatus.ACTIVE,
            created_at=created_at,
        )

    def get_active(self, vip_access_id: str) -> Optional[VipAccessCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT code_id, vip_access_id, label, status, issue_count,
                       last_issued_pass_id, last_issued_at, created_at
                FROM vip_access_codes
                WHERE vip_access_id=%s AND status=%s
                """,
                (vip_access_id, VipCodeStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return _row_to_code(r) if r else None

    def record_issue(self, vip_access_id: str, *, pass_id: str, issued_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE vip_access_codes
                SET issue_count = issue_count + 1, last_issued_pass_id=%s, last_issued_at=%s
                WHERE vip_access_id=%s
                """,
                (pass_id, issued_at, vip_access_id),
            )
            return cur.rowcount > 0
