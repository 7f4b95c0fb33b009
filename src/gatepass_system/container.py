from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .analytics.service import AnalyticsService
from .database.connection import DBConfig, DatabaseConnection
from .identifiers.generator import IdentifierGenerator
from .passes.mysql_pass_repository import MySQLPassRepository
from .passes.repository import PassRepository
from .passes.service import PassService
from .vip.mysql_vip_repository import MySQLVipCodeRepository
from .vip.repository import VipCodeRepository
from .vip.service import VipService
from .visitors.service import VisitorMatcher


@dataclass(frozen=True)
class Container:
    passes_repo: PassRepository
    vip_codes_repo: VipCodeRepository

    pass_service: PassService
    visitor_matcher: VisitorMatcher
    vip_service: VipService
    analytics_service: AnalyticsService

    conn: Optional[DatabaseConnection] = None


def assemble(
    passes_repo: PassRepository,
    vip_codes_repo: VipCodeRepository,
    *,
    admin_password: str,
    conn: Optional[DatabaseConnection] = None,
    id_generator: Optional[IdentifierGenerator] = None,
) -> Container:
    ids = id_generator or IdentifierGenerator()
    pass_service = PassService(passes_repo, admin_password=admin_password, id_generator=ids)

    return Container(
        passes_repo=passes_repo,
        vip_codes_repo=vip_codes_repo,
        pass_service=pass_service,
        visitor_matcher=VisitorMatcher(passes_repo),
        vip_service=VipService(
            passes_repo,
            vip_codes_repo,
            pass_service,
            admin_password=admin_password,
            id_generator=ids,
        ),
        analytics_service=AnalyticsService(passes_repo),
        conn=conn,
    )


def build_container(*, db_config: dict, admin_password: str) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return assemble(
        MySQLPassRepository(conn),
        MySQLVipCodeRepository(conn),
        admin_password=admin_password,
        conn=conn,
    )
