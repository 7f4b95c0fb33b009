from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from ..core.constants import DEPARTMENT_OPTIONS, RICO_UNITS
from ..core.enums import CompanyType, VisitorType

_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s+")


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_name(value: Any) -> str:
    """Trim and collapse inner whitespace."""
    return _WHITESPACE.sub(" ", clean_text(value))


def normalize_phone(value: Any) -> str:
    return _NON_DIGITS.sub("", clean_text(value))


def normalize_pass_id(value: Any) -> str:
    return clean_text(value).upper()


def _match_option(value: Any, options: Iterable[str]) -> str:
    wanted = clean_text(value).lower()
    for option in options:
        if option.lower() == wanted:
            return option
    return ""


def normalize_company_type(value: Any) -> CompanyType:
    matched = _match_option(value, (CompanyType.RICO.value, CompanyType.OTHER.value))
    return CompanyType(matched)


def normalize_rico_unit(value: Any) -> str:
    return _match_option(value, RICO_UNITS)


def normalize_department(value: Any) -> str:
    return _match_option(value, DEPARTMENT_OPTIONS)


def normalize_visitor_type(value: Any) -> VisitorType:
    matched = _match_option(value, [v.value for v in VisitorType])
    return VisitorType(matched) if matched else VisitorType.VISITOR


def parse_flag(value: Any) -> Optional[bool]:
    """Parse yes/no style form values. Unknown values give None."""
    if isinstance(value, bool):
        return value
    normalized = clean_text(value).lower()
    if normalized in {"yes", "true", "1"}:
        return True
    if normalized in {"no", "false", "0"}:
        return False
    return None


def parse_int(value: Any) -> Optional[int]:
    try:
        return int(clean_text(value))
    except ValueError:
        return None


def clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)
