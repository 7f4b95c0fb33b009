"""Returning-visitor lookup and name autocomplete.

Matching is ranked: exact name + phone, then phone alone, then exact name
alone. Names compare case-insensitively; phones compare on digits only. When
several rows qualify, the most recently created one wins.
"""
from __future__ import annotations

from typing import Any

from ..common.validators import normalize_name, normalize_phone
from ..core.constants import CHECK_VISITOR_SUGGESTION_LIMIT, NAME_SUGGESTION_LIMIT
from ..core.exceptions import ValidationError
from ..passes.model import VisitorPass
from ..passes.repository import PassRepository
from .model import VisitorCheckResult

MSG_RENEW = "User already exists. Please renew gate pass."
MSG_RENEW_TODAY = "User exists. Renew pass for today?"
MSG_VERIFY_PHONE = "Name exists. Verify phone or renew pass."
MSG_VALIDATE = "User exists. Validate pass."
MSG_NEW = "New visitor. Create gate pass."
MSG_PICK_SUGGESTION = "No exact match. Select from suggestions or create gate pass."


class VisitorMatcher:
    def __init__(self, passes: PassRepository):
        self._passes = passes

    def find_suggestions(self, name_query: Any, limit: int = NAME_SUGGESTION_LIMIT) -> list[str]:
        """Distinct stored names starting with `name_query`, newest first."""
        query = normalize_name(name_query)
        if not query or limit <= 0:
            return []

        unique: list[str] = []
        seen: set[str] = set()
        for stored in self._passes.list_names_with_prefix(query):
            name = normalize_name(stored)
            if not name or name.lower() in seen:
                continue
            seen.add(name.lower())
            unique.append(name)
            if len(unique) >= limit:
                break
        return unique

    def check_visitor(self, name: Any = None, phone: Any = None) -> VisitorCheckResult:
        name = normalize_name(name)
        phone = normalize_phone(phone)
        if not name and not phone:
            raise ValidationError("Enter either name or phone number.")

        suggestions = self.find_suggestions(name, CHECK_VISITOR_SUGGESTION_LIMIT) if name else []
        no_match = MSG_PICK_SUGGESTION if suggestions else MSG_NEW

        def found(visitor: VisitorPass, *, phone_match: bool, message: str) -> VisitorCheckResult:
            return VisitorCheckResult(
                exists=True,
                phone_match=phone_match,
                message=message,
                visitor=visitor,
                suggestions=suggestions,
            )

        def missing(message: str) -> VisitorCheckResult:
            return VisitorCheckResult(exists=False, phone_match=False, message=message, suggestions=suggestions)

        if name and phone:
            hit = self._passes.find_latest(name=name, phone=phone)
            if hit:
                return found(hit, phone_match=True, message=MSG_RENEW)

            hit = self._passes.find_latest(phone=phone)
            if hit:
                return found(hit, phone_match=True, message=MSG_RENEW_TODAY)

            hit = self._passes.find_latest(name=name)
            if hit:
                return found(hit, phone_match=False, message=MSG_VERIFY_PHONE)

            return missing(no_match)

        if phone:
            hit = self._passes.find_latest(phone=phone)
            if hit:
                return found(hit, phone_match=True, message=MSG_VALIDATE)
            return missing(MSG_NEW)

        hit = self._passes.find_latest(name=name)
        if hit:
            return found(hit, phone_match=False, message=MSG_VALIDATE)
        return missing(no_match)
