from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import PassDraft, VisitorPass


class PassRepository(Protocol):
    """Repository interface for visitor passes.

    "Latest" lookups return the most recently created row; ties on
    created_at go to the row inserted last.
    """

    # Identifier lookups (pass_id is the unique key)
    def count_keys_with_prefix(self, prefix: str) -> int:
        raise NotImplementedError

    def key_exists(self, key: str) -> bool:
        raise NotImplementedError

    def phone_exists(self, phone: str) -> bool:
        raise NotImplementedError

    def create(self, draft: PassDraft, *, pass_id: str, qr_payload: str, issued_at: datetime) -> VisitorPass:
        """Insert an active pass. Raises DuplicateKeyError if pass_id is taken."""
        raise NotImplementedError

    def get_by_pass_id(self, pass_id: str, *, phone: Optional[str] = None) -> Optional[VisitorPass]:
        raise NotImplementedError

    def mark_completed(self, pass_id: str, *, time_out: datetime) -> bool:
        raise NotImplementedError

    def delete_by_pass_id(self, pass_id: str) -> bool:
        raise NotImplementedError

    # Visitor matching
    def find_latest(self, *, name: Optional[str] = None, phone: Optional[str] = None) -> Optional[VisitorPass]:
        """Exact case-insensitive name and/or exact phone match."""
        raise NotImplementedError

    def list_names_with_prefix(self, prefix: str) -> Sequence[str]:
        """Names starting with `prefix` (case-insensitive), newest first."""
        raise NotImplementedError

    # Listings
    def list_by_date_between(self, start: datetime, end: datetime) -> Sequence[VisitorPass]:
        """Passes whose `date` is within [start, end], newest time_in first."""
        raise NotImplementedError

    def list_active(self) -> Sequence[VisitorPass]:
        """Active passes (tolerant of legacy status values), oldest time_in first."""
        raise NotImplementedError

    def list_history(self, *, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Sequence[VisitorPass]:
        """Passes whose date, time_in or created_at is within the window, newest first."""
        raise NotImplementedError

    # VIP visits
    def find_latest_vip(
        self,
        *,
        pass_id: Optional[str] = None,
        vip_access_id: Optional[str] = None,
        active_only: bool = False,
    ) -> Optional[VisitorPass]:
        raise NotImplementedError

    def list_vip(self, *, limit: int) -> Sequence[VisitorPass]:
        raise NotImplementedError
