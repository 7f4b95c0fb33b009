from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import VipAccessCode


class VipCodeRepository(Protocol):
    def count_keys_with_prefix(self, prefix: str) -> int:
        raise NotImplementedError

    def key_exists(self, key: str) -> bool:
        raise NotImplementedError

    def create(self, *, vip_access_id: str, label: str, created_at: datetime) -> VipAccessCode:
        """Insert an active code. Raises DuplicateKeyError if the id is taken."""
        raise NotImplementedError

    def get_active(self, vip_access_id: str) -> Optional[VipAccessCode]:
        raise NotImplementedError

    def record_issue(self, vip_access_id: str, *, pass_id: str, issued_at: datetime) -> bool:
        """Atomically bump issue_count by one and stamp the last issued pass."""
        raise NotImplementedError
