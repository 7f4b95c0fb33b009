"""Date-scoped sequential identifiers.

Ids look like ``PASS-20260131-0001``: prefix, local calendar date and a
sequence scoped to (prefix, date). The sequence is padded to four digits but
is not capped; past 9999 it simply renders wider.

Allocation is check-then-use: the next free id is computed from the store and
then inserted by the caller. Two concurrent callers can compute the same id
between the check and the insert, so callers insert through
:func:`insert_with_next_id`, which relies on the store's unique key and moves
to the next sequence when the insert is rejected.
"""
from __future__ import annotations

import logging
import random
import time
from datetime import datetime
from typing import Callable, Optional, Protocol, TypeVar

from ..common.datetime_utils import date_stamp, now_local
from ..core.constants import ID_INSERT_MAX_ATTEMPTS, VIP_PHONE_ATTEMPTS
from ..core.exceptions import DuplicateKeyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyLookup(Protocol):
    """Read side of a collection that owns a unique, prefixed key."""

    def count_keys_with_prefix(self, prefix: str) -> int:
        raise NotImplementedError

    def key_exists(self, key: str) -> bool:
        raise NotImplementedError


class PhoneLookup(Protocol):
    def phone_exists(self, phone: str) -> bool:
        raise NotImplementedError


def format_id(prefix: str, day_stamp: str, sequence: int) -> str:
    return f"{prefix}-{day_stamp}-{sequence:04d}"


class IdentifierGenerator:
    def __init__(
        self,
        *,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._rng = rng or random.Random()
        self._clock = clock

    def next_id(self, lookup: KeyLookup, prefix: str, *, now: Optional[datetime] = None, start_after: int = 0) -> str:
        """Return the first unused id for `prefix` on the current local date.

        `start_after` skips sequences already known to be taken (used when an
        insert lost a race for the id returned by a previous call).
        """
        stamp = date_stamp((now or now_local()).date())
        key_prefix = f"{prefix}-{stamp}-"
        sequence = max(lookup.count_keys_with_prefix(key_prefix) + 1, start_after + 1)

        while True:
            candidate = format_id(prefix, stamp, sequence)
            if not lookup.key_exists(candidate):
                return candidate
            sequence += 1

    def insert_with_next_id(
        self,
        lookup: KeyLookup,
        prefix: str,
        insert: Callable[[str], T],
        *,
        now: Optional[datetime] = None,
        max_attempts: int = ID_INSERT_MAX_ATTEMPTS,
    ) -> T:
        """Allocate an id and run `insert(id)`, retrying on unique-key clashes."""
        last_sequence = 0
        for attempt in range(1, max_attempts + 1):
            candidate = self.next_id(lookup, prefix, now=now, start_after=last_sequence)
            try:
                return insert(candidate)
            except DuplicateKeyError:
                last_sequence = sequence_of(candidate)
                logger.warning("Id %s taken concurrently (attempt %d), retrying", candidate, attempt)

        raise RuntimeError(f"Could not allocate a unique {prefix} id after {max_attempts} attempts")

    def synthetic_phone(self, lookup: PhoneLookup, *, attempts: int = VIP_PHONE_ATTEMPTS) -> str:
        """Random 10-digit phone starting with 9 for VIP auto entries.

        After `attempts` collisions it falls back to a clock-derived value that
        is not checked again, so uniqueness on that path is best-effort only.
        """
        for _ in range(attempts):
            phone = f"9{self._rng.randint(100000000, 999999999)}"
            if not lookup.phone_exists(phone):
                return phone

        fallback = f"9{str(int(self._clock() * 1000))[-9:]}"
        logger.warning("Synthetic phone retries exhausted, using clock fallback %s", fallback)
        return fallback


def sequence_of(identifier: str) -> int:
    return int(identifier.rsplit("-", 1)[-1])
