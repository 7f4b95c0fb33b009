from __future__ import annotations

import random
from datetime import datetime

import pytest

from gatepass_system.core.exceptions import DuplicateKeyError
from gatepass_system.identifiers.generator import IdentifierGenerator, format_id, sequence_of


class KeySet:
    def __init__(self, keys=()):
        self.keys = set(keys)

    def count_keys_with_prefix(self, prefix: str) -> int:
        return sum(1 for k in self.keys if k.startswith(prefix))

    def key_exists(self, key: str) -> bool:
        return key in self.keys


class Phones:
    def __init__(self, taken=(), always_taken=False):
        self.taken = set(taken)
        self.always_taken = always_taken
        self.checks = 0

    def phone_exists(self, phone: str) -> bool:
        self.checks += 1
        return self.always_taken or phone in self.taken


NOW = datetime(2026, 1, 31, 9, 0)


def test_first_id_of_the_day_starts_at_one():
    assert IdentifierGenerator().next_id(KeySet(), "PASS", now=NOW) == "PASS-20260131-0001"


def test_sequence_is_scoped_to_prefix_and_date():
    keys = KeySet({"PASS-20260130-0001", "PASS-20260130-0002", "VIP-20260131-0001"})
    assert IdentifierGenerator().next_id(keys, "PASS", now=NOW) == "PASS-20260131-0001"


def test_probe_skips_ids_left_behind_by_a_gap():
    # Count says 2 rows, but 0003 is taken, so 0003 must be skipped.
    keys = KeySet({"PASS-20260131-0001", "PASS-20260131-0003"})
    assert IdentifierGenerator().next_id(keys, "PASS", now=NOW) == "PASS-20260131-0004"


def test_repeated_allocation_strictly_increases():
    keys = KeySet()
    gen = IdentifierGenerator()
    seen = []
    for _ in range(5):
        new_id = gen.next_id(keys, "PASS", now=NOW)
        assert new_id not in keys.keys
        keys.keys.add(new_id)
        seen.append(sequence_of(new_id))
    assert seen == [1, 2, 3, 4, 5]


def test_sequence_past_9999_renders_wider():
    assert format_id("PASS", "20260131", 10000) == "PASS-20260131-10000"


def test_insert_retries_when_id_taken_concurrently():
    keys = KeySet()
    attempts = []

    def insert(candidate):
        attempts.append(candidate)
        if len(attempts) == 1:
            # Another writer grabbed this id between check and insert.
            keys.keys.add(candidate)
            raise DuplicateKeyError(candidate)
        keys.keys.add(candidate)
        return candidate

    result = IdentifierGenerator().insert_with_next_id(keys, "PASS", insert, now=NOW)

    assert attempts == ["PASS-20260131-0001", "PASS-20260131-0002"]
    assert result == "PASS-20260131-0002"


def test_insert_gives_up_after_max_attempts():
    def insert(candidate):
        raise DuplicateKeyError(candidate)

    with pytest.raises(RuntimeError):
        IdentifierGenerator().insert_with_next_id(KeySet(), "PASS", insert, now=NOW, max_attempts=3)


def test_synthetic_phone_is_ten_digits_starting_with_nine():
    phone = IdentifierGenerator(rng=random.Random(7)).synthetic_phone(Phones())
    assert len(phone) == 10
    assert phone.startswith("9")
    assert phone.isdigit()


def test_synthetic_phone_falls_back_to_clock_after_collisions():
    phones = Phones(always_taken=True)
    gen = IdentifierGenerator(rng=random.Random(1), clock=lambda: 1769850000.123456)

    phone = gen.synthetic_phone(phones, attempts=30)

    assert phones.checks == 30
    assert phone == "9" + str(int(1769850000.123456 * 1000))[-9:]
