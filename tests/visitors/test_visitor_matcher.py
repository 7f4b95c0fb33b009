from __future__ import annotations

from datetime import datetime

import pytest

from gatepass_system.core.exceptions import ValidationError
from gatepass_system.visitors.service import VisitorMatcher


def test_name_and_phone_match_asks_to_renew(passes_repo):
    passes_repo.add(pass_id="PASS-20260130-0001", name="Asha Rao", phone="9876543210")

    result = VisitorMatcher(passes_repo).check_visitor("Asha Rao", "9876543210")

    assert result.exists is True
    assert result.phone_match is True
    assert result.message == "User already exists. Please renew gate pass."
    assert result.visitor.pass_id == "PASS-20260130-0001"


def test_name_only_match_is_case_insensitive(passes_repo):
    passes_repo.add(pass_id="PASS-20260130-0001", name="ASHA RAO", phone="111")

    result = VisitorMatcher(passes_repo).check_visitor("Asha Rao", "")

    assert result.exists is True
    assert result.phone_match is False


def test_unknown_name_in_empty_store_is_new_visitor(passes_repo):
    result = VisitorMatcher(passes_repo).check_visitor("Zzz", "")

    assert result.exists is False
    assert result.message == "New visitor. Create gate pass."
    assert result.suggestions == []


def test_requires_name_or_phone(passes_repo):
    with pytest.raises(ValidationError):
        VisitorMatcher(passes_repo).check_visitor("  ", "--")


def test_phone_match_beats_name_match_when_both_given(passes_repo):
    passes_repo.add(pass_id="PASS-1", name="Asha Rao", phone="111", created_at=datetime(2026, 1, 2))
    passes_repo.add(pass_id="PASS-2", name="Someone Else", phone="222", created_at=datetime(2026, 1, 1))

    result = VisitorMatcher(passes_repo).check_visitor("Asha Rao", "222")

    assert result.phone_match is True
    assert result.message == "User exists. Renew pass for today?"
    assert result.visitor.pass_id == "PASS-2"


def test_name_match_without_phone_match_asks_to_verify(passes_repo):
    passes_repo.add(pass_id="PASS-1", name="Asha Rao", phone="111")

    result = VisitorMatcher(passes_repo).check_visitor("asha rao", "999")

    assert result.exists is True
    assert result.phone_match is False
    assert result.message == "Name exists. Verify phone or renew pass."


def test_most_recent_record_wins_ties(passes_repo):
    passes_repo.add(pass_id="PASS-OLD", phone="555", created_at=datetime(2026, 1, 1))
    passes_repo.add(pass_id="PASS-NEW", phone="555", created_at=datetime(2026, 1, 20))

    result = VisitorMatcher(passes_repo).check_visitor(None, "555")

    assert result.visitor.pass_id == "PASS-NEW"
    assert result.message == "User exists. Validate pass."


def test_phone_is_compared_on_digits(passes_repo):
    passes_repo.add(pass_id="PASS-1", phone="9876543210")

    result = VisitorMatcher(passes_repo).check_visitor(None, "+98 7654-3210")

    assert result.exists is True


def test_no_match_with_suggestions_points_to_them(passes_repo):
    passes_repo.add(pass_id="PASS-1", name="Asha Rao", phone="111")

    result = VisitorMatcher(passes_repo).check_visitor("Asha", "")

    assert result.exists is False
    assert result.suggestions == ["Asha Rao"]
    assert result.message.startswith("No exact match.")


def test_suggestions_are_prefix_only_distinct_and_newest_first(passes_repo):
    passes_repo.add(pass_id="P1", name="Ravi Kumar", created_at=datetime(2026, 1, 1))
    passes_repo.add(pass_id="P2", name="ravi  kumar", created_at=datetime(2026, 1, 2))
    passes_repo.add(pass_id="P3", name="Ravina Shah", created_at=datetime(2026, 1, 3))
    passes_repo.add(pass_id="P4", name="Arav Ravi", created_at=datetime(2026, 1, 4))

    suggestions = VisitorMatcher(passes_repo).find_suggestions(" RAV ")

    assert suggestions == ["Ravina Shah", "ravi kumar"]


def test_suggestions_respect_limit(passes_repo):
    for i in range(12):
        passes_repo.add(pass_id=f"P{i}", name=f"Guest {i:02d}", created_at=datetime(2026, 1, 1 + i))

    assert len(VisitorMatcher(passes_repo).find_suggestions("guest")) == 10
    assert len(VisitorMatcher(passes_repo).find_suggestions("guest", 3)) == 3
