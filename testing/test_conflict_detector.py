# testing/test_conflict_detector.py
"""
Tests for double-booking detection:
- TeamOverlap vs TimeOverlap classification
- Half-open intervals (back-to-back jobs are fine)
- Only same-day siblings are compared
- Bad placements are rejected before any checking
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.engine.conflicts import detect_conflicts, intervals_overlap
from src.engine.errors import InvalidPlacementError
from src.engine.models import CandidatePlacement, ConflictKind
from testing.mock_data import at, make_job


def placement(job_id, start, hours, team=()):
    return CandidatePlacement(job_id, start, hours, frozenset(team))


def test_shared_cleaner_is_team_overlap():
    """A(09:00, 2h, Maria) vs B(10:00, 1h, Maria) -> one TeamOverlap on B."""
    job_a = make_job("A", start=at(9), hours=2, team=["Maria"])
    job_b = make_job("B", start=at(10), hours=1, team=["Maria"])

    conflicts = detect_conflicts(placement("A", at(9), 2, ["Maria"]), [job_a, job_b])

    assert len(conflicts) == 1
    assert conflicts[0].other_job_id == "B"
    assert conflicts[0].kind is ConflictKind.TEAM_OVERLAP
    assert conflicts[0].shared_team == frozenset({"Maria"})
    assert conflicts[0].message == "Team conflict with Client B"


def test_disjoint_teams_is_time_overlap():
    job_b = make_job("B", start=at(10), hours=1, team=["Jose"])

    conflicts = detect_conflicts(placement("A", at(9), 2, ["Maria"]), [job_b])

    assert len(conflicts) == 1
    assert conflicts[0].kind is ConflictKind.TIME_OVERLAP
    assert conflicts[0].shared_team == frozenset()
    assert conflicts[0].message == "Time conflict with Client B"


def test_team_names_match_exactly():
    job_b = make_job("B", start=at(10), hours=1, team=["maria"])
    conflicts = detect_conflicts(placement("A", at(9), 2, ["Maria"]), [job_b])
    assert conflicts[0].kind is ConflictKind.TIME_OVERLAP


def test_back_to_back_jobs_do_not_conflict():
    before = make_job("B", start=at(7), hours=2, team=["Maria"])
    after = make_job("C", start=at(11), hours=1, team=["Maria"])
    conflicts = detect_conflicts(placement("A", at(9), 2, ["Maria"]), [before, after])
    assert conflicts == []


def test_moved_job_is_excluded():
    original = make_job("A", start=at(9), hours=2, team=["Maria"])
    conflicts = detect_conflicts(placement("A", at(10), 2, ["Maria"]), [original])
    assert conflicts == []


def test_explicit_exclude_id():
    other = make_job("B", start=at(9), hours=2)
    conflicts = detect_conflicts(placement("A", at(9), 2), [other], exclude_job_id="B")
    assert conflicts == []


def test_other_days_ignored():
    next_day = make_job("B", start=at(9) + timedelta(days=1), hours=2, team=["Maria"])
    conflicts = detect_conflicts(placement("A", at(9), 2, ["Maria"]), [next_day])
    assert conflicts == []


def test_unscheduled_siblings_ignored():
    unscheduled = make_job("B", start=None, hours=2, team=["Maria"])
    assert detect_conflicts(placement("A", at(9), 2, ["Maria"]), [unscheduled]) == []


def test_sibling_without_hours_uses_fallback_duration():
    # 08:00 + 3h fallback runs into a 10:30 placement
    sibling = make_job("B", start=at(8), hours=None)
    conflicts = detect_conflicts(placement("A", at(10, 30), 1), [sibling])
    assert [c.other_job_id for c in conflicts] == ["B"]


def test_all_conflicts_reported_in_start_order():
    siblings = [
        make_job("late", start=at(12), hours=1, team=["Ana"]),
        make_job("early", start=at(9), hours=1, team=["Maria"]),
        make_job("clear", start=at(15), hours=1, team=["Maria"]),
    ]
    conflicts = detect_conflicts(placement("A", at(9, 30), 3, ["Maria"]), siblings)
    assert [(c.other_job_id, c.kind) for c in conflicts] == [
        ("early", ConflictKind.TEAM_OVERLAP),
        ("late", ConflictKind.TIME_OVERLAP),
    ]


def test_siblings_not_mutated():
    siblings = [make_job("B", start=at(10), hours=1, team=["Maria"])]
    snapshot = list(siblings)
    detect_conflicts(placement("A", at(9), 2, ["Maria"]), siblings)
    assert siblings == snapshot


def test_missing_start_rejected():
    with pytest.raises(InvalidPlacementError):
        detect_conflicts(placement("A", None, 2), [])


@pytest.mark.parametrize("hours", [0, -1, None])
def test_non_positive_duration_rejected(hours):
    with pytest.raises(InvalidPlacementError):
        detect_conflicts(placement("A", at(9), hours), [])


def test_intervals_overlap_is_half_open():
    assert intervals_overlap(1, 3, 2, 4)
    assert not intervals_overlap(1, 3, 3, 4)
    assert intervals_overlap(1, 10, 2, 3)


@pytest.mark.parametrize("hours", [float("nan"), float("inf"), 25, 1e12])
def test_non_finite_or_oversized_duration_rejected(hours):
    with pytest.raises(InvalidPlacementError):
        detect_conflicts(placement("A", at(9), hours), [])


def test_timezone_aware_placement_compared_in_local_time():
    # 15:00 UTC is 09:00 in Regina
    aware = datetime(2025, 6, 2, 15, 0, tzinfo=timezone.utc)
    sibling = make_job("B", start=at(9, 30), hours=1, team=["Maria"])

    conflicts = detect_conflicts(placement("A", aware, 1, ["Maria"]), [sibling])

    assert [(c.other_job_id, c.kind) for c in conflicts] == [("B", ConflictKind.TEAM_OVERLAP)]
