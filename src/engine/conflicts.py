# conflicts.py
#
# Double-booking check for a proposed placement:
# - Only jobs on the same calendar day are compared
# - Intervals are half-open, so back-to-back jobs never clash
# - A shared crew member makes it a TeamOverlap, otherwise a TimeOverlap
# The caller decides whether to block, override or pick another time.

import logging
import math
from typing import Iterable, List, Optional

from src.engine.duration import MAX_DURATION_HOURS
from src.engine.errors import InvalidPlacementError
from src.engine.models import CandidatePlacement, Conflict, ConflictKind, Job
from src.timezone_utils import add_hours, same_day, to_local

logger = logging.getLogger(__name__)


def validate_placement(placement: CandidatePlacement):
    """
    Reject placements that cannot be checked.
    Raises:
        InvalidPlacementError: missing start, or duration missing, not finite,
            <= 0 or longer than MAX_DURATION_HOURS
    """
    if placement.proposed_start is None:
        raise InvalidPlacementError(f"Placement for job {placement.job_id} has no start time")
    hours = placement.proposed_duration_hours
    if hours is None or not math.isfinite(hours) or hours <= 0:
        raise InvalidPlacementError(
            f"Placement for job {placement.job_id} needs a positive duration, got {hours}"
        )
    if hours > MAX_DURATION_HOURS:
        raise InvalidPlacementError(
            f"Placement for job {placement.job_id} is longer than {MAX_DURATION_HOURS:g}h"
        )


def intervals_overlap(start_a, end_a, start_b, end_b) -> bool:
    return start_a < end_b and start_b < end_a


def detect_conflicts(placement: CandidatePlacement, siblings: Iterable[Job],
                     exclude_job_id: Optional[str] = None) -> List[Conflict]:
    """
    Find every sibling job the placement would overlap.

    Args:
        placement: proposed start/duration/team
        siblings: snapshot of jobs to compare against
        exclude_job_id: the job being moved (defaults to placement.job_id)

    Returns:
        list of Conflict, ordered by sibling start time (empty when clear)
    """
    validate_placement(placement)
    if exclude_job_id is None:
        exclude_job_id = placement.job_id

    start = to_local(placement.proposed_start)
    end = add_hours(start, placement.proposed_duration_hours)
    team = frozenset(placement.proposed_team)

    overlapping = []
    for sibling in siblings:
        if sibling.id == exclude_job_id or sibling.start is None:
            continue
        if not same_day(sibling.start, start):
            continue
        if not intervals_overlap(start, end, sibling.start, sibling.end):
            continue
        overlapping.append(sibling)

    overlapping.sort(key=lambda job: (job.start, job.id))

    conflicts = []
    for sibling in overlapping:
        shared = team & sibling.team
        kind = ConflictKind.TEAM_OVERLAP if shared else ConflictKind.TIME_OVERLAP
        conflicts.append(Conflict(
            other_job_id=sibling.id,
            kind=kind,
            other_client_label=sibling.client_label,
            shared_team=shared,
        ))

    if conflicts:
        logger.debug(f"Job {placement.job_id} at {start.isoformat()}: {len(conflicts)} conflict(s)")
    return conflicts
