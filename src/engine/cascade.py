# cascade.py
#
# Cascade planning for a rescheduled job:
# - The day's crew works the jobs single file, so when a visit finishes
#   later than planned every job queued after it that day moves back by
#   the same number of minutes
# - Jobs only ever move later, never earlier
# - Other days are never touched
# - Conflicts are checked for the moved job's new placement only

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from src.engine.conflicts import detect_conflicts, validate_placement
from src.engine.errors import JobNotFoundError
from src.engine.models import CandidatePlacement, CascadeChange, CascadeResult, Job
from src.timezone_utils import (
    add_minutes,
    format_display_date,
    format_time,
    minutes_between,
    same_day,
    to_local,
)

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_REASON = "schedule change"


def _hours(value: float) -> str:
    return f"{value:g}h"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def downstream_jobs(job: Job, siblings: Iterable[Job]) -> List[Job]:
    """
    Jobs originally queued after `job` on its original day
    (start >= job's original end), in start order.
    """
    if job.start is None:
        return []
    original_end = job.end
    queued = [
        sibling for sibling in siblings
        if sibling.id != job.id
        and sibling.start is not None
        and same_day(sibling.start, job.start)
        and sibling.start >= original_end
    ]
    return sorted(queued, key=lambda sibling: (sibling.start, sibling.id))


def build_summary(primary: CascadeChange, downstream: List[CascadeChange],
                  conflict_count: int) -> str:
    """Plain-text description of the plan, one line per fact."""
    client = primary.client_label or primary.job_id
    new_when = f"{format_display_date(primary.new_start)} at {format_time(primary.new_start)}"

    if primary.original_start is None:
        lines = [f"{client} scheduled for {new_when}."]
    else:
        old_when = f"{format_display_date(primary.original_start)} at {format_time(primary.original_start)}"
        lines = [f"{client} moved from {old_when} to {new_when} ({primary.delta_minutes:+d} min)."]

    # a job with no recorded hours has nothing to compare against
    if (primary.original_duration_hours is not None
            and primary.original_duration_hours != primary.new_duration_hours):
        lines.append(
            f"Duration {_hours(primary.original_duration_hours)} -> {_hours(primary.new_duration_hours)}."
        )

    if downstream:
        delta = downstream[0].delta_minutes
        total = sum(change.delta_minutes for change in downstream)
        lines.append(
            f"{_plural(len(downstream), 'later job')} pushed back {delta} min each "
            f"({total} min total)."
        )

    if conflict_count:
        lines.append(f"{_plural(conflict_count, 'conflict')} at the new time.")

    return "\n".join(lines)


def _affected_clients(changes: List[CascadeChange]) -> List[str]:
    seen = []
    for change in changes:
        if change.client_label and change.client_label not in seen:
            seen.append(change.client_label)
    return seen


def plan_cascade(job: Job, new_start: datetime, new_duration_hours: float,
                 siblings: Iterable[Job], new_team: Optional[Iterable[str]] = None,
                 reason: str = DEFAULT_PRIMARY_REASON) -> CascadeResult:
    """
    Plan the knock-on effects of moving `job` to a new start/duration.

    Args:
        job: the job as it is today (original start, duration, team)
        new_start: accepted new start
        new_duration_hours: accepted new duration (must be > 0)
        siblings: snapshot of the other jobs (the moved job itself is skipped)
        new_team: crew for the new placement, defaults to the job's team
        reason: reason recorded on the primary change

    Returns:
        CascadeResult with the primary change, downstream shifts,
        conflicts at the new placement, summary and affected clients.

    Raises:
        InvalidPlacementError: new_start missing or duration <= 0
    """
    placement = CandidatePlacement(
        job_id=job.id,
        proposed_start=to_local(new_start) if new_start is not None else None,
        proposed_duration_hours=new_duration_hours,
        proposed_team=frozenset(job.team if new_team is None else new_team),
    )
    validate_placement(placement)
    siblings = list(siblings)

    if job.start is None:
        delta_minutes = 0
    else:
        delta_minutes = minutes_between(job.end, placement.proposed_end)

    primary = CascadeChange(
        job_id=job.id,
        client_label=job.client_label,
        original_start=job.start,
        new_start=placement.proposed_start,
        original_duration_hours=job.duration_hours,
        new_duration_hours=new_duration_hours,
        delta_minutes=delta_minutes,
        reason=reason,
    )

    downstream = []
    if delta_minutes > 0:
        primary_client = job.client_label or job.id
        for sibling in downstream_jobs(job, siblings):
            downstream.append(CascadeChange(
                job_id=sibling.id,
                client_label=sibling.client_label,
                original_start=sibling.start,
                new_start=add_minutes(sibling.start, delta_minutes),
                original_duration_hours=sibling.duration_hours,
                new_duration_hours=sibling.duration_hours,
                delta_minutes=delta_minutes,
                reason=f"shifted due to {primary_client}'s schedule change",
            ))

    conflicts = detect_conflicts(placement, siblings, exclude_job_id=job.id)

    logger.debug(
        f"Cascade for job {job.id}: delta {delta_minutes} min, "
        f"{len(downstream)} downstream, {len(conflicts)} conflict(s)"
    )

    return CascadeResult(
        primary_change=primary,
        downstream_changes=tuple(downstream),
        conflicts=tuple(conflicts),
        summary=build_summary(primary, downstream, len(conflicts)),
        affected_clients=tuple(_affected_clients([primary, *downstream])),
    )


def plan_for_placement(placement: CandidatePlacement, snapshot: Iterable[Job],
                       reason: str = DEFAULT_PRIMARY_REASON) -> CascadeResult:
    """
    plan_cascade() for a placement referring to a job inside the snapshot.

    Raises:
        InvalidPlacementError: bad start/duration
        JobNotFoundError: placement.job_id not in the snapshot
    """
    validate_placement(placement)
    snapshot = list(snapshot)
    job = next((item for item in snapshot if item.id == placement.job_id), None)
    if job is None:
        raise JobNotFoundError(placement.job_id)

    return plan_cascade(
        job,
        placement.proposed_start,
        placement.proposed_duration_hours,
        snapshot,
        new_team=placement.proposed_team,
        reason=reason,
    )
