# snapshot.py
#
# Converts JSON payloads into engine types and results back into JSON.
#
# Job snapshot:  {"id", "clientLabel", "start"?, "durationHours"?, "team": [..]}
# Placement:     {"jobId", "newStart", "newDurationHours", "newTeam": [..]}
#
# Older exports name these "client", "scheduledAt"/"date", "hours" and
# "cleaningTeam"; both spellings are accepted on the way in.

import math
from typing import List, Optional

from src.engine.duration import MAX_DURATION_HOURS
from src.engine.errors import SnapshotError
from src.engine.models import (
    CandidatePlacement,
    CascadeChange,
    CascadeResult,
    Conflict,
    DurationResolution,
    Job,
    LayoutSlot,
)
from src.timezone_utils import parse_job_start


def _first(data: dict, *keys):
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _parse_start(value, what: str):
    try:
        return parse_job_start(value)
    except (TypeError, ValueError):
        raise SnapshotError(f"{what}: invalid start time {value!r}")


def _parse_hours(value, what: str) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise SnapshotError(f"{what}: duration must be a number, got {value!r}")
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise SnapshotError(f"{what}: duration must be a number, got {value!r}")
    if not math.isfinite(hours) or hours > MAX_DURATION_HOURS:
        raise SnapshotError(
            f"{what}: duration must be a finite number of hours up to {MAX_DURATION_HOURS:g}, got {value!r}"
        )
    return hours


def _parse_team(value, what: str) -> frozenset:
    if value is None:
        return frozenset()
    if not isinstance(value, (list, tuple)):
        raise SnapshotError(f"{what}: team must be a list of names")
    # names are matched exactly after trimming, blanks dropped
    return frozenset(
        member.strip() for member in value
        if isinstance(member, str) and member.strip()
    )


def parse_job(data: dict) -> Job:
    if not isinstance(data, dict):
        raise SnapshotError("Each job must be an object")
    job_id = data.get("id")
    if job_id is None or str(job_id).strip() == "":
        raise SnapshotError("Job is missing an id")
    job_id = str(job_id)
    what = f"Job {job_id}"

    return Job(
        id=job_id,
        client_label=str(_first(data, "clientLabel", "client") or ""),
        start=_parse_start(_first(data, "start", "scheduledAt", "date"), what),
        duration_hours=_parse_hours(_first(data, "durationHours", "hours"), what),
        team=_parse_team(_first(data, "team", "cleaningTeam"), what),
    )


def parse_jobs(items) -> List[Job]:
    """Parse a job snapshot list. Raises SnapshotError on bad or duplicate entries."""
    if items is None:
        return []
    if not isinstance(items, list):
        raise SnapshotError("jobs must be a list")
    jobs = [parse_job(item) for item in items]

    seen = set()
    for job in jobs:
        if job.id in seen:
            raise SnapshotError(f"Duplicate job id {job.id} in snapshot")
        seen.add(job.id)
    return jobs


def parse_placement(data: dict) -> CandidatePlacement:
    """
    Parse a candidate placement. Start/duration are only type-checked here;
    missing or non-positive values are rejected by validate_placement().
    """
    if not isinstance(data, dict):
        raise SnapshotError("placement must be an object")
    job_id = data.get("jobId")
    if job_id is None or str(job_id).strip() == "":
        raise SnapshotError("placement is missing jobId")
    what = f"Placement for job {job_id}"

    return CandidatePlacement(
        job_id=str(job_id),
        proposed_start=_parse_start(data.get("newStart"), what),
        proposed_duration_hours=_parse_hours(data.get("newDurationHours"), what),
        proposed_team=_parse_team(data.get("newTeam"), what),
    )


# ------------------
# results -> JSON
# ------------------

def _iso(value):
    return value.isoformat() if value is not None else None


def conflict_to_dict(conflict: Conflict) -> dict:
    return {
        "otherJobId": conflict.other_job_id,
        "kind": conflict.kind.value,
        "otherClientLabel": conflict.other_client_label,
        "sharedTeam": sorted(conflict.shared_team),
        "message": conflict.message,
    }


def change_to_dict(change: CascadeChange) -> dict:
    return {
        "jobId": change.job_id,
        "clientLabel": change.client_label,
        "originalStart": _iso(change.original_start),
        "newStart": _iso(change.new_start),
        "originalDurationHours": change.original_duration_hours,
        "newDurationHours": change.new_duration_hours,
        "deltaMinutes": change.delta_minutes,
        "reason": change.reason,
    }


def cascade_result_to_dict(result: CascadeResult) -> dict:
    return {
        "primaryChange": change_to_dict(result.primary_change),
        "downstreamChanges": [change_to_dict(c) for c in result.downstream_changes],
        "conflicts": [conflict_to_dict(c) for c in result.conflicts],
        "summary": result.summary,
        "affectedClients": list(result.affected_clients),
    }


def slot_to_dict(slot: LayoutSlot) -> dict:
    return {
        "jobId": slot.job_id,
        "startOffsetMinutes": slot.start_offset_minutes,
        "visualDurationMinutes": slot.visual_duration_minutes,
        "columnIndex": slot.column_index,
        "columnCount": slot.column_count,
        "left": slot.left,
        "width": slot.width,
    }


def resolution_to_dict(resolution: DurationResolution) -> dict:
    return {
        "durationHours": resolution.duration_hours,
        "crewSize": resolution.crew_size,
        "laborHours": resolution.labor_hours,
    }
