# src/webapp.py
#
# HTTP front end for the reschedule engine.
# Stateless: every request carries the job snapshot it should be checked
# against, nothing is stored and nothing is committed here.

import logging
import math

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from src.engine.cascade import DEFAULT_PRIMARY_REASON, plan_for_placement
from src.engine.conflicts import detect_conflicts
from src.engine.duration import MAX_DURATION_HOURS, resolve_duration
from src.engine.errors import InvalidPlacementError, JobNotFoundError, SnapshotError
from src.engine.layout import group_jobs_by_day, layout_day, layout_days
from src.engine.notifications import render_cascade_notifications
from src.engine.snapshot import (
    cascade_result_to_dict,
    conflict_to_dict,
    parse_jobs,
    parse_placement,
    resolution_to_dict,
    slot_to_dict,
)
from src.logging_config import setup_logging
from src.timezone_utils import day_key, now

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Crew reschedule engine")


async def read_payload(request: Request) -> dict:
    """Request body as a dict, 400 for anything else."""
    try:
        data = await request.json()
    except Exception as e:
        logger.warning(f"Rejected unreadable payload on {request.url.path}: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid JSON payload: {e}")
    if not data or not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Empty or invalid payload")
    return data


def bad_request(request: Request, error: Exception):
    logger.warning(f"Rejected payload on {request.url.path}: {error}")
    return HTTPException(status_code=400, detail=str(error))


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/duration/resolve")
async def resolve_duration_endpoint(request: Request):
    """
    Payload:
    {"originalDurationHours": 3, "originalCrewSize": 2, "newCrewSize": 3, "autoAdjust": true}
    """
    data = await read_payload(request)

    duration = data.get("originalDurationHours")
    if (isinstance(duration, bool) or not isinstance(duration, (int, float))
            or not math.isfinite(duration) or duration <= 0 or duration > MAX_DURATION_HOURS):
        raise bad_request(request, ValueError(
            f"originalDurationHours must be a positive number up to {MAX_DURATION_HOURS:g}"
        ))
    crew_sizes = []
    for key in ("originalCrewSize", "newCrewSize"):
        value = data.get(key, 1)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise bad_request(request, ValueError(f"{key} must be a finite number"))
        crew_sizes.append(value)
    auto_adjust = data.get("autoAdjust", True)
    if not isinstance(auto_adjust, bool):
        raise bad_request(request, ValueError("autoAdjust must be true or false"))

    resolution = resolve_duration(
        float(duration), crew_sizes[0], crew_sizes[1], auto_adjust=auto_adjust,
    )
    return JSONResponse(resolution_to_dict(resolution))


@app.post("/conflicts")
async def conflicts_endpoint(request: Request):
    """
    Payload: {"jobs": [...], "placement": {...}}
    Conflicts are returned as data; the caller decides to block or override.
    """
    data = await read_payload(request)
    try:
        jobs = parse_jobs(data.get("jobs"))
        placement = parse_placement(data.get("placement"))
        conflicts = detect_conflicts(placement, jobs)
    except (SnapshotError, InvalidPlacementError) as e:
        raise bad_request(request, e)

    return JSONResponse({
        "jobId": placement.job_id,
        "conflicts": [conflict_to_dict(c) for c in conflicts],
    })


@app.post("/reschedule/preview")
async def reschedule_preview(request: Request):
    """
    Payload:
    {
        "jobs": [{"id": "J1", "clientLabel": "Smith", "start": "2025-06-02T09:00", "durationHours": 2, "team": ["Maria"]}, ...],
        "placement": {"jobId": "J1", "newStart": "2025-06-02T11:00", "newDurationHours": 2, "newTeam": ["Maria"]},
        "reason": "client request",
        "includeNotifications": true
    }
    Nothing is applied; the result is a plan for the caller to confirm.
    """
    data = await read_payload(request)
    reason = str(data.get("reason") or "").strip()
    try:
        jobs = parse_jobs(data.get("jobs"))
        placement = parse_placement(data.get("placement"))
        result = plan_for_placement(placement, jobs, reason=reason or DEFAULT_PRIMARY_REASON)
    except (SnapshotError, InvalidPlacementError) as e:
        raise bad_request(request, e)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    body = cascade_result_to_dict(result)
    if data.get("includeNotifications"):
        body["notifications"] = render_cascade_notifications(result, reason or None)

    logger.info(
        f"Previewed move of job {placement.job_id}: "
        f"{len(result.downstream_changes)} downstream, {len(result.conflicts)} conflict(s)"
    )
    return JSONResponse(body)


@app.post("/layout")
async def layout_endpoint(request: Request):
    """
    Payload: {"jobs": [...], "date": "YYYY-MM-DD"}
    With a date, lays out that day (use "today" for the current date).
    Without one, lays out every day present in the snapshot.
    """
    data = await read_payload(request)
    try:
        jobs = parse_jobs(data.get("jobs"))
    except SnapshotError as e:
        raise bad_request(request, e)

    date = data.get("date")
    if date:
        date = day_key(now()) if date == "today" else str(date)
        slots = layout_day(group_jobs_by_day(jobs).get(date, []))
        return JSONResponse({"date": date, "slots": [slot_to_dict(s) for s in slots]})

    return JSONResponse({
        "days": {
            key: [slot_to_dict(s) for s in slots]
            for key, slots in layout_days(jobs).items()
        }
    })
