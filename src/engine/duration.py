# duration.py
#
#   Recalculates a job's length when the crew changes size.
#   Labor-hours (duration x crew) is treated as fixed: 2 cleaners for 3h
#   becomes 3 cleaners for 2h, rounded to the nearest half hour.

import logging
import math
from typing import Iterable

from src.engine.models import DurationResolution, Job
from src.timezone_utils import round_to_nearest_half

logger = logging.getLogger(__name__)

MIN_DURATION_HOURS = 0.5
# longest single visit a placement or snapshot may carry
MAX_DURATION_HOURS = 24.0


def clamp_crew_size(crew_size) -> int:
    """Crew sizes below 1 are treated as 1 (no error). Halves round up."""
    return max(1, int(math.floor((crew_size or 0) + 0.5)))


def crew_size_for(team: Iterable[str]) -> int:
    """Number of workers on a team, 1 for an empty team."""
    return len(set(team)) or 1


def normalize_duration(hours: float) -> float:
    """Snap a manually entered duration to the nearest half hour (min 0.5h)."""
    return max(MIN_DURATION_HOURS, round_to_nearest_half(hours))


def resolve_duration(original_duration_hours: float, original_crew_size: int,
                     new_crew_size: int, auto_adjust: bool = True) -> DurationResolution:
    """
    Work out the new job length for a new crew size.

    Args:
        original_duration_hours: current job length
        original_crew_size: crew that length was planned for
        new_crew_size: crew going out instead
        auto_adjust: when False the duration is kept and only labor-hours change

    Returns:
        DurationResolution(duration_hours, crew_size, labor_hours)
    """
    original_crew = clamp_crew_size(original_crew_size)
    new_crew = clamp_crew_size(new_crew_size)

    if not auto_adjust:
        return DurationResolution(
            duration_hours=original_duration_hours,
            crew_size=new_crew,
            labor_hours=original_duration_hours * new_crew,
        )

    labor_hours = original_duration_hours * original_crew
    new_duration = max(MIN_DURATION_HOURS, round_to_nearest_half(labor_hours / new_crew))

    logger.debug(
        f"Crew {original_crew} -> {new_crew}: {labor_hours} labor-hours, "
        f"{original_duration_hours}h -> {new_duration}h"
    )
    return DurationResolution(
        duration_hours=new_duration,
        crew_size=new_crew,
        labor_hours=new_duration * new_crew,
    )


def resolve_for_team_change(job: Job, new_team: Iterable[str],
                            auto_adjust: bool = True) -> DurationResolution:
    """resolve_duration() using the job's own duration and team as the baseline."""
    return resolve_duration(
        job.effective_duration_hours,
        crew_size_for(job.team),
        crew_size_for(new_team),
        auto_adjust=auto_adjust,
    )
