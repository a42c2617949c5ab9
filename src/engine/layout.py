# layout.py
#
# Side-by-side layout for the calendar day view.
# Jobs that overlap are packed into columns so no two overlapping blocks
# share a column; each overlap cluster gets as many columns as the most
# jobs running at once inside it.

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List

from config.settings import (
    CALENDAR_END_HOUR,
    CALENDAR_START_HOUR,
    DEFAULT_START_HOUR,
    MIN_VISUAL_MINUTES,
)
from src.engine.models import Job, LayoutSlot
from src.timezone_utils import day_key, duration_minutes, minutes_since_midnight

logger = logging.getLogger(__name__)


def _clamp(value, low, high):
    return min(high, max(low, value))


def _visual_span(job: Job, window_start: int, window_minutes: int, min_minutes: int):
    """(start, end) in minutes from the top of the calendar window."""
    if job.start is None:
        start_of_day = DEFAULT_START_HOUR * 60
    else:
        start_of_day = minutes_since_midnight(job.start)

    start = _clamp(start_of_day - window_start, 0, window_minutes)
    end = _clamp(start + duration_minutes(job.effective_duration_hours), 0, window_minutes)
    # too short to click on, draw it taller (display only)
    return start, max(end, start + min_minutes)


def _clusters(spans):
    """Split start-sorted spans into runs connected by overlap."""
    clusters = []
    current = []
    cluster_end = None
    for span in spans:
        if current and span[1] < cluster_end:
            current.append(span)
            cluster_end = max(cluster_end, span[2])
            continue
        if current:
            clusters.append(current)
        current = [span]
        cluster_end = span[2]
    if current:
        clusters.append(current)
    return clusters


def layout_day(jobs: Iterable[Job],
               start_hour: int = CALENDAR_START_HOUR,
               end_hour: int = CALENDAR_END_HOUR,
               min_visual_minutes: int = MIN_VISUAL_MINUTES) -> List[LayoutSlot]:
    """
    Assign display columns to one day's jobs.

    Args:
        jobs: the day's jobs, any order
        start_hour: first hour row of the calendar (offsets are from here)
        end_hour: last hour row shown; blocks are clamped to the window
        min_visual_minutes: shortest block drawn

    Returns:
        one LayoutSlot per job, in start order
    """
    window_start = start_hour * 60
    window_minutes = (end_hour - start_hour + 1) * 60

    spans = []
    for job in jobs:
        start, end = _visual_span(job, window_start, window_minutes, min_visual_minutes)
        spans.append((job.id, start, end))
    spans.sort(key=lambda span: (span[1], span[0]))

    slots = []
    for cluster in _clusters(spans):
        column_ends = []
        assigned = []
        for job_id, start, end in cluster:
            for index, column_end in enumerate(column_ends):
                if column_end <= start:
                    column_ends[index] = end
                    break
            else:
                column_ends.append(end)
                index = len(column_ends) - 1
            assigned.append((job_id, start, end, index))

        column_count = len(column_ends)
        for job_id, start, end, index in assigned:
            slots.append(LayoutSlot(
                job_id=job_id,
                start_offset_minutes=start,
                visual_duration_minutes=end - start,
                column_index=index,
                column_count=column_count,
            ))

    logger.debug(f"Laid out {len(slots)} job(s)")
    return slots


def group_jobs_by_day(jobs: Iterable[Job]) -> Dict[str, List[Job]]:
    """Jobs with a start time, keyed by YYYY-MM-DD in date order."""
    by_day = {}
    for job in jobs:
        if job.start is None:
            continue
        by_day.setdefault(day_key(job.start), []).append(job)
    return OrderedDict(sorted(by_day.items()))


def layout_days(jobs: Iterable[Job], **kwargs) -> Dict[str, List[LayoutSlot]]:
    """layout_day() for every day present in the snapshot."""
    return OrderedDict(
        (key, layout_day(day_jobs, **kwargs))
        for key, day_jobs in group_jobs_by_day(jobs).items()
    )
