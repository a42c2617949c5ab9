# src/engine/models.py
#
# Value types passed between the duration, conflict, cascade and layout
# steps. Everything is frozen: the engine reads a snapshot, it never edits it.

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from config.settings import DEFAULT_DURATION_HOURS
from src.timezone_utils import add_hours


@dataclass(frozen=True)
class Job:
    """
    One visit from the caller's snapshot.
    start and duration_hours may be missing on unscheduled jobs;
    duration falls back to DEFAULT_DURATION_HOURS for overlap/display only.
    """
    id: str
    client_label: str = ""
    start: Optional[datetime] = None
    duration_hours: Optional[float] = None
    team: FrozenSet[str] = frozenset()

    @property
    def effective_duration_hours(self) -> float:
        if self.duration_hours is None or self.duration_hours <= 0:
            return DEFAULT_DURATION_HOURS
        return self.duration_hours

    @property
    def end(self) -> Optional[datetime]:
        if self.start is None:
            return None
        return add_hours(self.start, self.effective_duration_hours)


@dataclass(frozen=True)
class CandidatePlacement:
    job_id: str
    proposed_start: Optional[datetime]
    proposed_duration_hours: Optional[float]
    proposed_team: FrozenSet[str] = frozenset()

    @property
    def proposed_end(self) -> datetime:
        return add_hours(self.proposed_start, self.proposed_duration_hours)


class ConflictKind(str, Enum):
    TIME_OVERLAP = "TimeOverlap"
    TEAM_OVERLAP = "TeamOverlap"


@dataclass(frozen=True)
class Conflict:
    other_job_id: str
    kind: ConflictKind
    other_client_label: str = ""
    shared_team: FrozenSet[str] = frozenset()

    @property
    def message(self) -> str:
        label = self.other_client_label or self.other_job_id
        if self.kind is ConflictKind.TEAM_OVERLAP:
            return f"Team conflict with {label}"
        return f"Time conflict with {label}"


@dataclass(frozen=True)
class CascadeChange:
    job_id: str
    client_label: str
    original_start: Optional[datetime]
    new_start: datetime
    # None when the job has no recorded hours
    original_duration_hours: Optional[float]
    new_duration_hours: Optional[float]
    delta_minutes: int
    reason: str = ""


@dataclass(frozen=True)
class CascadeResult:
    primary_change: CascadeChange
    downstream_changes: Tuple[CascadeChange, ...] = ()
    conflicts: Tuple[Conflict, ...] = ()
    summary: str = ""
    affected_clients: Tuple[str, ...] = ()

    @property
    def changes(self) -> List[CascadeChange]:
        """Primary change first, then downstream in start order."""
        return [self.primary_change, *self.downstream_changes]

    @property
    def has_cascade(self) -> bool:
        return len(self.downstream_changes) > 0


@dataclass(frozen=True)
class LayoutSlot:
    job_id: str
    start_offset_minutes: int
    visual_duration_minutes: int
    column_index: int
    column_count: int

    @property
    def left(self) -> float:
        return self.column_index / self.column_count

    @property
    def width(self) -> float:
        return 1 / self.column_count


@dataclass(frozen=True)
class DurationResolution:
    duration_hours: float
    crew_size: int
    labor_hours: float
