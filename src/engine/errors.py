# src/engine/errors.py
#
# Input errors raised before any conflict/cascade work starts.
# Detected conflicts are never errors, they come back as data.


class InvalidPlacementError(ValueError):
    """Candidate placement has no start or a non-positive duration."""


class SnapshotError(ValueError):
    """A job snapshot or placement payload could not be read."""


class JobNotFoundError(LookupError):
    """Placement refers to a job id that is not in the snapshot."""

    def __init__(self, job_id):
        super().__init__(f"Job {job_id} not found in snapshot")
        self.job_id = job_id
