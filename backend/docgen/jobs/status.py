from __future__ import annotations

from enum import Enum
from typing import FrozenSet


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES: FrozenSet[str] = frozenset({JobStatus.COMPLETED.value, JobStatus.FAILED.value})
IN_FLIGHT_STATUSES: FrozenSet[str] = frozenset({JobStatus.PENDING.value, JobStatus.PROCESSING.value})

_RANK = {
    JobStatus.PENDING.value: 0,
    JobStatus.PROCESSING.value: 1,
    JobStatus.COMPLETED.value: 2,
    JobStatus.FAILED.value: 2,
}


def status_rank(status: str) -> int:
    """Position of a status along pending < processing < completed/failed."""
    return _RANK[JobStatus(status).value]


def is_terminal(status: str) -> bool:
    return JobStatus(status).value in TERMINAL_STATUSES


def allowed_predecessors(status: str) -> FrozenSet[str]:
    """
    Stored statuses from which a job may move to `status`.

    Rules:
    - "pending" is only ever assigned at creation, so nothing may move back to it.
    - "processing" may be written over "pending" or re-asserted over "processing".
    - "completed"/"failed" may be written over any in-flight status.
    - Nothing leaves a terminal status.
    """
    target = JobStatus(status).value
    if target == JobStatus.PENDING.value:
        return frozenset()
    return IN_FLIGHT_STATUSES
