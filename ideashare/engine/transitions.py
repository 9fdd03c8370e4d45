"""
ideashare.engine.transitions — Explicit State Machines
========================================================

Three small state machines that used to be implied by row presence or by
ad-hoc field checks:

- **Like existence**: ``UNLIKED ⇄ LIKED`` (toggle).
- **Notification read state**: ``UNREAD → READ``, ``READ → READ`` is a
  no-op.
- **Milestone status**: any status may move to any other; entering
  ``completed`` stamps ``completed_at`` and leaving it clears the stamp.

Everything here is pure; services look up the transition and then write.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime

from ideashare.database.models import MilestoneStatus
from ideashare.errors import ValidationError

__all__ = [
    "LIKE_TRANSITIONS",
    "MILESTONE_TRANSITIONS",
    "READ_TRANSITIONS",
    "LikeState",
    "MilestoneChange",
    "ReadState",
    "milestone_change",
    "next_like_state",
    "next_read_state",
]


# ---------------------------------------------------------------------------
# Like toggle
# ---------------------------------------------------------------------------
class LikeState(enum.StrEnum):
    UNLIKED = "unliked"
    LIKED = "liked"


LIKE_TRANSITIONS: dict[LikeState, LikeState] = {
    LikeState.UNLIKED: LikeState.LIKED,
    LikeState.LIKED: LikeState.UNLIKED,
}


def next_like_state(current: LikeState) -> LikeState:
    return LIKE_TRANSITIONS[current]


# ---------------------------------------------------------------------------
# Notification read state
# ---------------------------------------------------------------------------
class ReadState(enum.StrEnum):
    UNREAD = "unread"
    READ = "read"

    @classmethod
    def of(cls, is_read: bool) -> ReadState:
        return cls.READ if is_read else cls.UNREAD


# Only one event exists ("mark read"), so the table is keyed by state alone
READ_TRANSITIONS: dict[ReadState, ReadState] = {
    ReadState.UNREAD: ReadState.READ,
    ReadState.READ: ReadState.READ,
}


def next_read_state(current: ReadState) -> ReadState:
    return READ_TRANSITIONS[current]


# ---------------------------------------------------------------------------
# Milestone status
# ---------------------------------------------------------------------------
MILESTONE_TRANSITIONS: dict[MilestoneStatus, frozenset[MilestoneStatus]] = {
    status: frozenset(MilestoneStatus) - {status} for status in MilestoneStatus
}


@dataclass(frozen=True, slots=True)
class MilestoneChange:
    """Outcome of a status change request."""

    status: MilestoneStatus
    completed_at: datetime | None
    changed: bool


def milestone_change(
    current: str,
    target: str,
    *,
    completed_at: datetime | None,
    now: datetime,
) -> MilestoneChange:
    """Resolve a status change against :data:`MILESTONE_TRANSITIONS`.

    Re-applying the current status is a no-op that keeps ``completed_at``.
    Unknown status names raise :class:`ValidationError`.
    """
    try:
        source = MilestoneStatus(current)
        dest = MilestoneStatus(target)
    except ValueError as exc:
        raise ValidationError(f"Unknown milestone status: {exc}") from exc

    if source == dest:
        return MilestoneChange(status=source, completed_at=completed_at, changed=False)

    if dest not in MILESTONE_TRANSITIONS[source]:
        raise ValidationError(f"Cannot move milestone from {source} to {dest}")

    stamp = now if dest == MilestoneStatus.COMPLETED else None
    return MilestoneChange(status=dest, completed_at=stamp, changed=True)
