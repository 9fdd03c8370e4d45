"""
ideashare.engine.actions — Engagement Action Catalogue
========================================================

Point deltas and notification wording per engagement action, plus the
:class:`SideEffectStep` envelope the orchestrator queues in the outbox.

The orchestrator decides *who* gets points; this table only says *how
many*.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from ideashare.database.models import ActionKind, NotificationType, SideEffectKind

__all__ = [
    "ACTION_POINTS",
    "SideEffectStep",
    "award_step",
    "notify_step",
    "render_message",
]

# ---------------------------------------------------------------------------
# Points per action
# ---------------------------------------------------------------------------
ACTION_POINTS: dict[ActionKind, int] = {
    ActionKind.LIKE: 2,      # to the idea owner
    ActionKind.COMMENT: 5,   # to the commenter
    ActionKind.FOLLOW: 10,   # to the followed user
    ActionKind.SHARE: 3,     # to the idea owner
}

# ---------------------------------------------------------------------------
# Notification wording
# ---------------------------------------------------------------------------
MESSAGE_TEMPLATES: dict[NotificationType, str] = {
    NotificationType.LIKE: '{sender} liked your idea "{title}"',
    NotificationType.COMMENT: '{sender} commented on your idea "{title}"',
    NotificationType.FOLLOW: "{sender} started following you",
}


def render_message(type_: NotificationType, *, sender: str, title: str = "") -> str:
    return MESSAGE_TEMPLATES[type_].format(sender=sender, title=title)


# ---------------------------------------------------------------------------
# SideEffectStep: one queued step of a saga
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class SideEffectStep:
    """A deferred effect.  ``payload`` must be JSON-serializable."""

    kind: SideEffectKind
    payload: dict = field(default_factory=dict)


def award_step(user_id: uuid.UUID, action: ActionKind) -> SideEffectStep:
    return SideEffectStep(
        kind=SideEffectKind.AWARD_POINTS,
        payload={"user_id": str(user_id), "delta": ACTION_POINTS[action]},
    )


def notify_step(
    *,
    user_id: uuid.UUID,
    type_: NotificationType,
    message: str,
    sender_id: uuid.UUID | None = None,
    idea_id: uuid.UUID | None = None,
    comment_id: uuid.UUID | None = None,
) -> SideEffectStep:
    def _s(value: uuid.UUID | None) -> str | None:
        return str(value) if value is not None else None

    return SideEffectStep(
        kind=SideEffectKind.NOTIFY,
        payload={
            "user_id": str(user_id),
            "type": type_.value,
            "message": message,
            "sender_id": _s(sender_id),
            "idea_id": _s(idea_id),
            "comment_id": _s(comment_id),
        },
    )
