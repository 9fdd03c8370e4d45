"""
ideashare.services.notification_service — Notification Fan-out
================================================================

Persists notification rows and manages their read state.

This module does NOT suppress self-notifications: callers (the social
orchestrator) check ownership before asking for a notification.  Message
text is also the caller's job; here a notification is a fixed-shape row.

Read state follows :data:`~ideashare.engine.transitions.READ_TRANSITIONS`:
marking an already-read notification is a no-op.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import Engine, delete, func, select, update
from sqlalchemy.orm import Session, joinedload

from ideashare.constants import DEFAULT_NOTIFICATION_LIMIT
from ideashare.database.engine import get_session
from ideashare.database.models import Notification, NotificationType, Profile
from ideashare.engine.transitions import ReadState, next_read_state
from ideashare.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------
def _profile_stub(profile: Profile | None) -> dict | None:
    if profile is None:
        return None
    return {
        "id": str(profile.id),
        "username": profile.username,
        "avatar_url": profile.avatar_url,
    }


def notification_to_dict(n: Notification, *, with_sender: bool = False) -> dict[str, Any]:
    data = {
        "id": str(n.id),
        "user_id": str(n.user_id),
        "sender_id": str(n.sender_id) if n.sender_id else None,
        "idea_id": str(n.idea_id) if n.idea_id else None,
        "comment_id": str(n.comment_id) if n.comment_id else None,
        "type": n.type,
        "message": n.message,
        "is_read": n.is_read,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }
    if with_sender:
        data["sender"] = _profile_stub(n.sender)
    return data


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------
def insert_notification(
    session: Session,
    *,
    user_id: uuid.UUID,
    type_: NotificationType | str,
    message: str,
    sender_id: uuid.UUID | None = None,
    idea_id: uuid.UUID | None = None,
    comment_id: uuid.UUID | None = None,
) -> Notification:
    """Insert an unread notification inside the caller's transaction."""
    try:
        ntype = NotificationType(type_)
    except ValueError as exc:
        raise ValidationError(f"Invalid notification type: {type_!r}") from exc
    if not message or not message.strip():
        raise ValidationError("Notification message cannot be empty")

    notification = Notification(
        user_id=user_id,
        sender_id=sender_id,
        idea_id=idea_id,
        comment_id=comment_id,
        type=ntype.value,
        message=message,
        is_read=False,
    )
    session.add(notification)
    session.flush()
    # Pull the server-assigned created_at
    session.refresh(notification)
    return notification


def create_notification(
    engine: Engine,
    *,
    user_id: uuid.UUID,
    type_: NotificationType | str,
    message: str,
    sender_id: uuid.UUID | None = None,
    idea_id: uuid.UUID | None = None,
    comment_id: uuid.UUID | None = None,
) -> Notification:
    """Create a notification in its own transaction."""
    with get_session(engine) as session:
        return insert_notification(
            session,
            user_id=user_id,
            type_=type_,
            message=message,
            sender_id=sender_id,
            idea_id=idea_id,
            comment_id=comment_id,
        )


# ---------------------------------------------------------------------------
# Read state
# ---------------------------------------------------------------------------
def _owned(session: Session, notification_id: uuid.UUID, user_id: uuid.UUID | None) -> Notification:
    notification = session.get(Notification, notification_id)
    if notification is None or (user_id is not None and notification.user_id != user_id):
        raise NotFoundError("Notification", notification_id)
    return notification


def mark_as_read(
    engine: Engine,
    notification_id: uuid.UUID,
    user_id: uuid.UUID | None = None,
) -> Notification:
    """Mark one notification read.  Idempotent.

    When *user_id* is given, notifications of other users are reported as
    not found.
    """
    with get_session(engine) as session:
        notification = _owned(session, notification_id, user_id)
        current = ReadState.of(notification.is_read)
        target = next_read_state(current)
        if target != current:
            notification.is_read = target == ReadState.READ
        return notification


def mark_all_as_read(engine: Engine, user_id: uuid.UUID) -> int:
    """Mark every unread notification of *user_id* read.  Returns rows changed."""
    with get_session(engine) as session:
        result = session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


def delete_notification(
    engine: Engine,
    notification_id: uuid.UUID,
    *,
    user_id: uuid.UUID,
) -> None:
    """Delete a notification owned by *user_id*."""
    with get_session(engine) as session:
        result = session.execute(
            delete(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError("Notification", notification_id)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def get_notifications(
    engine: Engine,
    user_id: uuid.UUID,
    limit: int = DEFAULT_NOTIFICATION_LIMIT,
) -> list[dict[str, Any]]:
    """Newest-first notifications for *user_id*, each with its sender."""
    with get_session(engine) as session:
        rows = session.scalars(
            select(Notification)
            .options(joinedload(Notification.sender))
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        ).all()
        return [notification_to_dict(n, with_sender=True) for n in rows]


def get_unread_count(engine: Engine, user_id: uuid.UUID) -> int:
    with get_session(engine) as session:
        return session.scalar(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        ) or 0
