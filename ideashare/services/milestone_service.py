"""
ideashare.services.milestone_service — Implementation Milestones
==================================================================

Milestones track how an idea is being put into practice.  Only the idea's
owner may create, edit or delete them.  Status changes go through
:func:`~ideashare.engine.transitions.milestone_change`, which owns the
``completed_at`` bookkeeping.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from ideashare.constants import MAX_TITLE_LENGTH
from ideashare.database.engine import get_session
from ideashare.database.models import Idea, Milestone, MilestoneStatus
from ideashare.engine.transitions import milestone_change
from ideashare.errors import NotFoundError, PermissionDeniedError, ValidationError
from ideashare.services.idea_service import require_owned_idea

logger = logging.getLogger(__name__)

EDITABLE_FIELDS: frozenset[str] = frozenset({"title", "description", "due_date"})


def milestone_to_dict(m: Milestone) -> dict:
    return {
        "id": str(m.id),
        "idea_id": str(m.idea_id),
        "title": m.title,
        "description": m.description,
        "status": m.status,
        "due_date": m.due_date.isoformat() if m.due_date else None,
        "completed_at": m.completed_at.isoformat() if m.completed_at else None,
        "created_at": m.created_at.isoformat() if m.created_at else None,
        "updated_at": m.updated_at.isoformat() if m.updated_at else None,
    }


def _clean_title(title: str | None) -> str:
    text = (title or "").strip()
    if not text:
        raise ValidationError("Milestone title cannot be empty")
    if len(text) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Milestone title must be at most {MAX_TITLE_LENGTH} characters")
    return text


def _owned_milestone(session: Session, milestone_id: uuid.UUID, user_id: uuid.UUID) -> Milestone:
    milestone = session.get(Milestone, milestone_id)
    if milestone is None:
        raise NotFoundError("Milestone", milestone_id)
    owner = session.scalar(select(Idea.user_id).where(Idea.id == milestone.idea_id))
    if owner != user_id:
        raise PermissionDeniedError("Only the idea owner can change its milestones")
    return milestone


def list_milestones(engine: Engine, idea_id: uuid.UUID) -> list[dict]:
    """Milestones of *idea_id*, by due date (undated last) then creation."""
    with get_session(engine) as session:
        if session.get(Idea, idea_id) is None:
            raise NotFoundError("Idea", idea_id)
        rows = session.scalars(
            select(Milestone)
            .where(Milestone.idea_id == idea_id)
            .order_by(
                Milestone.due_date.is_(None),
                Milestone.due_date,
                Milestone.created_at,
            )
        ).all()
        return [milestone_to_dict(m) for m in rows]


def create_milestone(
    engine: Engine,
    idea_id: uuid.UUID,
    user_id: uuid.UUID,
    *,
    title: str,
    description: str | None = None,
    status: str = MilestoneStatus.PLANNED,
    due_date: date | None = None,
) -> dict:
    clean_title = _clean_title(title)
    try:
        initial = MilestoneStatus(status)
    except ValueError as exc:
        raise ValidationError(f"Unknown milestone status: {status!r}") from exc

    with get_session(engine) as session:
        require_owned_idea(session, idea_id, user_id)
        milestone = Milestone(
            idea_id=idea_id,
            title=clean_title,
            description=description,
            status=initial.value,
            due_date=due_date,
            completed_at=datetime.now(UTC) if initial == MilestoneStatus.COMPLETED else None,
        )
        session.add(milestone)
        session.flush()
        session.refresh(milestone)
        return milestone_to_dict(milestone)


def update_milestone(
    engine: Engine,
    milestone_id: uuid.UUID,
    user_id: uuid.UUID,
    **changes,
) -> dict:
    """Edit title, description or due date.  Status has its own operation."""
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot edit milestone fields: {', '.join(sorted(unknown))}")
    if "title" in changes:
        changes["title"] = _clean_title(changes["title"])

    with get_session(engine) as session:
        milestone = _owned_milestone(session, milestone_id, user_id)
        for key, value in changes.items():
            setattr(milestone, key, value)
        session.flush()
        session.refresh(milestone)
        return milestone_to_dict(milestone)


def update_milestone_status(
    engine: Engine,
    milestone_id: uuid.UUID,
    user_id: uuid.UUID,
    status: str,
) -> dict:
    with get_session(engine) as session:
        milestone = _owned_milestone(session, milestone_id, user_id)
        change = milestone_change(
            milestone.status,
            status,
            completed_at=milestone.completed_at,
            now=datetime.now(UTC),
        )
        if change.changed:
            logger.debug(
                "Milestone %s: %s → %s", milestone_id, milestone.status, change.status,
            )
            milestone.status = change.status.value
            milestone.completed_at = change.completed_at
            session.flush()
            session.refresh(milestone)
        return milestone_to_dict(milestone)


def delete_milestone(engine: Engine, milestone_id: uuid.UUID, user_id: uuid.UUID) -> None:
    with get_session(engine) as session:
        milestone = _owned_milestone(session, milestone_id, user_id)
        session.delete(milestone)
