"""
ideashare.services.social_service — Social Action Orchestrator
================================================================

Entry point for the four engagement actions.  Each one runs the same
sequence:

    1. Validate input (no store call on bad input)
    2. Persist the primary row and queue its side effects (one transaction)
    3. Award points            ┐ applied by the outbox, in this order,
    4. Emit the notification   ┘ one transaction each, fail-fast

Who gets what:

    like     → owner +2, ``like`` notification      (skipped on own idea)
    comment  → commenter +5; ``comment`` notification to owner (not on own idea)
    follow   → followed user +10, ``follow`` notification
    share    → owner +3, no notification

Reversals (unlike, unfollow) only delete the primary row: points are
never clawed back and nobody is notified.

Errors propagate unchanged; nothing is rolled back across steps.  A step
that fails stays queued in ``side_effects`` for :func:`replay_pending`.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import Engine, delete, func, select, update
from sqlalchemy.orm import Session

from ideashare.constants import COUNTER_COLUMNS
from ideashare.database.engine import get_session
from ideashare.database.models import (
    ActionKind,
    Base,
    Comment,
    Follow,
    Idea,
    Like,
    NotificationType,
    Profile,
)
from ideashare.engine.actions import award_step, notify_step, render_message
from ideashare.engine.transitions import LikeState, next_like_state
from ideashare.errors import NotFoundError, ValidationError
from ideashare.services.outbox_service import DEFAULT_MAX_ATTEMPTS, enqueue, run_saga

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LikeResult:
    """Outcome of a like toggle."""

    liked: bool
    like_id: uuid.UUID | None = None
    saga_id: uuid.UUID | None = None


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def _get_idea(session: Session, idea_id: uuid.UUID) -> Idea:
    idea = session.get(Idea, idea_id)
    if idea is None:
        raise NotFoundError("Idea", idea_id)
    return idea


def _get_profile(session: Session, user_id: uuid.UUID) -> Profile:
    profile = session.get(Profile, user_id)
    if profile is None:
        raise NotFoundError("Profile", user_id)
    return profile


def _finish(engine: Engine, saga_id: uuid.UUID | None, max_attempts: int) -> None:
    if saga_id is not None:
        run_saga(engine, saga_id, max_attempts=max_attempts)


# ---------------------------------------------------------------------------
# Atomic counters
# ---------------------------------------------------------------------------
def _increment(session: Session, table_name: str, column: str, row_id: uuid.UUID) -> int:
    if (table_name, column) not in COUNTER_COLUMNS:
        raise ValidationError(f"{table_name}.{column} is not an incrementable counter")
    table = Base.metadata.tables[table_name]
    counter = table.c[column]
    result = session.execute(
        update(table)
        .where(table.c.id == row_id)
        .values({counter: counter + 1})
    )
    if result.rowcount == 0:
        raise NotFoundError(table_name, row_id)
    return session.scalar(select(counter).where(table.c.id == row_id))


def increment_counter(engine: Engine, table_name: str, column: str, row_id: uuid.UUID) -> int:
    """Atomically add 1 to a whitelisted counter column.  Returns the new value."""
    with get_session(engine) as session:
        return _increment(session, table_name, column, row_id)


# ---------------------------------------------------------------------------
# Like toggle
# ---------------------------------------------------------------------------
def toggle_like(
    engine: Engine,
    idea_id: uuid.UUID,
    user_id: uuid.UUID,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> LikeResult:
    """Like the idea if *user_id* hasn't yet, otherwise remove the like."""
    with get_session(engine) as session:
        idea = _get_idea(session, idea_id)
        liker = _get_profile(session, user_id)
        existing = session.scalar(
            select(Like).where(Like.idea_id == idea_id, Like.user_id == user_id)
        )
        current = LikeState.LIKED if existing is not None else LikeState.UNLIKED

        if next_like_state(current) == LikeState.UNLIKED:
            session.delete(existing)
            return LikeResult(liked=False)

        like = Like(idea_id=idea.id, user_id=user_id)
        session.add(like)
        session.flush()

        steps = []
        if idea.user_id != user_id:
            steps = [
                award_step(idea.user_id, ActionKind.LIKE),
                notify_step(
                    user_id=idea.user_id,
                    type_=NotificationType.LIKE,
                    message=render_message(
                        NotificationType.LIKE, sender=liker.username, title=idea.title,
                    ),
                    sender_id=user_id,
                    idea_id=idea.id,
                ),
            ]
        saga_id = enqueue(session, ActionKind.LIKE, steps)
        like_id = like.id

    _finish(engine, saga_id, max_attempts)
    return LikeResult(liked=True, like_id=like_id, saga_id=saga_id)


def has_liked(engine: Engine, idea_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    with get_session(engine) as session:
        return session.scalar(
            select(Like.id).where(Like.idea_id == idea_id, Like.user_id == user_id)
        ) is not None


def count_likes(engine: Engine, idea_id: uuid.UUID) -> int:
    with get_session(engine) as session:
        return session.scalar(
            select(func.count()).select_from(Like).where(Like.idea_id == idea_id)
        ) or 0


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------
def add_comment(
    engine: Engine,
    idea_id: uuid.UUID,
    user_id: uuid.UUID,
    content: str,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Comment:
    """Post a comment; the commenter always earns points."""
    if not content or not content.strip():
        raise ValidationError("Comment cannot be empty")

    with get_session(engine) as session:
        idea = _get_idea(session, idea_id)
        commenter = _get_profile(session, user_id)

        comment = Comment(content=content.strip(), idea_id=idea.id, user_id=user_id)
        session.add(comment)
        session.flush()
        session.refresh(comment)

        steps = [award_step(user_id, ActionKind.COMMENT)]
        if idea.user_id != user_id:
            steps.append(notify_step(
                user_id=idea.user_id,
                type_=NotificationType.COMMENT,
                message=render_message(
                    NotificationType.COMMENT, sender=commenter.username, title=idea.title,
                ),
                sender_id=user_id,
                idea_id=idea.id,
                comment_id=comment.id,
            ))
        saga_id = enqueue(session, ActionKind.COMMENT, steps)

    _finish(engine, saga_id, max_attempts)
    return comment


# ---------------------------------------------------------------------------
# Follows
# ---------------------------------------------------------------------------
def follow_user(
    engine: Engine,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Follow:
    """Follow *following_id*.  Following twice returns the existing row
    without awarding anything again.
    """
    if follower_id == following_id:
        raise ValidationError("You cannot follow yourself")

    with get_session(engine) as session:
        follower = _get_profile(session, follower_id)
        _get_profile(session, following_id)

        existing = session.scalar(
            select(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )
        if existing is not None:
            return existing

        follow = Follow(follower_id=follower_id, following_id=following_id)
        session.add(follow)
        session.flush()
        session.refresh(follow)

        saga_id = enqueue(session, ActionKind.FOLLOW, [
            award_step(following_id, ActionKind.FOLLOW),
            notify_step(
                user_id=following_id,
                type_=NotificationType.FOLLOW,
                message=render_message(NotificationType.FOLLOW, sender=follower.username),
                sender_id=follower_id,
            ),
        ])

    _finish(engine, saga_id, max_attempts)
    return follow


def unfollow_user(engine: Engine, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
    """Remove the follow row.  Returns ``False`` if there was none."""
    with get_session(engine) as session:
        result = session.execute(
            delete(Follow)
            .where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0


def is_following(engine: Engine, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
    with get_session(engine) as session:
        return session.scalar(
            select(Follow.id).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        ) is not None


def get_follow_counts(engine: Engine, user_id: uuid.UUID) -> dict[str, int]:
    with get_session(engine) as session:
        followers = session.scalar(
            select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
        ) or 0
        following = session.scalar(
            select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
        ) or 0
    return {"followers": followers, "following": following}


# ---------------------------------------------------------------------------
# Shares
# ---------------------------------------------------------------------------
def share_idea(
    engine: Engine,
    idea_id: uuid.UUID,
    user_id: uuid.UUID | None = None,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Idea:
    """Count a share and award the owner.  Returns the updated idea.

    When *user_id* is given the sharer must have a profile.
    """
    with get_session(engine) as session:
        if user_id is not None:
            _get_profile(session, user_id)
        _increment(session, "ideas", "share_count", idea_id)
        idea = session.get(Idea, idea_id, populate_existing=True)
        saga_id = enqueue(session, ActionKind.SHARE, [
            award_step(idea.user_id, ActionKind.SHARE),
        ])

    _finish(engine, saga_id, max_attempts)
    logger.debug("Idea %s shared (count=%d)", idea_id, idea.share_count)
    return idea
