"""
ideashare.services.points_service — Points & Level Engine (persistence)
=========================================================================

Applies a point award to a profile.  The new total and the recomputed
level are written by ONE ``UPDATE`` whose right-hand sides are evaluated
by the database::

    UPDATE profiles
       SET points = points + :delta,
           level  = CASE WHEN points + :delta >= 1000 THEN 'Master' ... END
     WHERE id = :user_id

so concurrent awards to the same profile never lose an increment and
``level`` can never drift from ``points``.

Level changes are silent: they are logged, never notified.
Awards are NOT idempotent; the outbox guarantees each is applied once.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import Engine, select, update
from sqlalchemy.orm import Session

from ideashare.database.engine import get_session
from ideashare.database.models import Profile
from ideashare.engine.levels import level_case
from ideashare.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _check_delta(delta: int) -> None:
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise ValidationError(f"Point delta must be an integer, got {delta!r}")
    if delta < 0:
        raise ValidationError(f"Point delta must be >= 0, got {delta}")


def apply_points(session: Session, user_id: uuid.UUID, delta: int) -> Profile:
    """Award *delta* points inside the caller's transaction.

    Returns the refreshed :class:`Profile`.
    """
    _check_delta(delta)

    old_level = session.scalar(select(Profile.level).where(Profile.id == user_id))
    if old_level is None:
        raise NotFoundError("Profile", user_id)

    new_points = Profile.points + delta
    session.execute(
        update(Profile)
        .where(Profile.id == user_id)
        .values(points=new_points, level=level_case(new_points))
        .execution_options(synchronize_session=False)
    )

    profile = session.scalar(
        select(Profile)
        .where(Profile.id == user_id)
        .execution_options(populate_existing=True)
    )
    if profile.level != old_level:
        logger.info(
            "Profile %s moved %s → %s at %d points",
            user_id, old_level, profile.level, profile.points,
        )
    return profile


def award_points(engine: Engine, user_id: uuid.UUID, delta: int) -> Profile:
    """Award *delta* points to *user_id* in its own transaction.

    Raises
    ------
    ValidationError
        If *delta* is negative or not an integer.
    NotFoundError
        If the profile does not exist.
    PersistenceError
        If the read or the write fails.
    """
    _check_delta(delta)
    with get_session(engine) as session:
        return apply_points(session, user_id, delta)
