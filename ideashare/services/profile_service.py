"""
ideashare.services.profile_service — Profile reads & edits
============================================================

Profile edits may only touch ``username`` and ``avatar_url``; points and
level belong to the points engine.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from ideashare.constants import MAX_USERNAME_LENGTH
from ideashare.database.engine import get_session
from ideashare.database.models import Level, Profile
from ideashare.engine.levels import level_progress
from ideashare.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS: frozenset[str] = frozenset({"username", "avatar_url"})


def profile_to_dict(p: Profile) -> dict:
    return {
        "id": str(p.id),
        "username": p.username,
        "avatar_url": p.avatar_url,
        "points": p.points,
        "level": p.level,
        "progress": level_progress(p.points),
        "created_at": p.created_at.isoformat() if p.created_at else None,
    }


def _clean_username(username: str | None) -> str:
    name = (username or "").strip()
    if not name:
        raise ValidationError("Username cannot be empty")
    if len(name) > MAX_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at most {MAX_USERNAME_LENGTH} characters")
    return name


def _check_username_free(session: Session, username: str, user_id: uuid.UUID) -> None:
    owner = session.scalar(select(Profile.id).where(Profile.username == username))
    if owner is not None and owner != user_id:
        raise ValidationError(f"Username {username!r} is already taken")


def get_profile(engine: Engine, user_id: uuid.UUID) -> Profile:
    with get_session(engine) as session:
        profile = session.get(Profile, user_id)
        if profile is None:
            raise NotFoundError("Profile", user_id)
        return profile


def ensure_profile(
    engine: Engine,
    user_id: uuid.UUID,
    username: str,
    avatar_url: str | None = None,
) -> Profile:
    """Fetch or create the profile for a freshly signed-in user."""
    with get_session(engine) as session:
        profile = session.get(Profile, user_id)
        if profile is not None:
            return profile
        name = _clean_username(username)
        _check_username_free(session, name, user_id)
        profile = Profile(
            id=user_id,
            username=name,
            avatar_url=avatar_url,
            points=0,
            level=Level.BEGINNER.value,
        )
        session.add(profile)
        session.flush()
        session.refresh(profile)
        logger.info("Created profile %s (%s)", user_id, name)
        return profile


def update_profile(engine: Engine, user_id: uuid.UUID, **changes) -> Profile:
    """Apply username / avatar changes.  Other keys are rejected."""
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot edit profile fields: {', '.join(sorted(unknown))}")

    if "username" in changes:
        changes["username"] = _clean_username(changes["username"])

    with get_session(engine) as session:
        profile = session.get(Profile, user_id)
        if profile is None:
            raise NotFoundError("Profile", user_id)
        if "username" in changes:
            _check_username_free(session, changes["username"], user_id)
        for key, value in changes.items():
            setattr(profile, key, value)
        return profile
