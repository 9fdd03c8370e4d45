"""
ideashare.api.routes.profiles — Profiles & follows
====================================================
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter
from pydantic import BaseModel

from ideashare.api.deps import ConfigDep, EngineDep, OptionalUserDep, UserDep
from ideashare.services import profile_service, social_service
from ideashare.services.profile_service import profile_to_dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


class ProfileCreate(BaseModel):
    username: str
    avatar_url: str | None = None


class ProfileUpdate(BaseModel):
    username: str | None = None
    avatar_url: str | None = None


def _profile_view(engine, user_id: uuid.UUID) -> dict:
    data = profile_to_dict(profile_service.get_profile(engine, user_id))
    data.update(social_service.get_follow_counts(engine, user_id))
    return data


# ---------------------------------------------------------------------------
# The caller's own profile
# ---------------------------------------------------------------------------
@router.get("/me")
def get_my_profile(engine: EngineDep, user: UserDep):
    return _profile_view(engine, user)


@router.post("/me")
def ensure_my_profile(body: ProfileCreate, engine: EngineDep, user: UserDep):
    """Create the caller's profile on first sign-in; returns it either way."""
    profile_service.ensure_profile(engine, user, body.username, body.avatar_url)
    return _profile_view(engine, user)


@router.patch("/me")
def update_my_profile(body: ProfileUpdate, engine: EngineDep, user: UserDep):
    profile_service.update_profile(engine, user, **body.model_dump(exclude_unset=True))
    return _profile_view(engine, user)


# ---------------------------------------------------------------------------
# Other members
# ---------------------------------------------------------------------------
@router.get("/{user_id}")
def get_profile(user_id: uuid.UUID, engine: EngineDep):
    return _profile_view(engine, user_id)


@router.post("/{user_id}/follow")
def follow(user_id: uuid.UUID, engine: EngineDep, cfg: ConfigDep, user: UserDep):
    social_service.follow_user(engine, user, user_id, max_attempts=cfg.outbox_max_attempts)
    return {"is_following": True, **social_service.get_follow_counts(engine, user_id)}


@router.delete("/{user_id}/follow")
def unfollow(user_id: uuid.UUID, engine: EngineDep, user: UserDep):
    removed = social_service.unfollow_user(engine, user, user_id)
    return {
        "is_following": False,
        "removed": removed,
        **social_service.get_follow_counts(engine, user_id),
    }


@router.get("/{user_id}/follows")
def get_follows(user_id: uuid.UUID, engine: EngineDep, viewer: OptionalUserDep):
    counts = social_service.get_follow_counts(engine, user_id)
    counts["is_following"] = (
        social_service.is_following(engine, viewer, user_id) if viewer else False
    )
    return counts
