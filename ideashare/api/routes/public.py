"""
ideashare.api.routes.public — Read-only public endpoints
==========================================================
"""

from __future__ import annotations

from fastapi import APIRouter

from ideashare.api.deps import ConfigDep, EngineDep
from ideashare.engine.actions import ACTION_POINTS
from ideashare.engine.levels import LEVEL_THRESHOLDS
from ideashare.services import taxonomy_service

router = APIRouter(tags=["public"])


@router.get("/settings/public")
def get_public_settings(cfg: ConfigDep):
    """Values the UI needs before sign-in: polling cadence and the level table."""
    return {
        "community_name": cfg.community_name,
        "unread_poll_seconds": cfg.unread_poll_seconds,
        "levels": [
            {"level": level.value, "min_points": minimum}
            for minimum, level in reversed(LEVEL_THRESHOLDS)
        ],
        "action_points": {action.value: points for action, points in ACTION_POINTS.items()},
    }


@router.get("/categories")
def get_categories(engine: EngineDep):
    return taxonomy_service.list_categories(engine)


@router.get("/tags")
def get_tags(engine: EngineDep):
    return taxonomy_service.list_tags(engine)
