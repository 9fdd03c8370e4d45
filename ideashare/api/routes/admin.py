"""
ideashare.api.routes.admin — Outbox inspection & replay (JWT-protected)
=========================================================================
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ideashare.api.deps import ConfigDep, EngineDep, get_current_admin
from ideashare.database.models import SideEffectStatus
from ideashare.services import outbox_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("/side-effects")
def list_side_effects(
    engine: EngineDep,
    status: str | None = Query(None, description="pending, done or failed"),
    limit: int = Query(100, ge=1, le=1000),
):
    if status is not None and status not in {s.value for s in SideEffectStatus}:
        raise HTTPException(400, f"Unknown status: {status}")
    return outbox_service.list_side_effects(engine, status=status, limit=limit)


@router.post("/side-effects/replay")
def replay_side_effects(
    engine: EngineDep,
    cfg: ConfigDep,
    admin: dict = Depends(get_current_admin),
):
    logger.info("Outbox replay requested by %s", admin.get("sub"))
    return outbox_service.replay_pending(
        engine,
        limit=cfg.outbox_batch_size,
        max_attempts=cfg.outbox_max_attempts,
    )
