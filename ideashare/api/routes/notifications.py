"""
ideashare.api.routes.notifications — The caller's notification inbox
======================================================================
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, Response, status

from ideashare.api.deps import ConfigDep, EngineDep, UserDep
from ideashare.constants import DEFAULT_NOTIFICATION_LIMIT
from ideashare.services import notification_service
from ideashare.services.notification_service import notification_to_dict

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def list_notifications(
    engine: EngineDep,
    user: UserDep,
    limit: int = Query(DEFAULT_NOTIFICATION_LIMIT, ge=1, le=200),
):
    return notification_service.get_notifications(engine, user, limit=limit)


@router.get("/unread-count")
def unread_count(engine: EngineDep, cfg: ConfigDep, user: UserDep):
    return {
        "count": notification_service.get_unread_count(engine, user),
        "poll_seconds": cfg.unread_poll_seconds,
    }


@router.post("/read-all")
def mark_all_read(engine: EngineDep, user: UserDep):
    return {"updated": notification_service.mark_all_as_read(engine, user)}


@router.post("/{notification_id}/read")
def mark_read(notification_id: uuid.UUID, engine: EngineDep, user: UserDep):
    notification = notification_service.mark_as_read(engine, notification_id, user_id=user)
    return notification_to_dict(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(notification_id: uuid.UUID, engine: EngineDep, user: UserDep):
    notification_service.delete_notification(engine, notification_id, user_id=user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
