"""
ideashare.api.routes.milestones — Idea implementation milestones
==================================================================
"""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ideashare.api.deps import EngineDep, UserDep
from ideashare.database.models import MilestoneStatus
from ideashare.services import milestone_service

router = APIRouter(tags=["milestones"])


class MilestoneCreate(BaseModel):
    title: str
    description: str | None = None
    status: str = MilestoneStatus.PLANNED.value
    due_date: date | None = None


class MilestoneUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    due_date: date | None = None


class MilestoneStatusUpdate(BaseModel):
    status: str


@router.get("/ideas/{idea_id}/milestones")
def list_milestones(idea_id: uuid.UUID, engine: EngineDep):
    return milestone_service.list_milestones(engine, idea_id)


@router.post("/ideas/{idea_id}/milestones", status_code=status.HTTP_201_CREATED)
def create_milestone(idea_id: uuid.UUID, body: MilestoneCreate, engine: EngineDep, user: UserDep):
    return milestone_service.create_milestone(
        engine,
        idea_id,
        user,
        title=body.title,
        description=body.description,
        status=body.status,
        due_date=body.due_date,
    )


@router.patch("/milestones/{milestone_id}")
def update_milestone(
    milestone_id: uuid.UUID,
    body: MilestoneUpdate,
    engine: EngineDep,
    user: UserDep,
):
    return milestone_service.update_milestone(
        engine, milestone_id, user, **body.model_dump(exclude_unset=True),
    )


@router.put("/milestones/{milestone_id}/status")
def update_milestone_status(
    milestone_id: uuid.UUID,
    body: MilestoneStatusUpdate,
    engine: EngineDep,
    user: UserDep,
):
    return milestone_service.update_milestone_status(engine, milestone_id, user, body.status)


@router.delete("/milestones/{milestone_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_milestone(milestone_id: uuid.UUID, engine: EngineDep, user: UserDep):
    milestone_service.delete_milestone(engine, milestone_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
