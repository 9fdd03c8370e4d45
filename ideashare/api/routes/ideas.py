"""
ideashare.api.routes.ideas — Ideas, comments, tags, likes & shares
====================================================================
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel, Field

from ideashare.api.deps import ConfigDep, EngineDep, OptionalUserDep, UserDep
from ideashare.services import idea_service, social_service, taxonomy_service
from ideashare.services.idea_service import comment_to_dict

router = APIRouter(tags=["ideas"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class IdeaCreate(BaseModel):
    title: str
    description: str
    category_id: uuid.UUID | None = None
    tag_ids: list[uuid.UUID] = Field(default_factory=list)


class IdeaUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    category_id: uuid.UUID | None = None


class TagsUpdate(BaseModel):
    tag_ids: list[uuid.UUID] = Field(default_factory=list)


class CommentCreate(BaseModel):
    content: str


# ---------------------------------------------------------------------------
# Ideas
# ---------------------------------------------------------------------------
@router.get("/ideas")
def list_ideas(
    engine: EngineDep,
    viewer: OptionalUserDep,
    category_id: uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
):
    return idea_service.list_ideas(
        engine, category_id=category_id, user_id=user_id, viewer_id=viewer,
    )


@router.get("/ideas/search")
def search_ideas(
    engine: EngineDep,
    q: str = Query("", description="Matched against title and description"),
    limit: int = Query(20, ge=1, le=100),
):
    return idea_service.search_ideas(engine, q, limit=limit)


@router.post("/ideas", status_code=status.HTTP_201_CREATED)
def create_idea(body: IdeaCreate, engine: EngineDep, user: UserDep):
    return idea_service.create_idea(
        engine,
        user,
        title=body.title,
        description=body.description,
        category_id=body.category_id,
        tag_ids=body.tag_ids,
    )


@router.get("/ideas/{idea_id}")
def get_idea(idea_id: uuid.UUID, engine: EngineDep, viewer: OptionalUserDep):
    return idea_service.get_idea(engine, idea_id, viewer_id=viewer)


@router.patch("/ideas/{idea_id}")
def update_idea(idea_id: uuid.UUID, body: IdeaUpdate, engine: EngineDep, user: UserDep):
    return idea_service.update_idea(engine, idea_id, user, **body.model_dump(exclude_unset=True))


@router.delete("/ideas/{idea_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_idea(idea_id: uuid.UUID, engine: EngineDep, user: UserDep):
    idea_service.delete_idea(engine, idea_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/ideas/{idea_id}/tags")
def set_idea_tags(idea_id: uuid.UUID, body: TagsUpdate, engine: EngineDep, user: UserDep):
    return taxonomy_service.set_idea_tags(engine, idea_id, user, body.tag_ids)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------
@router.get("/ideas/{idea_id}/comments")
def list_comments(idea_id: uuid.UUID, engine: EngineDep):
    return idea_service.list_comments(engine, idea_id)


@router.post("/ideas/{idea_id}/comments", status_code=status.HTTP_201_CREATED)
def add_comment(
    idea_id: uuid.UUID,
    body: CommentCreate,
    engine: EngineDep,
    cfg: ConfigDep,
    user: UserDep,
):
    comment = social_service.add_comment(
        engine, idea_id, user, body.content, max_attempts=cfg.outbox_max_attempts,
    )
    return comment_to_dict(comment)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(comment_id: uuid.UUID, engine: EngineDep, user: UserDep):
    idea_service.delete_comment(engine, comment_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Likes & shares
# ---------------------------------------------------------------------------
@router.post("/ideas/{idea_id}/like")
def toggle_like(idea_id: uuid.UUID, engine: EngineDep, cfg: ConfigDep, user: UserDep):
    result = social_service.toggle_like(
        engine, idea_id, user, max_attempts=cfg.outbox_max_attempts,
    )
    return {
        "liked": result.liked,
        "likes_count": social_service.count_likes(engine, idea_id),
    }


@router.get("/ideas/{idea_id}/likes")
def get_likes(idea_id: uuid.UUID, engine: EngineDep, viewer: OptionalUserDep):
    return {
        "count": social_service.count_likes(engine, idea_id),
        "user_has_liked": (
            social_service.has_liked(engine, idea_id, viewer) if viewer else False
        ),
    }


@router.post("/ideas/{idea_id}/share")
def share_idea(idea_id: uuid.UUID, engine: EngineDep, cfg: ConfigDep, user: UserDep):
    idea = social_service.share_idea(
        engine, idea_id, user, max_attempts=cfg.outbox_max_attempts,
    )
    return {"id": str(idea.id), "share_count": idea.share_count}
