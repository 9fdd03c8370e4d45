"""
tests/test_content_services.py — Ideas, Comments, Profiles, Milestones, Tags
==============================================================================
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

import pytest
from conftest import make_idea, make_profile
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ideashare.database.models import Category, Comment, Idea, Like, Notification, Tag
from ideashare.errors import NotFoundError, PermissionDeniedError, ValidationError
from ideashare.services import (
    idea_service,
    milestone_service,
    profile_service,
    social_service,
    taxonomy_service,
)


def _category_id(engine, name="Technology") -> uuid.UUID:
    with Session(engine) as session:
        return session.scalar(select(Category.id).where(Category.name == name))


def _tag_ids(engine, *names) -> list[uuid.UUID]:
    with Session(engine) as session:
        return [session.scalar(select(Tag.id).where(Tag.name == n)) for n in names]


# ===========================================================================
# Profiles
# ===========================================================================
class TestProfiles:
    def test_ensure_profile_creates_once(self, db_engine):
        user_id = uuid.uuid4()
        first = profile_service.ensure_profile(db_engine, user_id, "  dana ")
        second = profile_service.ensure_profile(db_engine, user_id, "ignored")
        assert first.username == "dana"
        assert second.username == "dana"
        assert (first.points, first.level) == (0, "Beginner")

    def test_ensure_profile_duplicate_username(self, db_engine):
        make_profile(db_engine, username="erin")
        with pytest.raises(ValidationError):
            profile_service.ensure_profile(db_engine, uuid.uuid4(), "erin")

    def test_update_username_and_avatar(self, db_engine):
        user = make_profile(db_engine, username="frank")
        profile = profile_service.update_profile(
            db_engine, user, username="franky", avatar_url="https://cdn/x.png",
        )
        assert profile.username == "franky"
        assert profile.avatar_url == "https://cdn/x.png"

    def test_blank_username_rejected(self, db_engine):
        user = make_profile(db_engine)
        with pytest.raises(ValidationError):
            profile_service.update_profile(db_engine, user, username="  ")

    def test_duplicate_username_rejected(self, db_engine):
        make_profile(db_engine, username="gina")
        user = make_profile(db_engine)
        with pytest.raises(ValidationError):
            profile_service.update_profile(db_engine, user, username="gina")

    def test_points_cannot_be_edited(self, db_engine):
        user = make_profile(db_engine, points=3)
        with pytest.raises(ValidationError):
            profile_service.update_profile(db_engine, user, points=999)
        assert profile_service.get_profile(db_engine, user).points == 3

    def test_profile_dict_has_progress(self, db_engine):
        user = make_profile(db_engine, points=150)
        data = profile_service.profile_to_dict(profile_service.get_profile(db_engine, user))
        assert data["progress"]["next_level"] == "Advanced"
        assert data["progress"]["points_to_next"] == 50

    def test_missing_profile(self, db_engine):
        with pytest.raises(NotFoundError):
            profile_service.get_profile(db_engine, uuid.uuid4())


# ===========================================================================
# Ideas
# ===========================================================================
class TestIdeas:
    def test_create_with_category_and_tags(self, db_engine):
        user = make_profile(db_engine, username="hana")
        idea = idea_service.create_idea(
            db_engine,
            user,
            title=" Rainwater kits ",
            description="DIY rainwater harvesting kits",
            category_id=_category_id(db_engine, "Environment"),
            tag_ids=_tag_ids(db_engine, "sustainability", "hardware"),
        )
        assert idea["title"] == "Rainwater kits"
        assert idea["category"]["name"] == "Environment"
        assert [t["name"] for t in idea["tags"]] == ["hardware", "sustainability"]
        assert idea["profile"]["username"] == "hana"
        assert idea["likes_count"] == 0
        assert idea["user_has_liked"] is False

    @pytest.mark.parametrize("title, description", [("", "x"), ("x", "  ")])
    def test_blank_fields_rejected(self, db_engine, title, description):
        user = make_profile(db_engine)
        with pytest.raises(ValidationError):
            idea_service.create_idea(db_engine, user, title=title, description=description)

    def test_unknown_tag_rejected(self, db_engine):
        user = make_profile(db_engine)
        with pytest.raises(NotFoundError):
            idea_service.create_idea(
                db_engine, user, title="t", description="d", tag_ids=[uuid.uuid4()],
            )

    def test_list_newest_first_with_counts(self, db_engine):
        owner, fan = make_profile(db_engine), make_profile(db_engine)
        with Session(db_engine) as session:
            for day, title in [(1, "older"), (5, "newer")]:
                session.add(Idea(
                    title=title, description="d", user_id=owner,
                    share_count=0, created_at=datetime(2026, 1, day),
                ))
            session.commit()
        newer = idea_service.list_ideas(db_engine)[0]
        assert newer["title"] == "newer"

        social_service.toggle_like(db_engine, uuid.UUID(newer["id"]), fan)
        social_service.add_comment(db_engine, uuid.UUID(newer["id"]), fan, "nice")

        rows = idea_service.list_ideas(db_engine, viewer_id=fan)
        assert [r["title"] for r in rows] == ["newer", "older"]
        assert rows[0]["likes_count"] == 1
        assert rows[0]["comments_count"] == 1
        assert rows[0]["user_has_liked"] is True
        assert rows[1]["user_has_liked"] is False

    def test_list_filters(self, db_engine):
        alice, bob = make_profile(db_engine), make_profile(db_engine)
        make_idea(db_engine, alice, title="a1")
        make_idea(db_engine, bob, title="b1")
        assert [r["title"] for r in idea_service.list_ideas(db_engine, user_id=bob)] == ["b1"]
        assert idea_service.list_ideas(db_engine, category_id=_category_id(db_engine)) == []

    def test_update_owner_only(self, db_engine):
        owner, other = make_profile(db_engine), make_profile(db_engine)
        idea_id = make_idea(db_engine, owner)
        with pytest.raises(PermissionDeniedError):
            idea_service.update_idea(db_engine, idea_id, other, title="hijacked")

        updated = idea_service.update_idea(db_engine, idea_id, owner, title="Renamed")
        assert updated["title"] == "Renamed"

    def test_update_rejects_unknown_fields(self, db_engine):
        owner = make_profile(db_engine)
        idea_id = make_idea(db_engine, owner)
        with pytest.raises(ValidationError):
            idea_service.update_idea(db_engine, idea_id, owner, share_count=100)

    def test_delete_cascades(self, db_engine):
        owner, fan = make_profile(db_engine), make_profile(db_engine)
        idea_id = make_idea(db_engine, owner)
        social_service.toggle_like(db_engine, idea_id, fan)
        social_service.add_comment(db_engine, idea_id, fan, "first!")
        milestone_service.create_milestone(db_engine, idea_id, owner, title="Prototype")

        with pytest.raises(PermissionDeniedError):
            idea_service.delete_idea(db_engine, idea_id, fan)
        idea_service.delete_idea(db_engine, idea_id, owner)

        with Session(db_engine) as session:
            for model in (Idea, Like, Comment, Notification):
                assert session.scalar(select(func.count()).select_from(model)) == 0
        with pytest.raises(NotFoundError):
            idea_service.get_idea(db_engine, idea_id)
        # Points already earned survive the deletion
        assert profile_service.get_profile(db_engine, owner).points == 2

    def test_search(self, db_engine):
        owner = make_profile(db_engine)
        make_idea(db_engine, owner, title="Solar Lamps", description="Cheap lighting")
        make_idea(db_engine, owner, title="Book swap", description="Share SOLAR manuals")
        make_idea(db_engine, owner, title="Bike repair", description="Fix bikes")

        titles = {r["title"] for r in idea_service.search_ideas(db_engine, "solar")}
        assert titles == {"Solar Lamps", "Book swap"}

    def test_search_wildcards_match_literally(self, db_engine):
        owner = make_profile(db_engine)
        make_idea(db_engine, owner, title="100% recycled", description="Paper")
        make_idea(db_engine, owner, title="1000 trees", description="Planting drive")
        make_idea(db_engine, owner, title="snake_case tips", description="Style guide")
        make_idea(db_engine, owner, title="snakescase", description="Typo")

        assert [r["title"] for r in idea_service.search_ideas(db_engine, "100%")] == [
            "100% recycled",
        ]
        assert [r["title"] for r in idea_service.search_ideas(db_engine, "e_c")] == [
            "snake_case tips",
        ]

    @pytest.mark.parametrize("query", ["", "so", "  a  "])
    def test_short_search_returns_nothing(self, db_engine, query):
        owner = make_profile(db_engine)
        make_idea(db_engine, owner, title="so so")
        assert idea_service.search_ideas(db_engine, query) == []


# ===========================================================================
# Comments
# ===========================================================================
class TestComments:
    def test_list_with_author(self, db_engine):
        owner = make_profile(db_engine)
        fan = make_profile(db_engine, username="ivan")
        idea_id = make_idea(db_engine, owner)
        social_service.add_comment(db_engine, idea_id, fan, "great")

        [row] = idea_service.list_comments(db_engine, idea_id)
        assert row["content"] == "great"
        assert row["profile"]["username"] == "ivan"

    def test_delete_author_only(self, db_engine):
        owner, fan = make_profile(db_engine), make_profile(db_engine)
        idea_id = make_idea(db_engine, owner)
        comment = social_service.add_comment(db_engine, idea_id, fan, "hello")

        with pytest.raises(PermissionDeniedError):
            idea_service.delete_comment(db_engine, comment.id, owner)
        idea_service.delete_comment(db_engine, comment.id, fan)
        assert idea_service.list_comments(db_engine, idea_id) == []


# ===========================================================================
# Milestones
# ===========================================================================
class TestMilestones:
    @pytest.fixture
    def owned(self, db_engine):
        owner = make_profile(db_engine)
        return owner, make_idea(db_engine, owner)

    def test_create_defaults_to_planned(self, db_engine, owned):
        owner, idea_id = owned
        m = milestone_service.create_milestone(db_engine, idea_id, owner, title="Survey")
        assert m["status"] == "planned"
        assert m["completed_at"] is None

    def test_create_completed_is_stamped(self, db_engine, owned):
        owner, idea_id = owned
        m = milestone_service.create_milestone(
            db_engine, idea_id, owner, title="Kickoff", status="completed",
        )
        assert m["completed_at"] is not None

    def test_only_owner_can_create(self, db_engine, owned):
        _, idea_id = owned
        stranger = make_profile(db_engine)
        with pytest.raises(PermissionDeniedError):
            milestone_service.create_milestone(db_engine, idea_id, stranger, title="x")

    def test_blank_title_rejected(self, db_engine, owned):
        owner, idea_id = owned
        with pytest.raises(ValidationError):
            milestone_service.create_milestone(db_engine, idea_id, owner, title=" ")

    def test_status_lifecycle(self, db_engine, owned):
        owner, idea_id = owned
        m = milestone_service.create_milestone(db_engine, idea_id, owner, title="Build")
        mid = uuid.UUID(m["id"])

        done = milestone_service.update_milestone_status(db_engine, mid, owner, "completed")
        assert done["status"] == "completed"
        stamp = done["completed_at"]
        assert stamp is not None

        again = milestone_service.update_milestone_status(db_engine, mid, owner, "completed")
        assert again["completed_at"] == stamp

        reopened = milestone_service.update_milestone_status(db_engine, mid, owner, "in_progress")
        assert reopened["completed_at"] is None

        with pytest.raises(ValidationError):
            milestone_service.update_milestone_status(db_engine, mid, owner, "archived")

    def test_update_fields(self, db_engine, owned):
        owner, idea_id = owned
        m = milestone_service.create_milestone(db_engine, idea_id, owner, title="Pilot")
        updated = milestone_service.update_milestone(
            db_engine, uuid.UUID(m["id"]), owner,
            description="Run in two schools", due_date=date(2026, 9, 1),
        )
        assert updated["description"] == "Run in two schools"
        assert updated["due_date"] == "2026-09-01"
        with pytest.raises(ValidationError):
            milestone_service.update_milestone(
                db_engine, uuid.UUID(m["id"]), owner, status="completed",
            )

    def test_list_by_due_date_undated_last(self, db_engine, owned):
        owner, idea_id = owned
        milestone_service.create_milestone(db_engine, idea_id, owner, title="someday")
        milestone_service.create_milestone(
            db_engine, idea_id, owner, title="later", due_date=date(2026, 12, 1),
        )
        milestone_service.create_milestone(
            db_engine, idea_id, owner, title="sooner", due_date=date(2026, 6, 1),
        )
        titles = [m["title"] for m in milestone_service.list_milestones(db_engine, idea_id)]
        assert titles == ["sooner", "later", "someday"]

    def test_delete(self, db_engine, owned):
        owner, idea_id = owned
        m = milestone_service.create_milestone(db_engine, idea_id, owner, title="Drop me")
        milestone_service.delete_milestone(db_engine, uuid.UUID(m["id"]), owner)
        assert milestone_service.list_milestones(db_engine, idea_id) == []


# ===========================================================================
# Taxonomy
# ===========================================================================
class TestTaxonomy:
    def test_seeded_lookup_data_sorted(self, db_engine):
        categories = [c["name"] for c in taxonomy_service.list_categories(db_engine)]
        tags = [t["name"] for t in taxonomy_service.list_tags(db_engine)]
        assert categories == sorted(categories)
        assert "Technology" in categories
        assert tags == sorted(tags)
        assert "open-source" in tags

    def test_set_idea_tags_replaces_set(self, db_engine):
        owner = make_profile(db_engine)
        idea_id = make_idea(db_engine, owner)
        ai, web, mobile = _tag_ids(db_engine, "ai", "web", "mobile")

        taxonomy_service.set_idea_tags(db_engine, idea_id, owner, [ai, web])
        result = taxonomy_service.set_idea_tags(db_engine, idea_id, owner, [web, mobile])

        assert [t["name"] for t in result] == ["mobile", "web"]
        assert [t["name"] for t in taxonomy_service.get_idea_tags(db_engine, idea_id)] == [
            "mobile", "web",
        ]

    def test_set_idea_tags_owner_only(self, db_engine):
        owner, other = make_profile(db_engine), make_profile(db_engine)
        idea_id = make_idea(db_engine, owner)
        with pytest.raises(PermissionDeniedError):
            taxonomy_service.set_idea_tags(db_engine, idea_id, other, _tag_ids(db_engine, "ai"))
