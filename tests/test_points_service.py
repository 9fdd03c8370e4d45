"""
tests/test_points_service.py — Points & Level Engine (persistence)
====================================================================
"""

from __future__ import annotations

import uuid

import pytest
from conftest import get_profile_row, make_profile

from ideashare.database.models import Level
from ideashare.errors import NotFoundError, ValidationError
from ideashare.services.points_service import award_points


class TestAwardPoints:
    def test_adds_points(self, db_engine):
        user = make_profile(db_engine, points=10)
        profile = award_points(db_engine, user, 5)
        assert profile.points == 15
        assert profile.level == Level.BEGINNER

    def test_crossing_threshold_updates_level_in_same_write(self, db_engine):
        user = make_profile(db_engine, points=95)
        profile = award_points(db_engine, user, 10)
        assert profile.points == 105
        assert profile.level == Level.INTERMEDIATE

        stored = get_profile_row(db_engine, user)
        assert (stored.points, stored.level) == (105, "Intermediate")

    def test_landing_exactly_on_threshold(self, db_engine):
        user = make_profile(db_engine, points=998, level=Level.EXPERT)
        assert award_points(db_engine, user, 2).level == Level.MASTER

    def test_zero_delta_is_allowed(self, db_engine):
        user = make_profile(db_engine, points=42)
        assert award_points(db_engine, user, 0).points == 42

    def test_sequential_awards_accumulate(self, db_engine):
        user = make_profile(db_engine)
        for _ in range(20):
            award_points(db_engine, user, 5)
        stored = get_profile_row(db_engine, user)
        assert stored.points == 100
        assert stored.level == "Intermediate"

    @pytest.mark.parametrize("delta", [-1, 2.5, "3", True])
    def test_bad_delta_rejected(self, db_engine, delta):
        user = make_profile(db_engine, points=7)
        with pytest.raises(ValidationError):
            award_points(db_engine, user, delta)
        assert get_profile_row(db_engine, user).points == 7

    def test_missing_profile(self, db_engine):
        with pytest.raises(NotFoundError):
            award_points(db_engine, uuid.uuid4(), 5)
