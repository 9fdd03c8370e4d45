"""
tests/test_concurrent_awards.py — Counters Under Contention
=============================================================
Point awards and share counts are single UPDATE statements, so parallel
callers never lose an increment.  Runs on a file-backed SQLite database
so every thread gets its own connection.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from conftest import get_profile_row, make_idea, make_profile
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from ideashare.database.models import Base, Idea
from ideashare.services import social_service
from ideashare.services.points_service import award_points

WORKERS = 8


@pytest.fixture
def file_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'ideashare.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


def _run_together(calls: int, fn) -> list:
    """Start *calls* invocations of *fn* at the same moment and collect results."""
    barrier = threading.Barrier(calls)

    def _call():
        barrier.wait()
        return fn()

    with ThreadPoolExecutor(max_workers=calls) as pool:
        futures = [pool.submit(_call) for _ in range(calls)]
        return [f.result() for f in futures]


class TestConcurrentAwards:
    def test_parallel_awards_lose_nothing(self, file_engine):
        user = make_profile(file_engine)

        _run_together(WORKERS, lambda: award_points(file_engine, user, 5))

        stored = get_profile_row(file_engine, user)
        assert stored.points == WORKERS * 5

    def test_parallel_awards_cross_level_once(self, file_engine):
        user = make_profile(file_engine, points=90)

        _run_together(WORKERS, lambda: award_points(file_engine, user, 10))

        stored = get_profile_row(file_engine, user)
        assert stored.points == 90 + WORKERS * 10
        assert stored.level == "Intermediate"


class TestConcurrentShares:
    def test_two_simultaneous_shares(self, file_engine):
        owner, sharer = make_profile(file_engine), make_profile(file_engine)
        idea = make_idea(file_engine, owner)

        _run_together(2, lambda: social_service.share_idea(file_engine, idea, sharer))

        with Session(file_engine) as session:
            assert session.get(Idea, idea).share_count == 2
        assert get_profile_row(file_engine, owner).points == 6

    def test_many_simultaneous_shares(self, file_engine):
        owner = make_profile(file_engine)
        idea = make_idea(file_engine, owner)

        results = _run_together(WORKERS, lambda: social_service.share_idea(file_engine, idea))

        # Each caller saw its own increment
        assert sorted(r.share_count for r in results) == list(range(1, WORKERS + 1))
        with Session(file_engine) as session:
            assert session.get(Idea, idea).share_count == WORKERS
        assert get_profile_row(file_engine, owner).points == WORKERS * 3
