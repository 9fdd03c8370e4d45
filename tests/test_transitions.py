"""
tests/test_transitions.py — State Machine Tables
==================================================
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from ideashare.database.models import MilestoneStatus
from ideashare.engine.transitions import (
    MILESTONE_TRANSITIONS,
    LikeState,
    ReadState,
    milestone_change,
    next_like_state,
    next_read_state,
)
from ideashare.errors import ValidationError

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
EARLIER = datetime(2026, 2, 1, 9, 30, tzinfo=UTC)


class TestLikeToggle:
    def test_toggle_flips(self):
        assert next_like_state(LikeState.UNLIKED) == LikeState.LIKED
        assert next_like_state(LikeState.LIKED) == LikeState.UNLIKED

    def test_two_toggles_return_to_start(self):
        for state in LikeState:
            assert next_like_state(next_like_state(state)) == state


class TestReadState:
    def test_unread_becomes_read(self):
        assert next_read_state(ReadState.UNREAD) == ReadState.READ

    def test_read_is_absorbing(self):
        assert next_read_state(ReadState.READ) == ReadState.READ

    def test_of(self):
        assert ReadState.of(True) == ReadState.READ
        assert ReadState.of(False) == ReadState.UNREAD


class TestMilestoneChange:
    def test_every_status_reaches_every_other(self):
        for source, targets in MILESTONE_TRANSITIONS.items():
            assert targets == frozenset(MilestoneStatus) - {source}

    def test_entering_completed_stamps_now(self):
        change = milestone_change("in_progress", "completed", completed_at=None, now=NOW)
        assert change.status == MilestoneStatus.COMPLETED
        assert change.completed_at == NOW
        assert change.changed

    def test_leaving_completed_clears_stamp(self):
        change = milestone_change("completed", "blocked", completed_at=EARLIER, now=NOW)
        assert change.status == MilestoneStatus.BLOCKED
        assert change.completed_at is None

    def test_same_status_is_noop(self):
        change = milestone_change("completed", "completed", completed_at=EARLIER, now=NOW)
        assert not change.changed
        assert change.completed_at == EARLIER

    def test_non_completed_move_keeps_no_stamp(self):
        change = milestone_change("planned", "in_progress", completed_at=None, now=NOW)
        assert change.completed_at is None

    @pytest.mark.parametrize("current, target", [("planned", "done"), ("paused", "planned")])
    def test_unknown_status_rejected(self, current, target):
        with pytest.raises(ValidationError):
            milestone_change(current, target, completed_at=None, now=NOW)
