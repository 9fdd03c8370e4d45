"""
ideashare.constants — Shared Constants
=======================================

Single source of truth for limits used by services and routes.
The level table lives in :mod:`ideashare.engine.levels`.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Content limits
# ---------------------------------------------------------------------------
MAX_USERNAME_LENGTH = 50
MAX_TITLE_LENGTH = 200
MAX_TAG_NAME_LENGTH = 50

# Search queries this short return nothing (matches the search box behaviour)
MIN_SEARCH_QUERY_LENGTH = 3

# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
DEFAULT_NOTIFICATION_LIMIT = 50

# ---------------------------------------------------------------------------
# Atomic counters: (table, column) pairs ``increment_counter`` may touch
# ---------------------------------------------------------------------------
COUNTER_COLUMNS: frozenset[tuple[str, str]] = frozenset({
    ("ideas", "share_count"),
})
