"""
ideashare.services.outbox_service — Durable Side-Effect Outbox
================================================================

Every engagement action is a small saga:

    1. primary write (like / comment / follow / share)
    2. award points
    3. emit notification

Steps 2 and 3 are queued as ``side_effects`` rows in the SAME transaction
as step 1, then applied one transaction per step.  Applying a step first
claims its row with a conditional ``UPDATE ... WHERE status = 'pending'``
and performs the effect in that same transaction, so a step lands at most
once even if the live request and the replay worker race for it.

Failure policy:
    * the live path is fail-fast: the first failing step re-raises and the
      later steps of that saga are not attempted;
    * the failure is recorded on the row (``attempts``, ``last_error``);
      after ``max_attempts`` the row is parked as ``failed``;
    * :func:`replay_pending` resumes sagas that still have pending steps,
      in step order, and never runs a step past a ``failed`` one.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import Engine, func, select, update
from sqlalchemy.orm import Session

from ideashare.database.engine import get_session
from ideashare.database.models import (
    ActionKind,
    SideEffect,
    SideEffectKind,
    SideEffectStatus,
)
from ideashare.engine.actions import SideEffectStep
from ideashare.errors import PersistenceError, ValidationError
from ideashare.services.notification_service import insert_notification
from ideashare.services.points_service import apply_points

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
MAX_ERROR_LENGTH = 500


def _uuid(value: str | None) -> uuid.UUID | None:
    return uuid.UUID(value) if value else None


def side_effect_to_dict(row: SideEffect) -> dict:
    return {
        "id": row.id,
        "saga_id": str(row.saga_id),
        "action": row.action,
        "step": row.step,
        "kind": row.kind,
        "payload": row.payload,
        "status": row.status,
        "attempts": row.attempts,
        "last_error": row.last_error,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "completed_at": row.completed_at.isoformat() if row.completed_at else None,
    }


# ---------------------------------------------------------------------------
# Enqueue: called inside the primary write's transaction
# ---------------------------------------------------------------------------
def enqueue(
    session: Session,
    action: ActionKind,
    steps: Sequence[SideEffectStep],
) -> uuid.UUID | None:
    """Persist *steps* as one pending saga.  Returns its id (``None`` if empty)."""
    if not steps:
        return None
    saga_id = uuid.uuid4()
    for number, step in enumerate(steps, start=1):
        session.add(SideEffect(
            saga_id=saga_id,
            action=action.value,
            step=number,
            kind=step.kind.value,
            payload=dict(step.payload),
            status=SideEffectStatus.PENDING.value,
            attempts=0,
        ))
    session.flush()
    return saga_id


# ---------------------------------------------------------------------------
# Apply
# ---------------------------------------------------------------------------
def _decode(row: SideEffect) -> tuple[SideEffectKind, dict]:
    """Parse a stored step into its kind and typed arguments.

    A row that cannot be parsed raises :class:`ValidationError` so it is
    recorded and parked like any other failing step.
    """
    try:
        kind = SideEffectKind(row.kind)
        payload = row.payload
        if kind == SideEffectKind.AWARD_POINTS:
            return kind, {
                "user_id": uuid.UUID(payload["user_id"]),
                "delta": int(payload["delta"]),
            }
        return kind, {
            "user_id": uuid.UUID(payload["user_id"]),
            "type_": payload["type"],
            "message": payload["message"],
            "sender_id": _uuid(payload.get("sender_id")),
            "idea_id": _uuid(payload.get("idea_id")),
            "comment_id": _uuid(payload.get("comment_id")),
        }
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValidationError(
            f"Malformed {row.kind} step {row.id}: {type(exc).__name__} {exc}"
        ) from exc


def _apply_effect(session: Session, row: SideEffect) -> None:
    kind, args = _decode(row)
    if kind == SideEffectKind.AWARD_POINTS:
        apply_points(session, args["user_id"], args["delta"])
    else:
        insert_notification(session, **args)


def _record_failure(
    engine: Engine,
    step_id: int,
    exc: Exception,
    max_attempts: int,
) -> None:
    """Bump ``attempts`` and park the row once it is out of attempts."""
    try:
        with get_session(engine) as session:
            row = session.get(SideEffect, step_id)
            if row is None or row.status != SideEffectStatus.PENDING:
                return
            row.attempts += 1
            row.last_error = f"{type(exc).__name__}: {exc}"[:MAX_ERROR_LENGTH]
            if row.attempts >= max_attempts:
                row.status = SideEffectStatus.FAILED.value
                logger.warning(
                    "Side effect %d (%s, saga %s) failed %d times, parked",
                    row.id, row.kind, row.saga_id, row.attempts,
                )
    except PersistenceError:
        logger.exception("Could not record failure of side effect %d", step_id)


def apply_step(
    engine: Engine,
    step_id: int,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> bool:
    """Apply one pending step.

    Returns ``True`` if the effect was applied by this call, ``False`` if
    the row was no longer pending.  Any error is recorded on the row and
    re-raised.
    """
    try:
        with get_session(engine) as session:
            claimed = session.execute(
                update(SideEffect)
                .where(
                    SideEffect.id == step_id,
                    SideEffect.status == SideEffectStatus.PENDING.value,
                )
                .values(
                    status=SideEffectStatus.DONE.value,
                    attempts=SideEffect.attempts + 1,
                    last_error=None,
                    completed_at=datetime.now(UTC),
                )
                .execution_options(synchronize_session=False)
            ).rowcount
            if not claimed:
                return False
            row = session.get(SideEffect, step_id, populate_existing=True)
            _apply_effect(session, row)
            return True
    except Exception as exc:
        _record_failure(engine, step_id, exc, max_attempts)
        raise


def run_saga(
    engine: Engine,
    saga_id: uuid.UUID,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> int:
    """Apply the pending steps of *saga_id* in order.  Returns steps applied.

    Stops (without raising) at a parked ``failed`` step; re-raises the
    first error of a step it tries to apply.
    """
    with get_session(engine) as session:
        steps = session.execute(
            select(SideEffect.id, SideEffect.status)
            .where(SideEffect.saga_id == saga_id)
            .order_by(SideEffect.step)
        ).all()

    applied = 0
    for step_id, status in steps:
        if status == SideEffectStatus.DONE:
            continue
        if status == SideEffectStatus.FAILED:
            logger.warning("Saga %s blocked at parked step %d", saga_id, step_id)
            break
        if apply_step(engine, step_id, max_attempts=max_attempts):
            applied += 1
    return applied


# ---------------------------------------------------------------------------
# Replay: resumes sagas interrupted by a crash or a failed step
# ---------------------------------------------------------------------------
def replay_pending(
    engine: Engine,
    *,
    limit: int = 100,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> dict:
    """Resume up to *limit* sagas with pending steps, oldest first.

    Returns ``{"checked": N, "applied": M, "failed": F, "timestamp": ...}``
    where ``failed`` counts sagas that stopped on an error this round.
    """
    with get_session(engine) as session:
        saga_ids = session.scalars(
            select(SideEffect.saga_id)
            .where(SideEffect.status == SideEffectStatus.PENDING.value)
            .group_by(SideEffect.saga_id)
            .order_by(func.min(SideEffect.id))
            .limit(limit)
        ).all()

    applied = 0
    failed = 0
    for saga_id in saga_ids:
        try:
            applied += run_saga(engine, saga_id, max_attempts=max_attempts)
        except Exception:
            failed += 1
            logger.warning("Replay of saga %s stopped on error", saga_id, exc_info=True)

    if saga_ids:
        logger.info(
            "Outbox replay: %d sagas checked, %d steps applied, %d sagas failed",
            len(saga_ids), applied, failed,
        )

    return {
        "checked": len(saga_ids),
        "applied": applied,
        "failed": failed,
        "timestamp": datetime.now(UTC).isoformat(),
    }


def list_side_effects(
    engine: Engine,
    status: SideEffectStatus | str | None = None,
    limit: int = 100,
) -> list[dict]:
    """Outbox rows, oldest first, optionally filtered by *status*."""
    query = select(SideEffect).order_by(SideEffect.id).limit(limit)
    if status is not None:
        query = query.where(SideEffect.status == SideEffectStatus(status).value)
    with get_session(engine) as session:
        return [side_effect_to_dict(row) for row in session.scalars(query).all()]
