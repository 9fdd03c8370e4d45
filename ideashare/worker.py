"""
ideashare.worker — Outbox Replay Worker
=========================================

Finishes engagement sagas that were interrupted: a point award or a
notification that failed (store outage, crash between steps) is still
``pending`` in ``side_effects`` and is applied here, in step order.

Wiring:
1. Load .env (secrets).
2. Load config.yaml (replay cadence, batch size, attempt limit).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Loop: replay a batch every ``outbox_replay_seconds``.

The replay itself is synchronous and runs on a thread via ``run_db()``
so the loop stays responsive to cancellation.

Run with::

    python -m ideashare.worker
"""

from __future__ import annotations

import asyncio
import logging

from dotenv import load_dotenv
from sqlalchemy import Engine

from ideashare.config import IdeaShareConfig, load_config
from ideashare.database.engine import create_db_engine, init_db, run_db
from ideashare.services.outbox_service import replay_pending

logger = logging.getLogger(__name__)


async def replay_once(engine: Engine, cfg: IdeaShareConfig) -> dict:
    return await run_db(
        replay_pending,
        engine,
        limit=cfg.outbox_batch_size,
        max_attempts=cfg.outbox_max_attempts,
    )


async def replay_loop(engine: Engine, cfg: IdeaShareConfig) -> None:
    """Replay pending side effects forever.  A failed round is logged and
    the next one runs on schedule.
    """
    logger.info(
        "Outbox worker started (every %ds, batch %d, max attempts %d)",
        cfg.outbox_replay_seconds, cfg.outbox_batch_size, cfg.outbox_max_attempts,
    )
    while True:
        try:
            result = await replay_once(engine, cfg)
            if result["failed"]:
                logger.warning(
                    "Replay round left %d sagas failing", result["failed"],
                )
        except Exception:
            logger.exception("Outbox replay round failed", extra={"task": "outbox_replay"})
        await asyncio.sleep(cfg.outbox_replay_seconds)


def main() -> None:
    """Bootstrap and run the replay worker."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    )

    load_dotenv()
    cfg = load_config()
    logger.info("Config loaded, community: %s", cfg.community_name)

    engine = create_db_engine()
    init_db(engine)

    try:
        asyncio.run(replay_loop(engine, cfg))
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
