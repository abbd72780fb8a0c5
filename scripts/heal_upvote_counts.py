#!/usr/bin/env python
"""
Recompute every issue's cached upvote count from its upvote ledger.

Reads repair drifted counts lazily; this script does the whole table in one
pass, e.g. after importing legacy data.
"""

# Standard library imports
import argparse
import asyncio
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Third-party imports
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Local application imports
from civicvoice.core.db import build_async_engine, build_session_factory
from civicvoice.core.monitoring import get_logger
from civicvoice.models import Issue
from civicvoice.services.issues.issue_store import IssueStore
from civicvoice.settings import get_settings

logger = get_logger("civicvoice.scripts.heal_upvote_counts")

BATCH_SIZE = 200


async def heal_upvote_counts(session_factory: async_sessionmaker[AsyncSession], dry_run: bool = False) -> int:
    """Returns the number of issues whose count was (or would be) rewritten."""
    async with session_factory() as session:
        issue_ids = list((await session.execute(select(Issue.id).order_by(Issue.id))).scalars().all())
        await session.rollback()

    logger.info(f"Checking {len(issue_ids)} issues")
    healed = 0
    for start in range(0, len(issue_ids), BATCH_SIZE):
        batch = issue_ids[start : start + BATCH_SIZE]
        async with session_factory() as session:
            store = IssueStore(session)
            for issue_id in batch:
                outcome = await store.heal_upvote_count(issue_id)
                if outcome is None:
                    continue
                count, rewritten = outcome
                if rewritten:
                    healed += 1
                    logger.warning(f"Issue {issue_id}: upvote count reset to {count}")
            if dry_run:
                await store.rollback()
            else:
                await store.commit()

    logger.info(f"{'Would heal' if dry_run else 'Healed'} {healed} issue(s)")
    return healed


async def main(dry_run: bool) -> None:
    engine = build_async_engine(get_settings())
    try:
        await heal_upvote_counts(build_session_factory(engine), dry_run=dry_run)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--dry-run", action="store_true", help="report drift without writing")
    args = parser.parse_args()
    asyncio.run(main(args.dry_run))
