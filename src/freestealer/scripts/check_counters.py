"""Report tiers whose stored vote/comment counters have drifted.

Exits with status 1 when any drift is found so it can gate deploys or cron
alerts. Counters are never rewritten by this script.
"""
from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy.orm import sessionmaker

from freestealer.core.logging import configure_logging
from freestealer.core.settings import settings
from freestealer.db.session import build_engine
from freestealer.services.counters import CounterDrift, CounterService, StorageFailureError

logger = logging.getLogger(__name__)


def format_drift(drift: CounterDrift) -> str:
    up, down, comments = drift.stored
    live_up, live_down, live_comments = drift.live
    return (
        f"tier {drift.tier_id}: upvotes {up} (live {live_up}), "
        f"downvotes {down} (live {live_down}), comments {comments} (live {live_comments})"
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Audit tier counters against live votes and comments")
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to DATABASE_URL)",
    )
    args = parser.parse_args(argv)

    configure_logging()
    engine = build_engine(args.url or settings.database_url_sync)
    service = CounterService(sessionmaker(bind=engine, autoflush=False))
    try:
        drifts = service.find_drift()
    except StorageFailureError as exc:
        print(f"[check_counters] ERROR: {exc}", file=sys.stderr)
        return 2
    finally:
        engine.dispose()

    for drift in drifts:
        print(format_drift(drift))
    if drifts:
        logger.warning("Counter drift found on %d tier(s)", len(drifts))
        return 1
    print("[check_counters] all counters consistent")
    return 0


if __name__ == "__main__":
    sys.exit(main())
