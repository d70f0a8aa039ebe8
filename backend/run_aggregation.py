from __future__ import annotations
import argparse
import asyncio

from jobhub.core.config import settings
from jobhub.core.logging import configure_logging
from jobhub.db.database import SessionLocal
from jobhub.db.init_db import init_db
from jobhub.pipeline.views import TimeFilter
from jobhub.providers.registry import build_adapters
from jobhub.services.aggregation import Aggregator
from jobhub.services.feed import JobFeed


def summarize(feed: JobFeed) -> dict:
    return {
        "cycle": feed.cycle,
        "filter": feed.current_filter.value,
        "count": len(feed.jobs),
        "fallback": feed.using_fallback,
        "sources": [outcome.as_dict() for outcome in feed.outcomes],
    }


async def main(time_filter: TimeFilter, watch: float) -> None:
    feed = JobFeed(Aggregator(SessionLocal, build_adapters(settings), cfg=settings))
    try:
        if time_filter.is_salary_sort:
            await feed.load()
        await feed.set_filter(time_filter)
        print(summarize(feed))
        if watch > 0:
            feed.start_auto_refresh(watch)
            while True:
                await asyncio.sleep(watch)
                print(summarize(feed))
    finally:
        await feed.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run one job aggregation cycle")
    parser.add_argument("--filter", default=TimeFilter.LATEST.value, choices=[f.value for f in TimeFilter])
    parser.add_argument("--watch", type=float, default=float(settings.feed_refresh_seconds))
    args = parser.parse_args()

    configure_logging()
    init_db()
    try:
        asyncio.run(main(TimeFilter(args.filter), args.watch))
    except KeyboardInterrupt:
        pass
