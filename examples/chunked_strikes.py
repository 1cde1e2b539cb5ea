#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import os
from datetime import datetime, timedelta, timezone

from metraweather.lightning import Credentials, StrikeFormat, StrikesAPI


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch a day of strikes in parallel chunks")
    p.add_argument("--days", type=int, default=1, help="Days back from the start of today (UTC)")
    p.add_argument("--chunk", default="PT1H", help="ISO-8601 chunk duration")
    p.add_argument("--parallel", type=int, default=10, help="Chunks fetched at once (max 20)")
    p.add_argument("--latest", action="store_true", help="Fetch up to the last finalised chunk instead")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    end = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    start = end - timedelta(days=args.days)

    async with StrikesAPI(credentials=Credentials.api_key(os.environ["LIGHTNING_API_KEY"])) as api:
        query = api.build_query(bbox=(-180, -90, 180, 90), start=start, end=end)
        if args.latest:
            chunks = await api.fetch_latest_chunked(
                StrikeFormat.BLITZEN_V3, args.chunk, query, max_parallel=args.parallel
            )
        else:
            chunks = await api.fetch_chunked(StrikeFormat.BLITZEN_V3, args.chunk, query, max_parallel=args.parallel)

        print(f"{'Start':25} | {'End':25} | {'Strikes':>8}")
        print("-" * 64)
        for chunk in chunks:
            print(f"{chunk.start.isoformat():25} | {chunk.end.isoformat():25} | {await chunk.collection.count():>8}")


if __name__ == "__main__":
    asyncio.run(main())
