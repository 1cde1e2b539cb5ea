#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import os
from datetime import datetime, timedelta, timezone

from metraweather.lightning import Credentials, RescheduleMode, StrikeFormat, StrikesAPI


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Receive each chunk of strikes once it has finalised")
    p.add_argument("--chunk", default="PT15M", help="ISO-8601 chunk duration")
    p.add_argument("--aligned", action="store_true", help="Align fetches to chunk boundaries")
    p.add_argument("--duration", type=int, default=3600, help="Seconds to run")
    p.add_argument("--out", default=None, help="Directory to save each chunk in")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO)
    start = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0) - timedelta(hours=1)

    async with StrikesAPI(credentials=Credentials.api_key(os.environ["LIGHTNING_API_KEY"])) as api:
        query = api.build_query(bbox=(-180, -90, 180, 90), start=start)

        async def on_chunk(result):
            print(f"CHUNK {result.start.isoformat()} - {result.end.isoformat()} | {await result.collection.count()} strikes")
            if args.out:
                name = f"strikes-{result.start.strftime('%Y%m%dT%H%M')}.csv"
                await api.persist(result.collection, args.out, name)

        timer = api.fetch_when_finalised(
            StrikeFormat.CSV,
            args.chunk,
            query,
            on_chunk,
            reschedule=RescheduleMode.ALIGNED if args.aligned else RescheduleMode.FIXED,
        )
        await asyncio.sleep(1)
        print(f"Next fetch at {timer.next_fetch_at}")
        await asyncio.sleep(args.duration)


if __name__ == "__main__":
    asyncio.run(main())
