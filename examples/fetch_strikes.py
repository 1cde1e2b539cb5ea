#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import os
from datetime import datetime, timedelta, timezone

from metraweather.lightning import Credentials, StrikeFormat, StrikesAPI


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch every strike of a finalised window and save it")
    p.add_argument("--bbox", nargs=4, type=float, default=[165.0, -48.0, 179.0, -34.0])
    p.add_argument("--hours", type=int, default=1, help="Window length, ending an hour ago")
    p.add_argument("--format", default=StrikeFormat.GEOJSON_V3.value, help="MIME type of the response")
    p.add_argument("--out", default="strikes", help="Output directory")
    p.add_argument("--file", default="strikes.json", help="Output file name")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    end = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0) - timedelta(hours=1)
    start = end - timedelta(hours=args.hours)

    async with StrikesAPI(credentials=Credentials.api_key(os.environ["LIGHTNING_API_KEY"])) as api:
        query = api.build_query(bbox=args.bbox, start=start, end=end)
        collection = await api.fetch_all(args.format, query)
        print(f"{await collection.count()} strikes between {start.isoformat()} and {end.isoformat()}")
        path = await api.persist(collection, args.out, args.file)
        print(f"Saved to {path}")


if __name__ == "__main__":
    asyncio.run(main())
