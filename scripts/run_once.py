#!/usr/bin/env python3
"""Run a single aggregation pass and print the result."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Aggregate friend feeds once")
    parser.add_argument("--json", action="store_true", help="print the JSON array only")
    args = parser.parse_args()

    from friendfeed.errors import FriendFeedError
    from friendfeed.pipeline.aggregator import run_aggregation

    try:
        entries = asyncio.run(run_aggregation())
    except FriendFeedError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps([e.to_dict() for e in entries], ensure_ascii=False, indent=2))
        return

    print("\n" + "=" * 50)
    print("FRIEND FEEDS")
    print("=" * 50 + "\n")

    for entry in entries:
        print(f"  {entry.published_at:%Y-%m-%d}  [{entry.source_name}] {entry.title}")
        print(f"              {entry.link}")

    sources = {e.source_name for e in entries}
    print(f"\nRESULTS: {len(entries)} entries from {len(sources)} sources\n")


if __name__ == "__main__":
    main()
