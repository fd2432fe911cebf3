#!/usr/bin/env python3
"""Serve the aggregated friend feed over HTTP."""

import argparse
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn
from dotenv import load_dotenv


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Serve the friend feed aggregator")
    parser.add_argument("--host", default=os.environ.get("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", 8000)))
    args = parser.parse_args()

    from friendfeed.web.app import app

    print("\n" + "=" * 50)
    print("FRIEND FEEDS")
    print("=" * 50)
    print(f"Serving on http://{args.host}:{args.port}/")
    print("Press Ctrl+C to stop")
    print("=" * 50 + "\n")

    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
