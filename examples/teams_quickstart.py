#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace

from tabula.client import ClientOptions, TabulaClient, contains


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Query the teams table of a Tabula database")
    p.add_argument("term", nargs="?", default="fruits", help="Substring to look for in names")
    p.add_argument("size", nargs="?", type=int, default=20, help="Page size")
    p.add_argument("--branch", default=None, help="Branch (defaults to the environment)")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    options = ClientOptions.from_env()
    if args.branch:
        options = replace(options, branch=args.branch)

    async with TabulaClient(options) as client:
        query = client.db.teams.filter("name", contains(args.term)).sort("name", "asc")
        page = await query.get_paginated(page={"size": args.size})

        print("=" * 65)
        print(f"Branch     : {options.db_branch}")
        print(f"Filter     : name contains {args.term!r}")
        print("=" * 65)
        while True:
            for team in page:
                labels = ", ".join(team.get("labels") or ())
                name = str(team.get("name"))
                print(f"{team.id:24} | {name:30} | {labels}")
            if not page.has_next_page():
                break
            page = await page.next_page()
        print("=" * 65)


if __name__ == "__main__":
    asyncio.run(main())
