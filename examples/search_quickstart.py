#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio

from tabula.client import ClientOptions, TabulaClient


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Full-text search across a Tabula branch")
    p.add_argument("query")
    p.add_argument("tables", nargs="*", help="Restrict to these tables")
    p.add_argument("--fuzziness", type=int, default=None)
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    async with TabulaClient(ClientOptions.from_env()) as client:
        grouped = await client.search.by_table(
            args.query, tables=args.tables or None, fuzziness=args.fuzziness
        )
        for table, records in grouped.items():
            print(f"{table} ({len(records)})")
            for record in records:
                print(f"  {record.id}: {record.to_dict()}")


if __name__ == "__main__":
    asyncio.run(main())
