#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging

from app.gog import fetch_by_id, fetch_by_title
from metadata.types import Platform


def _print_row(idx, row):
    year = row.release.year if row.release else "-"
    platforms = ",".join(sorted(p.value for p in row.platforms)) or "-"
    has_description = "yes" if row.has_description else "no"
    print(f"{idx}. {row.title} | id={row.id} | {year} | {platforms} | description={has_description}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Resolve GOG game metadata by title or id.")
    parser.add_argument("query", nargs="+", help="game title, or product id with --id")
    parser.add_argument("--id", action="store_true", help="treat the query as a GOG product id")
    parser.add_argument("--platform", action="append", choices=[p.value for p in Platform], default=[])
    parser.add_argument("--max-results", type=int, default=5)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    query = " ".join(args.query).strip()
    if args.id:
        row = fetch_by_id(query)
        if row is None:
            print(f"id={query!r} unresolved")
            return 1
        _print_row(1, row)
        return 0

    rows = fetch_by_title(query, {Platform(p) for p in args.platform}, args.max_results)
    print(f"query={query!r} results={len(rows)}")
    for idx, row in enumerate(rows, start=1):
        _print_row(idx, row)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
