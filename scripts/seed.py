#!/usr/bin/env python3
"""Seed the School ERP database with the HR and transportation fixtures.

Seeders (run in this order by default):
  - hr              designations, departments, employees, salaries, leave (replaces)
  - transportation  routes and vehicles (skips existing)
  - drivers         drivers (skips existing)
  - trips           trips for the next days (skips existing; needs the above)

Usage:
    python scripts/seed.py                          # everything
    python scripts/seed.py --only transportation drivers
    python scripts/seed.py --database-url sqlite+aiosqlite:///./erp.db

Reads DATABASE_URL and SCHOOL_ID from the environment / .env.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from school_erp.seeding.runner import SEEDERS, SeedError, run_seeders

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("seed")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Seed HR and transportation fixtures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--only", nargs="+", choices=sorted(SEEDERS), metavar="SEEDER",
                        help=f"Run only these seeders ({', '.join(SEEDERS)})")
    parser.add_argument("--database-url", type=str, default=None,
                        help="Override DATABASE_URL")
    parser.add_argument("--school-id", type=str, default=None,
                        help="Override SCHOOL_ID")
    args = parser.parse_args()

    try:
        results = asyncio.run(run_seeders(
            args.only, database_url=args.database_url, school_id=args.school_id,
        ))
    except SeedError as e:
        logger.error("Seeding aborted: %s", e)
        sys.exit(1)

    print(f"\n{'=' * 60}")
    for name, counts in results.items():
        summary = ", ".join(f"{count} {kind}" for kind, count in counts.items()) or "nothing to do"
        print(f"  ✅ {name:<15} {summary}")
    print(f"{'=' * 60}")


if __name__ == "__main__":
    main()
