#!/usr/bin/env python3
"""School ERP smoke suites — sequential HTTP checks against a running API.

Suites:
  - finance         login, fee structures, dues, payment report, invoices
  - mess            hygiene checks, allergies, menus, meals, variants
  - transportation  drivers, vehicles, routes, trip lifecycle
  - docx            upload a Word question paper and create a test from it

Usage:
    python scripts/smoke.py                                   # all suites except docx
    python scripts/smoke.py --suite finance --suite mess
    python scripts/smoke.py --suite docx --docx paper.docx --pattern-id <id>
    python scripts/smoke.py --url http://localhost:5000/api/v1 --json

Exit codes:
    0 = all checks passed
    1 = one or more checks failed
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from school_erp.config import settings
from school_erp.smoke.runner import exit_code, format_report, report_json, run_suites
from school_erp.smoke.suites import SUITES, docx_suite

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("smoke")

DEFAULT_SUITES = ("finance", "mess", "transportation")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="School ERP smoke suites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--suite", action="append", choices=sorted(SUITES), dest="suites",
                        help="Suite to run (repeatable; default: finance, mess, transportation)")
    parser.add_argument("--url", type=str, default=settings.api_base_url,
                        help=f"API root including the prefix (default: {settings.api_base_url})")
    parser.add_argument("--docx", type=Path, default=None,
                        help="Word file for the docx suite")
    parser.add_argument("--pattern-id", type=str, default="",
                        help="Exam pattern id sent with the upload")
    parser.add_argument("--timeout", type=float, default=settings.REQUEST_TIMEOUT_SECONDS,
                        help="HTTP timeout in seconds")
    parser.add_argument("--json", dest="output_json", action="store_true",
                        help="Output results as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each failing check")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    names = args.suites or list(DEFAULT_SUITES)
    suites = [
        docx_suite(args.docx, args.pattern_id) if name == "docx" else SUITES[name]()
        for name in names
    ]

    if not args.output_json:
        print(f"""
{'=' * 60}
  SCHOOL ERP — SMOKE SUITES
  Target : {args.url}
  Time   : {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}
{'=' * 60}""")

    report = run_suites(suites, args.url, timeout=args.timeout)

    if args.output_json:
        print(report_json(report))
    else:
        print(format_report(report, {suite.name: suite.title for suite in suites}))

    sys.exit(exit_code(report))


if __name__ == "__main__":
    main()
