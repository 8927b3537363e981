#!/usr/bin/env python3
"""
Check that every board column is numbered 0..n-1.

Usage:
    python -m scripts.audit_positions [--project UUID] [--repair]

With --repair, each broken column is renumbered in its current order.
Exits with status 1 if broken columns remain.
"""

import argparse
import asyncio
import sys
import uuid

from lanes.database import get_session_context
from lanes.services.positions import audit_positions, compact_column


async def main() -> int:
    parser = argparse.ArgumentParser(description="Audit task position density")
    parser.add_argument("--project", type=uuid.UUID, default=None, help="Only audit this project")
    parser.add_argument("--repair", action="store_true", help="Renumber broken columns")

    args = parser.parse_args()

    async with get_session_context() as session:
        reports = await audit_positions(session, args.project)

        if not reports:
            print("✓ All columns are dense")
            return 0

        for report in reports:
            print(f"✗ project={report.project_id} column={report.status.value} positions={report.positions}")

        if not args.repair:
            return 1

        for report in reports:
            changed = await compact_column(session, report.project_id, report.status)
            print(f"  repaired project={report.project_id} column={report.status.value} ({changed} renumbered)")

    print("✓ Repair complete")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
