#!/usr/bin/env python3
"""Export the employee directory to PDF and/or XLSX from the command line.

Run from the backend/ directory:

    python3 scripts/export_directory.py --token TOKEN [--output-dir DIR] [--format pdf|xlsx|both] [--verbose]

Fetches the employee list once with the given session token and writes
employee-list.pdf / employee-list.xlsx into the output directory. Each format
is checked against the permission gate for the token's role first.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from functools import partial
from pathlib import Path

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import HTTPException  # noqa: E402

from employee_directory.core.auth import identity_from_token  # noqa: E402
from employee_directory.core.config import Settings  # noqa: E402
from employee_directory.core.permissions import Capability, can, has_privilege  # noqa: E402
from employee_directory.services.directory_store import DirectoryStore  # noqa: E402
from employee_directory.services.employee_client import EmployeeClient  # noqa: E402
from employee_directory.services.export_service import ExportFormat, ExportService  # noqa: E402

logger = logging.getLogger(__name__)

_FORMAT_CAPABILITIES: dict[ExportFormat, Capability] = {
    ExportFormat.PDF: Capability.EXPORT_PDF,
    ExportFormat.XLSX: Capability.EXPORT_SPREADSHEET,
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export the employee directory to PDF and/or XLSX",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("EMPLOYEE_API_TOKEN", ""),
        help="Session bearer token (default: $EMPLOYEE_API_TOKEN)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory the export files are written to (default: current directory)",
    )
    parser.add_argument(
        "--format",
        choices=["pdf", "xlsx", "both"],
        default="both",
        help="Which export to produce (default: both)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


def requested_formats(choice: str) -> list[ExportFormat]:
    if choice == "both":
        return [ExportFormat.PDF, ExportFormat.XLSX]
    return [ExportFormat(choice)]


async def export_directory(args: argparse.Namespace, settings: Settings | None = None) -> int:
    settings = settings or Settings()
    try:
        identity = identity_from_token(args.token, settings)
    except HTTPException as e:
        logger.error("Invalid session token: %s", e.detail)
        return 2

    check = partial(has_privilege, grants=settings.ROLE_PRIVILEGES)
    formats = requested_formats(args.format)
    denied = [fmt for fmt in formats if not can(_FORMAT_CAPABILITIES[fmt], identity, check)]
    if denied:
        logger.error(
            "Not permitted to export: %s (role=%s)",
            ", ".join(fmt.value for fmt in denied),
            identity.role,
        )
        return 2

    client = EmployeeClient()
    await client.initialize(settings)
    try:
        store = DirectoryStore(identity, client, merge_saved_edits=settings.MERGE_SAVED_EDITS)
        logger.info("Fetching employees...")
        if not await store.load():
            logger.error("Could not load employees — nothing written")
            return 1
    finally:
        await client.close()

    records = store.records
    args.output_dir.mkdir(parents=True, exist_ok=True)
    exporter = ExportService()
    for fmt in formats:
        path = exporter.write(records, args.output_dir, fmt)
        logger.info("Exported %d employees to %s", len(records), path)

    return 0


def main() -> None:
    args = parse_args()
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")
    sys.exit(asyncio.run(export_directory(args)))


if __name__ == "__main__":
    main()
