#!/usr/bin/env python3
"""
Validate a command database before deploying it.

Checks that every table the API needs is present, then prints the same
aggregate counts ``/api/stats`` reports. Exits non-zero when the file cannot
be opened or a table is missing.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog.errors import StorageUnavailableError
from catalog.sqlite_adapter import CommandCatalog
from observability.logging import setup_logging

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Check a Linux command library database")
    parser.add_argument("--db", default=os.getenv("DATABASE_PATH", "database.db"), help="Path to the SQLite database")
    parser.add_argument("--log-level", default="INFO", help="Log level")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")

    args = parser.parse_args(argv)
    setup_logging(level=args.log_level, use_json=args.json_logs)

    if not Path(args.db).is_file():
        logger.error(f"Database file not found: {args.db}")
        return 1

    catalog = CommandCatalog(args.db)
    try:
        catalog.initialize()
        stats = catalog.get_stats()
    except StorageUnavailableError as e:
        logger.error(f"Database check failed: {e.detail}")
        return 1
    finally:
        catalog.close()

    print(f"commands:         {stats.total_commands}")
    print(f"categories:       {stats.total_categories}")
    print(f"tips:             {stats.total_tips}")
    print(f"basic categories: {stats.total_basic_categories}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
