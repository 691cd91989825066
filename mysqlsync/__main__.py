"""CLI entry-point:  python -m mysqlsync [OPTIONS]

Examples:
    python -m mysqlsync --config sync.yaml
    python -m mysqlsync --config sync.yaml --incremental --workers 8 -v
    python -m mysqlsync --config sync.yaml --dry-run --output ./dumps
"""

import argparse
import json
import logging
import sys

from .client import Synchronizer

logger = logging.getLogger(__name__)


def _log_summary(results: list) -> None:
    """Print a human-readable summary of sync results."""
    total_rows = 0
    errors = []

    logger.info("=" * 72)
    logger.info("SYNC SUMMARY")
    logger.info("=" * 72)

    for r in results:
        if r.get("status") == "error":
            errors.append(r)
            logger.error(
                "  %-32s  ERROR: %s", r["table"], r.get("error", "unknown"),
            )
            continue

        total_rows += r["rows_read"]
        logger.info(
            "  %-32s  %8d rows | %-11s | +%d ~%d | %6.1fs",
            r["table"], r["rows_read"], r["mode"], r["rows_inserted"],
            r["rows_updated"], r.get("duration_seconds", 0),
        )

    logger.info("-" * 72)
    logger.info(
        "Completed: %d table(s) | %d total rows",
        len(results) - len(errors), total_rows,
    )
    if errors:
        logger.warning("Failed: %d table(s)", len(errors))
    logger.info("=" * 72)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="mysqlsync",
        description="Copy (and optionally anonymize) the rows of one MySQL schema into another.",
    )
    parser.add_argument(
        "--config",
        required=True,
        help="Path to YAML or JSON config file",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Script file or directory (overrides config)",
    )
    parser.add_argument(
        "--incremental",
        action="store_true",
        default=None,
        help="Only load rows created or modified since the last sync",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Write scripts only, execute nothing on the target",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of tables to sync in parallel (overrides config)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug-level logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        synchronizer = Synchronizer.from_config(
            args.config,
            output=args.output,
            incremental=args.incremental,
            dry_run=args.dry_run,
            max_workers=args.workers,
        )
    except Exception as exc:
        logger.error("Failed to load config: %s", exc)
        sys.exit(1)

    logger.info("Synchronizer: %s", synchronizer)

    try:
        results = synchronizer.run()
    except Exception as exc:
        logger.error("Sync failed: %s", exc)
        sys.exit(1)

    _log_summary(results)

    for r in results:
        print(json.dumps(r, indent=2))


if __name__ == "__main__":
    main()
