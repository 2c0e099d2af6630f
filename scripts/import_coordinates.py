#!/usr/bin/env python3
"""Copy coordinates from a JSON dump into the configured store.

Reads either the current {"next_id", "coordinates"} file or a legacy
bare-list dump and re-inserts every coordinate, oldest first, into the
store selected by the configuration (typically Firestore). New ids are
assigned by the target store.

Usage:
    # Preview what would be imported
    python scripts/import_coordinates.py coordinates.json --dry-run

    # Import into the store from config/config.yaml
    CONFIG_PATH=config/config.yaml python scripts/import_coordinates.py coordinates.json
"""

import argparse
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from coordlog.core.errors import StoreError
from coordlog.services import build_store
from coordlog.shell.config_loader import load_config
from coordlog.shell.coordinate_store import JsonFileCoordinateStore

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Import a JSON coordinate dump into the configured store",
    )
    parser.add_argument("source", help="Path to the JSON dump")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the coordinates without importing them",
    )
    args = parser.parse_args()

    try:
        source = JsonFileCoordinateStore(args.source)
    except StoreError as e:
        logger.error("Cannot read %s: %s", args.source, e)
        return 1

    total = source.count()
    coordinates = list(reversed(source.list_all(total))) if total else []
    logger.info("Found %d coordinates in %s", len(coordinates), args.source)

    if args.dry_run:
        for c in coordinates:
            print(f"#{c.id}: {c.x}, {c.y}, {c.z}")
        return 0

    config = load_config()
    target = build_store(config)
    logger.info("Importing into %s store", config.store_backend)

    for c in coordinates:
        try:
            stored = target.insert(c.x, c.y, c.z, c.raw, c.origin_timestamp)
        except StoreError as e:
            logger.error("Import stopped at #%d: %s", c.id, e)
            return 1
        logger.info("Imported #%d as #%d", c.id, stored.id)

    return 0


if __name__ == "__main__":
    sys.exit(main())
