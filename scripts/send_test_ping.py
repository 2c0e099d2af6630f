#!/usr/bin/env python3
"""Send a synthetic coordinate ping to a running webhook.

This posts the same payload shape the automation source sends, so it
exercises extraction, storage and the Slack relay end to end.

Usage:
    # Preview the payload only
    python scripts/send_test_ping.py --dry-run

    # Send to a local functions-framework server
    python scripts/send_test_ping.py --url http://localhost:8080/webhook

    # Send a specific coordinate
    python scripts/send_test_ping.py --x 120 --y 64 --z -3400
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone

import requests

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def build_payload(x: int, y: int, z: int) -> dict:
    """Build a webhook body holding one embed."""
    return {
        "embeds": [
            {
                "title": "[TEST] Coordinate ping",
                "description": f"Coords: X: {x}, Y: {y}, Z: {z}",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        ]
    }


def main():
    parser = argparse.ArgumentParser(
        description="Send a test coordinate ping to the webhook",
    )
    parser.add_argument(
        "--url",
        type=str,
        default="http://localhost:8080/webhook",
        help="Webhook URL (default: http://localhost:8080/webhook)",
    )
    parser.add_argument("--x", type=int, default=-187677, help="X coordinate")
    parser.add_argument("--y", type=int, default=-47, help="Y coordinate")
    parser.add_argument("--z", type=int, default=159415, help="Z coordinate")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the payload without sending it",
    )
    args = parser.parse_args()

    payload = build_payload(args.x, args.y, args.z)
    print(json.dumps(payload, indent=2))

    if args.dry_run:
        logger.info("Dry run - nothing sent")
        return 0

    try:
        response = requests.post(args.url, json=payload, timeout=10)
    except requests.RequestException as e:
        logger.error("Failed to reach %s: %s", args.url, e)
        return 1

    logger.info("Response (%d): %s", response.status_code, response.text)
    return 0 if response.ok else 1


if __name__ == "__main__":
    sys.exit(main())
