"""Cloud Function Entry Point.

This module provides the HTTP entry point for Google Cloud Functions.
It's a thin wrapper that receives coordinate pings from the automation
source, hands them to the ingestion pipeline and serves a health probe.
"""

import logging
import os
import json
from typing import Any

import functions_framework
from flask import Request

from coordlog.core.errors import StoreError
from coordlog.pipeline import IngestStatus
from coordlog.services import Services, build_services
from coordlog.shell.config_loader import load_config, load_config_from_env


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


_services: Services | None = None


def _get_config():
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    elif os.environ.get("STORE_BACKEND") or os.environ.get("SLACK_WEBHOOK_URL"):
        # Simple env-based config
        return load_config_from_env()
    else:
        # Try default config path
        return load_config()


def _get_services() -> Services:
    """Get or create the shared services (one store per instance).

    Notifications go to a background pool unless NOTIFY_INLINE (or
    notify_inline in the YAML) is set. Set it when the function runs with
    CPU throttled outside requests, or notifications may never be sent.
    """
    global _services
    if _services is None:
        _services = build_services(_get_config())
    return _services


def _handle_health() -> tuple[dict[str, Any], int]:
    """Report liveness and the current coordinate count."""
    try:
        count = _get_services().engine.count()
    except StoreError:
        logger.exception("Health probe could not reach the store")
        return {"status": "error", "message": "Store unavailable"}, 503

    return {"status": "online", "coords_logged": count}, 200


def _handle_webhook(request: Request) -> tuple[dict[str, Any], int]:
    """Ingest one coordinate ping."""
    payload = request.get_json(silent=True)
    logger.debug("Received webhook: %s", json.dumps(payload, indent=2, default=str))

    result = _get_services().pipeline.ingest_payload(payload)

    if result.status is IngestStatus.STORED:
        coordinate = result.coordinate
        return {
            "success": True,
            "id": coordinate.id,
            "coords": {"x": coordinate.x, "y": coordinate.y, "z": coordinate.z},
        }, 200

    if result.status is IngestStatus.REJECTED:
        return {"error": result.error}, 400

    return {"error": "Internal server error"}, 500


@functions_framework.http
def coordinate_webhook(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP Cloud Function entry point.

    Routes:
        GET  /         health probe with the coordinate count
        POST /webhook  ingest a ping ({"embeds": [{"description", "timestamp"}]})

    Args:
        request: Flask request object

    Returns:
        Tuple of (response dict, HTTP status code)
    """
    path = request.path.rstrip("/") or "/"

    try:
        if path == "/" and request.method == "GET":
            return _handle_health()

        if path == "/webhook" and request.method == "POST":
            return _handle_webhook(request)

    except Exception:
        logger.exception("Unexpected error handling %s %s", request.method, path)
        return {"error": "Internal server error"}, 500

    return {"error": "Not found"}, 404


# For local testing
if __name__ == "__main__":
    # Simple local test with a sample ping
    print("Ingesting a sample coordinate locally...")

    from werkzeug.test import EnvironBuilder

    builder = EnvironBuilder(
        path="/webhook",
        method="POST",
        json={"embeds": [{"description": "Coords: X: -187677, Y: -47, Z: 159415"}]},
    )
    response, status = coordinate_webhook(Request(builder.get_environ()))
    print(f"\nResponse ({status}):")
    print(json.dumps(response, indent=2))
