"""Coordinate Command API - FastAPI service.

Exposes the coordinate commands (list, search, stats, delete, clear-all,
export) as a single Cloud Run service. Parameter ranges are enforced
here before the engine is called.
"""

import logging
import os
from typing import Any

from fastapi import FastAPI, Query, HTTPException, Header
from pydantic import BaseModel

from coordlog.commands import CommandReply
from coordlog.core.errors import StoreError
from coordlog.services import Services, build_services
from coordlog.shell.config_loader import load_config, load_config_from_env

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Coordinate Log API",
    description="Query and manage coordinates relayed from the automation webhook",
    version="1.0.0",
)


# ===== Data Models =====

class ClearAllRequest(BaseModel):
    confirm: bool = False


# ===== Services =====

_services: Services | None = None


def _get_services() -> Services:
    """Get or create the shared services."""
    global _services
    if _services is None:
        if os.environ.get("CONFIG_PATH"):
            config = load_config(os.environ["CONFIG_PATH"])
        else:
            config = load_config_from_env()
        _services = build_services(config)
        logger.info("Command API using %s store", config.store_backend)
    return _services


# ===== Helper Functions =====

def _reply_to_dict(reply: CommandReply) -> dict[str, Any]:
    """Convert CommandReply to API response format."""
    if not reply.success:
        raise HTTPException(status_code=500, detail=reply.text)

    return {
        "message": reply.text,
        "ephemeral": reply.ephemeral,
        **reply.data,
    }


def _verify_admin_key(x_admin_key: str | None) -> None:
    """Verify admin API key."""
    admin_api_key = _get_services().config.admin_api_key

    if not admin_api_key:
        raise HTTPException(status_code=500, detail="Admin API key not configured")

    if x_admin_key != admin_api_key:
        raise HTTPException(status_code=401, detail="Invalid admin key")


# ===== Public Endpoints =====

@app.get("/api-coords")
async def list_recent_coordinates(count: int = Query(default=10, ge=1, le=25)):
    """List the most recent coordinates."""
    return _reply_to_dict(_get_services().commands.list_recent(count))


@app.get("/api-search")
async def search_coordinates(
    x: int = Query(...),
    z: int = Query(...),
    radius: int = Query(default=1000, gt=0),
):
    """Search coordinates near a location, nearest first."""
    return _reply_to_dict(_get_services().commands.search(x, z, radius))


@app.get("/api-stats")
async def coordinate_stats():
    """Total coordinate count and the last coordinate logged."""
    return _reply_to_dict(_get_services().commands.stats())


@app.get("/api-export")
async def export_coordinates():
    """Export recent coordinates as "x, y, z" lines."""
    return _reply_to_dict(_get_services().commands.export())


@app.get("/health")
async def health_check():
    """Health check endpoint for Cloud Run."""
    try:
        count = _get_services().engine.count()
    except StoreError:
        logger.exception("Health check could not reach the store")
        raise HTTPException(status_code=503, detail="Store unavailable")

    return {"status": "healthy", "coords_logged": count}


# ===== Admin Endpoints =====

@app.delete("/api-coords/{coordinate_id}")
async def delete_coordinate(coordinate_id: int, x_admin_key: str | None = Header(default=None)):
    """Delete a coordinate by id."""
    _verify_admin_key(x_admin_key)

    reply = _get_services().commands.delete(coordinate_id)
    response = _reply_to_dict(reply)

    if not response["deleted"]:
        raise HTTPException(status_code=404, detail=reply.text)
    return response


@app.post("/api-clearall")
async def clear_all_coordinates(
    request: ClearAllRequest,
    x_admin_key: str | None = Header(default=None),
):
    """Delete all coordinates; requires {"confirm": true}."""
    _verify_admin_key(x_admin_key)

    reply = _get_services().commands.clear_all(confirm=request.confirm)
    response = _reply_to_dict(reply)

    if not response["confirmed"]:
        raise HTTPException(status_code=409, detail=reply.text)
    return response
