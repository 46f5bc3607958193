"""Service description — GET / and GET /api.  Static, no side effects."""

from __future__ import annotations

from fastapi import APIRouter, Request

from app.routers.deps import get_settings
from spawnbridge.simulation import catalogue

router = APIRouter(tags=["info"])

ENDPOINTS = {
    "spawn": {
        "method": "POST",
        "url": "/api/spawn",
        "description": "Spawn monsters with custom names",
        "parameters": {
            "Monster Name": "string (required) - Name of monster to spawn",
            "Qty": "number (optional) - Quantity to spawn (default: 1)",
            "Custom Name": "string (optional) - Custom display name (default: Monster Name)",
        },
        "example": {
            "Monster Name": "Stone Golem",
            "Qty": 3,
            "Custom Name": "Guardian",
        },
    },
    "effects": {
        "method": "POST",
        "url": "/api/effects",
        "description": "Apply buff effects to player",
        "parameters": {
            "effect": "string (required) - 'shield' or 'damage'",
            "Custom Name": "string (optional) - Source identifier (default: 'API')",
            "duration": "number (optional) - Duration in milliseconds (default: 5000)",
            "value": "number (optional) - Percentage value (default: 50)",
        },
        "example": {
            "effect": "damage",
            "Custom Name": "Boss Buff",
            "duration": 3000,
            "value": 50,
        },
    },
}


@router.get("/")
@router.get("/api")
async def service_info(request: Request):
    cfg = get_settings(request)
    return {
        "service": cfg.app_name,
        "version": cfg.version,
        "status": "running",
        "endpoints": ENDPOINTS,
        "monsters": catalogue(),
    }
