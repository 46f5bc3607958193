"""Spawn API — POST /api/spawn.

Validation, kind lookup and offset rolls happen here on the request's own
task.  Placement and creation are handed to the tick context and awaited;
the caller gets the spawned count back, while custom names attach later and
best-effort.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from app.config import Settings
from app.routers.deps import (
    describe_validation_error,
    error_response,
    get_context,
    get_settings,
    read_json_object,
)
from spawnbridge.simulation import (
    BridgeContext,
    BridgeError,
    NotReadyError,
    SpawnCommand,
    ValidationError,
    for_name,
)

router = APIRouter(prefix="/api", tags=["spawn"])


class SpawnRequest(BaseModel):
    """Wire shape of a spawn request; keys keep their spaces."""

    model_config = ConfigDict(populate_by_name=True)

    monster_name: str | None = Field(None, alias="Monster Name")
    qty: int | None = Field(None, alias="Qty")
    custom_name: str | None = Field(None, alias="Custom Name")

    def to_command(self, context: BridgeContext, cfg: Settings) -> SpawnCommand:
        name = (self.monster_name or "").strip()
        if not name:
            raise ValidationError("Monster Name is required")

        kind = for_name(self.monster_name)

        qty = self.qty if self.qty is not None and self.qty > 0 else 1
        if qty > cfg.max_spawn_quantity:
            raise ValidationError(f"Qty must be at most {cfg.max_spawn_quantity}")

        return SpawnCommand(
            kind=kind,
            quantity=qty,
            display_name=self.custom_name or kind.value,
            offsets=context.random_offsets(qty),
        )


def spawn_message(spawned: int, requested: int) -> str:
    if spawned < requested:
        return f"Only spawned {spawned}/{requested} due to blocked positions"
    return f"Spawned {spawned} monsters"


@router.post("/spawn")
async def spawn_monsters(request: Request):
    """Spawn monsters around the actor with an optional custom name."""
    try:
        context = get_context(request)
        body = await read_json_object(request)
        try:
            payload = SpawnRequest.model_validate(body)
        except PydanticValidationError as e:
            raise ValidationError(describe_validation_error(e)) from e

        command = payload.to_command(context, get_settings(request))
        if not context.accepting:
            raise NotReadyError("Game world is not ready")

        result = await asyncio.wrap_future(context.submit_spawn(command))
    except BridgeError as e:
        return error_response(str(e), e.status_code)
    except Exception:
        logger.exception("Spawn request error")
        return error_response("Failed to spawn monsters", 500)

    logger.info(
        f"API Spawn: {result.spawned} x {command.kind.value} as '{command.display_name}'"
    )
    return JSONResponse({
        "success": True,
        "message": spawn_message(result.spawned, result.requested),
        "spawned": result.spawned,
        "requested": result.requested,
        "monsterType": payload.monster_name,
        "customName": command.display_name,
    })
