"""Effects API — POST /api/effects.

Applies a timed shield or damage buff to the actor.  The new effect replaces
whatever was active; the swap itself happens in the tick context.
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
    BridgeError,
    EffectCommand,
    EffectKind,
    NotReadyError,
    ValidationError,
)

router = APIRouter(prefix="/api", tags=["effects"])


class EffectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    effect: str | None = None
    custom_name: str | None = Field(None, alias="Custom Name")
    duration: int | None = None
    value: float | None = None

    def to_command(self, cfg: Settings) -> EffectCommand:
        if not self.effect:
            raise ValidationError("Effect type is required")
        kind = EffectKind.parse(self.effect)
        return EffectCommand(
            kind=kind,
            source=self.custom_name or cfg.default_effect_source,
            duration_ms=self.duration if self.duration and self.duration > 0 else cfg.default_effect_duration_ms,
            magnitude=self.value if self.value and self.value > 0 else cfg.default_effect_value,
        )


@router.post("/effects")
async def apply_effect(request: Request):
    """Apply a buff effect to the actor."""
    try:
        context = get_context(request)
        body = await read_json_object(request)
        try:
            payload = EffectRequest.model_validate(body)
        except PydanticValidationError as e:
            raise ValidationError(describe_validation_error(e)) from e

        command = payload.to_command(get_settings(request))
        if not context.accepting:
            raise NotReadyError("Game world is not ready")

        await asyncio.wrap_future(context.submit_effect(command))
    except BridgeError as e:
        return error_response(str(e), e.status_code)
    except Exception:
        logger.exception("Effects request error")
        return error_response("Failed to apply effect", 500)

    logger.info(
        f"API Effect: {command.kind.value} {command.magnitude}% for "
        f"{command.duration_ms}ms from '{command.source}'"
    )
    return JSONResponse({
        "success": True,
        "message": f"Applied {command.kind.value} buff",
        "effect": command.kind.value,
        "customName": command.source,
        "duration": command.duration_ms,
        "value": command.magnitude,
    })
