"""Shared request plumbing for the API routers."""

from __future__ import annotations

import json

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from app.config import Settings, settings as default_settings
from spawnbridge.simulation import BridgeContext, NotReadyError, ValidationError


def get_context(request: Request) -> BridgeContext:
    """Retrieve the BridgeContext the app was created with."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise NotReadyError("Game world is not ready")
    return context


def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or default_settings


async def read_json_object(request: Request) -> dict:
    """Decode the request body as a JSON object.

    An empty body reads as ``{}`` so that field-level validation reports the
    missing field; anything that is not a JSON object is a format error.
    """
    if not (await request.body()).strip():
        return {}
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON format") from None
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON format")
    return body


def describe_validation_error(exc: PydanticValidationError) -> str:
    """First field error as one readable sentence."""
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ())) or "body"
    return f"Invalid value for '{field}': {err.get('msg', 'invalid')}"


def error_response(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)
