"""Error taxonomy shared by the gateway and the tick context.

Anything raised that is not a ``BridgeError`` is treated as an internal
failure by the gateway (HTTP 500).
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for expected, caller-visible failures."""

    status_code = 400


class ValidationError(BridgeError):
    """Malformed, missing or out-of-range request field."""


class NotReadyError(BridgeError):
    """The simulation is not in a state that accepts mutation."""


class UnknownKindError(BridgeError):
    """A requested monster or effect kind is not recognised."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"Monster '{name}' not found")


class PlacementRejected(BridgeError):
    """A single unit could not be placed.  Counted, never surfaced alone."""

    def __init__(self, tile: tuple[int, int], reason: str = "blocked") -> None:
        self.tile = tile
        self.reason = reason
        super().__init__(f"{reason} at {tile}")
