"""Communication primitives shared between the tick thread and observers."""
from .event_bus import EventBus

__all__ = ["EventBus"]
