"""EffectManager — the single timed buff on the controlling actor.

At most one effect is active.  Applying a new one replaces the old without
carrying over its remaining time.  Expiry is checked once per tick against
the host clock in milliseconds.

A shield also heals the actor once, immediately, by a third of its
magnitude (capped at max health); that heal is not undone on expiry.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from .errors import UnknownKindError
from .world import WorldHost

if TYPE_CHECKING:
    from spawnbridge.comms.event_bus import EventBus


class EffectKind(Enum):
    SHIELD = "shield"
    DAMAGE = "damage"

    @property
    def color_name(self) -> str:
        return "Blue" if self is EffectKind.SHIELD else "Gold"

    @classmethod
    def parse(cls, value: str) -> EffectKind:
        try:
            return cls(value)
        except ValueError:
            raise UnknownKindError(value, "Effect must be 'shield' or 'damage'") from None


@dataclass(frozen=True)
class ActiveEffect:
    kind: EffectKind
    source: str
    duration_ms: int
    magnitude: float
    started_ms: float

    def elapsed(self, now_ms: float) -> float:
        return now_ms - self.started_ms

    def remaining_fraction(self, now_ms: float) -> float:
        if self.duration_ms <= 0:
            return 0.0
        left = 1.0 - self.elapsed(now_ms) / self.duration_ms
        return max(0.0, min(1.0, left))


@dataclass(frozen=True)
class EffectNotice:
    """HUD-facing notification.  ``event`` is applied, replaced or expired."""
    event: str
    kind: EffectKind
    source: str
    message: str

    def to_dict(self) -> dict:
        return {
            "event": self.event,
            "kind": self.kind.value,
            "source": self.source,
            "message": self.message,
        }


class EffectManager:
    def __init__(self, world: WorldHost, event_bus: EventBus | None = None) -> None:
        self._world = world
        self._event_bus = event_bus
        self._current: ActiveEffect | None = None
        self.notices: deque[EffectNotice] = deque(maxlen=64)

    def apply(self, kind: EffectKind, source: str, duration_ms: int,
              magnitude: float, now_ms: float) -> ActiveEffect:
        previous = self._current
        if previous is not None:
            self._notify("replaced", previous,
                         f"{previous.kind.color_name} buff from {previous.source} replaced")

        effect = ActiveEffect(
            kind=kind,
            source=source,
            duration_ms=int(duration_ms),
            magnitude=float(magnitude),
            started_ms=now_ms,
        )
        self._current = effect

        if kind is EffectKind.SHIELD:
            health, max_health = self._world.actor_health()
            heal = int(magnitude / 3)
            self._world.set_actor_health(min(max_health, health + heal))

        self._notify("applied", effect, f"{kind.color_name} buff from {source}")
        logger.debug(f"Applied {kind.value} buff: {magnitude}% for {duration_ms}ms from {source}")
        return effect

    def tick(self, now_ms: float) -> bool:
        """Expire the active effect if its window has passed.  Returns True once."""
        effect = self._current
        if effect is None:
            return False
        if effect.elapsed(now_ms) < effect.duration_ms:
            return False
        self._current = None
        self._notify("expired", effect, f"{effect.kind.color_name} buff from {effect.source} expired")
        logger.debug("Buff expired")
        return True

    def current(self) -> ActiveEffect | None:
        return self._current

    def magnitude_multiplier(self) -> float:
        if self._current is None:
            return 1.0
        return self._current.magnitude / 100.0

    def remaining_fraction(self, now_ms: float) -> float:
        if self._current is None:
            return 0.0
        return self._current.remaining_fraction(now_ms)

    def clear(self) -> None:
        self._current = None

    def _notify(self, event: str, effect: ActiveEffect, message: str) -> None:
        notice = EffectNotice(event=event, kind=effect.kind, source=effect.source, message=message)
        self.notices.append(notice)
        if self._event_bus is not None:
            self._event_bus.publish("effect_notice", notice.to_dict())


@dataclass(frozen=True)
class EffectCommand:
    """A fully validated apply-effect request."""
    kind: EffectKind
    source: str = "API"
    duration_ms: int = 5000
    magnitude: float = 50.0

    def __post_init__(self) -> None:
        if self.duration_ms <= 0 or self.magnitude <= 0:
            raise ValueError("duration and magnitude must be positive")
