"""Simulation subsystem — spawning, name correlation, effects, tick handoff."""
from .effects import ActiveEffect, EffectCommand, EffectKind, EffectManager, EffectNotice
from .engine import BridgeContext, OverlayFrame, TickDriver
from .errors import BridgeError, NotReadyError, PlacementRejected, UnknownKindError, ValidationError
from .handoff import HandoffQueue
from .kinds import RECIPES, KindRecipe, MonsterKind, Tag, catalogue, for_name, recipe_for
from .names import MATCH_RADIUS, NameBinding, NameRegistry
from .placement import is_placeable
from .spawner import BatchResult, SpawnCommand, SpawnedRecord, Spawner
from .world import Creature, GridWorld, SurfaceTile, TerrainFeature, WorldHost

__all__ = [
    "ActiveEffect",
    "BatchResult",
    "BridgeContext",
    "BridgeError",
    "Creature",
    "EffectCommand",
    "EffectKind",
    "EffectManager",
    "EffectNotice",
    "GridWorld",
    "HandoffQueue",
    "KindRecipe",
    "MATCH_RADIUS",
    "MonsterKind",
    "NameBinding",
    "NameRegistry",
    "NotReadyError",
    "OverlayFrame",
    "PlacementRejected",
    "RECIPES",
    "SpawnCommand",
    "SpawnedRecord",
    "Spawner",
    "SurfaceTile",
    "Tag",
    "TerrainFeature",
    "TickDriver",
    "UnknownKindError",
    "ValidationError",
    "WorldHost",
    "catalogue",
    "for_name",
    "is_placeable",
    "recipe_for",
]
