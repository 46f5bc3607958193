"""Monster kind registry — closed enumeration plus data-driven recipes.

Architecture
------------
Every spawnable monster is a ``MonsterKind`` member whose value is its
canonical display name.  Construction details live in a flat
``KindRecipe`` record rather than a class hierarchy: base stats, an
optional secondary construction parameter, an optional tint roll for
visual variants, placement tags and a post-creation customization hook.

Special cases (big slime variants, golems, shadow sniper) are short
functions registered in ``_CUSTOMIZERS`` next to the rows they modify.

``family`` is the underlying creature class and drives the persist-safe
allow-list; ``group`` is the catalogue heading shown by ``GET /api``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from .errors import UnknownKindError
from .world import Creature


class MonsterKind(Enum):
    GREEN_SLIME = "Green Slime"
    FROST_JELLY = "Frost Jelly"
    RED_SLUDGE = "Red Sludge"
    PURPLE_SLUDGE = "Purple Sludge"
    YELLOW_SLIME = "Yellow Slime"
    BLACK_SLIME = "Black Slime"
    GRAY_SLUDGE = "Gray Sludge"
    BIG_SLIME = "Big Slime"
    PRISMATIC_SLIME = "Prismatic Slime"
    BIG_BLUE_SLIME = "Big Blue Slime"
    BIG_RED_SLIME = "Big Red Slime"
    BIG_PURPLE_SLIME = "Big Purple Slime"
    TIGER_SLIME = "Tiger Slime"
    BAT = "Bat"
    FROST_BAT = "Frost Bat"
    LAVA_BAT = "Lava Bat"
    IRIDIUM_BAT = "Iridium Bat"
    BUG = "Bug"
    ARMORED_BUG = "Armored Bug"
    CAVE_FLY = "Cave Fly"
    GRUB = "Grub"
    MUTANT_FLY = "Mutant Fly"
    MUTANT_GRUB = "Mutant Grub"
    GHOST = "Ghost"
    CARBON_GHOST = "Carbon Ghost"
    PUTRID_GHOST = "Putrid Ghost"
    ROCK_CRAB = "Rock Crab"
    LAVA_CRAB = "Lava Crab"
    IRIDIUM_CRAB = "Iridium Crab"
    FALSE_MAGMA_CAP = "False Magma Cap"
    STICK_BUG = "Stick Bug"
    STONE_GOLEM = "Stone Golem"
    WILDERNESS_GOLEM = "Wilderness Golem"
    ROCK_GOLEM = "Rock Golem"
    IRIDIUM_GOLEM = "Iridium Golem"
    ROYAL_SERPENT = "Royal Serpent"
    SERPENT = "Serpent"
    SHADOW_BRUTE = "Shadow Brute"
    SHADOW_SHAMAN = "Shadow Shaman"
    SHADOW_SNIPER = "Shadow Sniper"
    MAGMA_SPRITE = "Magma Sprite"
    MAGMA_SPARKER = "Magma Sparker"
    BLUE_SQUID = "Blue Squid"
    SQUID_KID = "Squid Kid"
    SKELETON = "Skeleton"
    SKELETON_MAGE = "Skeleton Mage"
    CURSED_DOLL = "Cursed Doll"
    DUGGY = "Duggy"
    MAGMA_DUGGY = "Magma Duggy"
    DUST_SPRITE = "Dust Sprite"
    DWARVISH_SENTRY = "Dwarvish Sentry"
    HAUNTED_SKULL = "Haunted Skull"
    HOT_HEAD = "Hot Head"
    LAVA_LURK = "Lava Lurk"
    METAL_HEAD = "Metal Head"
    MUMMY = "Mummy"
    PEPPER_REX = "Pepper Rex"
    SHOOTER = "Shooter"
    SPIDER = "Spider"
    SPIKER = "Spiker"


class Tag(Enum):
    """Placement-relevant traits."""
    BURROWING = "burrowing"   # needs diggable or bare ground
    HEAVY = "heavy"           # sinks in liquid tiles
    TILE_LOCKED = "tile_locked"  # snaps to the exact spawn tile


# Creature families whose spawns survive a save without corrupting it.
PERSIST_SAFE_FAMILIES = frozenset({"green_slime", "big_slime", "bug", "grub", "metal_head"})

Customizer = Callable[[Creature, random.Random], None]
TintRoll = Callable[[random.Random], tuple[int, int, int]]


@dataclass(frozen=True)
class KindRecipe:
    """Everything needed to construct one kind of monster."""
    kind: MonsterKind
    group: str
    family: str
    health: int
    damage: int
    speed: int = 2
    second_arg: object | None = None
    tags: frozenset[Tag] = field(default_factory=frozenset)
    tint: TintRoll | None = None
    customize: Customizer | None = None

    @property
    def display_name(self) -> str:
        return self.kind.value

    @property
    def persist_safe(self) -> bool:
        return self.family in PERSIST_SAFE_FAMILIES

    def has(self, tag: Tag) -> bool:
        return tag in self.tags


# -- post-creation customizations -------------------------------------------


def _gray_sludge(c: Creature, rng: random.Random) -> None:
    shade = rng.randint(120, 199)
    c.tint = (shade, shade, shade)
    while rng.random() < 0.33:
        c.loot.append("(O)380")  # Iron Ore
    c.speed = 1


def _variant(name: str) -> Customizer:
    def apply(c: Creature, rng: random.Random) -> None:
        c.variant = name
    return apply


def _stats(health: int, damage: int | None = None, speed: int | None = None) -> Callable[[Creature], None]:
    def apply(c: Creature) -> None:
        c.health = c.max_health = health
        if damage is not None:
            c.damage = damage
        if speed is not None:
            c.speed = speed
    return apply


def _big_blue_slime(c: Creature, rng: random.Random) -> None:
    _stats(280)(c)


def _big_red_slime(c: Creature, rng: random.Random) -> None:
    _stats(320, damage=12)(c)


def _big_purple_slime(c: Creature, rng: random.Random) -> None:
    _stats(360, damage=15)(c)
    if rng.random() < 0.1:
        c.loot.append("(O)768")  # Solar Essence


def _rock_golem(c: Creature, rng: random.Random) -> None:
    _stats(200, damage=10)(c)
    c.loot.append("(O)390")  # Stone
    if rng.random() < 0.3:
        c.loot.append("(O)378")  # Copper Ore


def _iridium_golem(c: Creature, rng: random.Random) -> None:
    _stats(500, damage=20)(c)
    c.loot.append("(O)337")  # Iridium Ore
    if rng.random() < 0.2:
        c.loot.append("(O)386")  # Iridium Bar


def _shadow_sniper(c: Creature, rng: random.Random) -> None:
    _stats(150, damage=18, speed=3)(c)
    if rng.random() < 0.4:
        c.loot.append("(O)769")  # Void Essence


def _black_slime_tint(rng: random.Random) -> tuple[int, int, int]:
    return (40 + rng.randrange(10), 40 + rng.randrange(10), 40 + rng.randrange(10))


# -- registry ---------------------------------------------------------------

K = MonsterKind
_BURROW = frozenset({Tag.BURROWING, Tag.TILE_LOCKED})
_HEAVY = frozenset({Tag.HEAVY})

# (kind, group, family, health, damage, speed, second_arg)
_ROWS: list[tuple[MonsterKind, str, str, int, int, int, object | None]] = [
    (K.GREEN_SLIME,      "Slimes",        "green_slime",     24,  5, 2, 0),
    (K.FROST_JELLY,      "Slimes",        "green_slime",     106, 7, 2, 40),
    (K.RED_SLUDGE,       "Slimes",        "green_slime",     205, 16, 2, 80),
    (K.PURPLE_SLUDGE,    "Slimes",        "green_slime",     380, 18, 2, 121),
    (K.YELLOW_SLIME,     "Slimes",        "green_slime",     150, 12, 2, 0),
    (K.BLACK_SLIME,      "Slimes",        "green_slime",     140, 11, 2, None),
    (K.GRAY_SLUDGE,      "Slimes",        "green_slime",     200, 14, 2, 77377),
    (K.BIG_SLIME,        "Slimes",        "big_slime",       240, 10, 1, 0),
    (K.PRISMATIC_SLIME,  "Slimes",        "green_slime",     1000, 30, 2, 0),
    (K.BIG_BLUE_SLIME,   "Slimes",        "big_slime",       240, 10, 1, 40),
    (K.BIG_RED_SLIME,    "Slimes",        "big_slime",       240, 10, 1, 80),
    (K.BIG_PURPLE_SLIME, "Slimes",        "big_slime",       240, 10, 1, 121),
    (K.TIGER_SLIME,      "Slimes",        "green_slime",     200, 15, 2, 0),
    (K.BAT,              "Bats",          "bat",             24,  6, 3, None),
    (K.FROST_BAT,        "Bats",          "bat",             36,  7, 3, 40),
    (K.LAVA_BAT,         "Bats",          "bat",             80,  15, 3, 80),
    (K.IRIDIUM_BAT,      "Bats",          "bat",             300, 30, 4, 171),
    (K.BUG,              "Bugs",          "bug",             1,   8, 2, 0),
    (K.ARMORED_BUG,      "Bugs",          "bug",             1,   8, 2, 121),
    (K.CAVE_FLY,         "Flies",         "fly",             22,  6, 3, None),
    (K.GRUB,             "Flies",         "grub",            20,  5, 2, None),
    (K.MUTANT_FLY,       "Flies",         "fly",             44,  10, 3, True),
    (K.MUTANT_GRUB,      "Flies",         "grub",            40,  8, 2, True),
    (K.GHOST,            "Ghosts",        "ghost",           96,  10, 2, None),
    (K.CARBON_GHOST,     "Ghosts",        "ghost",           250, 15, 2, "Carbon Ghost"),
    (K.PUTRID_GHOST,     "Ghosts",        "ghost",           350, 20, 2, "Putrid Ghost"),
    (K.ROCK_CRAB,        "Crabs",         "rock_crab",       30,  5, 2, None),
    (K.LAVA_CRAB,        "Crabs",         "rock_crab",       120, 15, 2, "Lava Crab"),
    (K.IRIDIUM_CRAB,     "Crabs",         "rock_crab",       240, 21, 2, "Iridium Crab"),
    (K.FALSE_MAGMA_CAP,  "Crabs",         "rock_crab",       90,  14, 2, "False Magma Cap"),
    (K.STICK_BUG,        "Crabs",         "rock_crab",       60,  10, 2, None),
    (K.STONE_GOLEM,      "Golems",        "rock_golem",      45,  8, 2, None),
    (K.WILDERNESS_GOLEM, "Golems",        "rock_golem",      60,  10, 2, 5),
    (K.ROCK_GOLEM,       "Golems",        "rock_golem",      45,  8, 2, None),
    (K.IRIDIUM_GOLEM,    "Golems",        "rock_golem",      45,  8, 2, None),
    (K.ROYAL_SERPENT,    "Serpents",      "serpent",         700, 25, 4, "Royal Serpent"),
    (K.SERPENT,          "Serpents",      "serpent",         300, 20, 4, None),
    (K.SHADOW_BRUTE,     "Shadows",       "shadow_brute",    160, 18, 2, None),
    (K.SHADOW_SHAMAN,    "Shadows",       "shadow_shaman",   80,  12, 2, None),
    (K.SHADOW_SNIPER,    "Shadows",       "shadow_brute",    160, 18, 2, None),
    (K.MAGMA_SPRITE,     "Magma Sprites", "magma_sprite",    150, 15, 3, None),
    (K.MAGMA_SPARKER,    "Magma Sprites", "magma_sprite",    150, 15, 3, "Magma Sparker"),
    (K.BLUE_SQUID,       "Squids",        "blue_squid",      175, 18, 2, None),
    (K.SQUID_KID,        "Squids",        "squid_kid",       1,   12, 2, None),
    (K.SKELETON,         "Skeletons",     "skeleton",        140, 10, 2, False),
    (K.SKELETON_MAGE,    "Skeletons",     "skeleton",        140, 10, 2, True),
    (K.CURSED_DOLL,      "Other",         "cursed_doll",     100, 10, 2, None),
    (K.DUGGY,            "Other",         "duggy",           40,  6, 2, None),
    (K.MAGMA_DUGGY,      "Other",         "duggy",           120, 14, 2, True),
    (K.DUST_SPRITE,      "Other",         "dust_sprite",     10,  6, 3, None),
    (K.DWARVISH_SENTRY,  "Other",         "dwarvish_sentry", 250, 20, 2, None),
    (K.HAUNTED_SKULL,    "Other",         "haunted_skull",   40,  10, 4, None),
    (K.HOT_HEAD,         "Other",         "hot_head",        70,  12, 2, None),
    (K.LAVA_LURK,        "Other",         "lava_lurk",       150, 18, 2, None),
    (K.METAL_HEAD,       "Other",         "metal_head",      70,  9, 2, 0),
    (K.MUMMY,            "Other",         "mummy",           260, 30, 2, None),
    (K.PEPPER_REX,       "Other",         "pepper_rex",      300, 22, 2, None),
    (K.SHOOTER,          "Other",         "shooter",         100, 14, 2, "Shooter"),
    (K.SPIDER,           "Other",         "leaper",          100, 12, 3, None),
    (K.SPIKER,           "Other",         "spiker",          1,   15, 2, None),
]

_TAGS: dict[MonsterKind, frozenset[Tag]] = {
    K.DUGGY: _BURROW,
    K.MAGMA_DUGGY: _BURROW,
    K.WILDERNESS_GOLEM: frozenset({Tag.TILE_LOCKED}),
    K.ROCK_GOLEM: _HEAVY,
    K.IRIDIUM_GOLEM: _HEAVY,
}

_TINTS: dict[MonsterKind, TintRoll] = {
    K.BLACK_SLIME: _black_slime_tint,
}

_CUSTOMIZERS: dict[MonsterKind, Customizer] = {
    K.GRAY_SLUDGE: _gray_sludge,
    K.STICK_BUG: _variant("stick_bug"),
    K.TIGER_SLIME: _variant("tiger"),
    K.PRISMATIC_SLIME: _variant("prismatic"),
    K.BIG_BLUE_SLIME: _big_blue_slime,
    K.BIG_RED_SLIME: _big_red_slime,
    K.BIG_PURPLE_SLIME: _big_purple_slime,
    K.ROCK_GOLEM: _rock_golem,
    K.IRIDIUM_GOLEM: _iridium_golem,
    K.SHADOW_SNIPER: _shadow_sniper,
}

RECIPES: dict[MonsterKind, KindRecipe] = {
    kind: KindRecipe(
        kind=kind,
        group=group,
        family=family,
        health=health,
        damage=damage,
        speed=speed,
        second_arg=second_arg,
        tags=_TAGS.get(kind, frozenset()),
        tint=_TINTS.get(kind),
        customize=_CUSTOMIZERS.get(kind),
    )
    for kind, group, family, health, damage, speed, second_arg in _ROWS
}

# Names players actually type that differ from the canonical one.
_ALIASES = {
    "ghosts": K.GHOST,
    "grey sludge": K.GRAY_SLUDGE,
    "gray slime": K.GRAY_SLUDGE,
}

_BY_NAME: dict[str, MonsterKind] = {k.value.lower(): k for k in MonsterKind}
_BY_NAME.update(_ALIASES)


def for_name(name: str) -> MonsterKind:
    """Resolve a user-supplied monster name (case/space-insensitive).

    Raises UnknownKindError carrying the name exactly as searched.
    """
    key = " ".join(str(name).split()).lower()
    kind = _BY_NAME.get(key)
    if kind is None:
        raise UnknownKindError(name)
    return kind


def recipe_for(kind: MonsterKind) -> KindRecipe:
    return RECIPES[kind]


def catalogue() -> dict[str, list[str]]:
    """Spawnable names grouped by catalogue heading, in declaration order."""
    groups: dict[str, list[str]] = {}
    for recipe in RECIPES.values():
        groups.setdefault(recipe.group, []).append(recipe.display_name)
    return groups
