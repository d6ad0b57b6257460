"""core/zone.py — Zone records, exit edges, and entity snapshots.

A ``ZoneRecord`` is everything the engine remembers about one map
region while it is *not* resident: its static definition (size, biome,
danger, exits) and the mutable state left behind by the last visit
(visited flag, cleared spawn slots, creature / character snapshots).

Seeds come from ``stable_seed(key)`` — a 32-bit FNV-1a fold over the
key's UTF-8 bytes.  Python's ``hash()`` is salted per process, so it
must never feed a seed.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from core.constants import TILE_DIRT, TILE_GRASS, TILE_STONE


class Biome(str, Enum):
    WASTELAND = "wasteland"
    RUINS = "ruins"
    FOREST = "forest"
    CAVE = "cave"
    SETTLEMENT = "settlement"
    LABORATORY = "laboratory"


class Direction(str, Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    def opposite(self) -> Direction:
        return _OPPOSITE[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


_OPPOSITE = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}

# Order exits are tested in when a tile touches two edges
EXIT_PRIORITY = (Direction.NORTH, Direction.SOUTH, Direction.WEST, Direction.EAST)

# Walkable ground each biome is carved back to (exit strips, landings)
BIOME_FLOOR = {
    Biome.WASTELAND: TILE_DIRT,
    Biome.RUINS: TILE_STONE,
    Biome.FOREST: TILE_GRASS,
    Biome.CAVE: TILE_STONE,
    Biome.SETTLEMENT: TILE_GRASS,
    Biome.LABORATORY: TILE_STONE,
}


_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193


def stable_seed(key: str) -> int:
    """32-bit FNV-1a hash of *key*; identical on every platform and run."""
    h = _FNV_OFFSET
    for byte in key.encode("utf-8"):
        h ^= byte
        h = (h * _FNV_PRIME) & 0xFFFFFFFF
    return h


def edge_midpoint(direction: Direction, width: int, height: int) -> tuple[int, int]:
    """Tile in the middle of the boundary an exit sits on."""
    if direction is Direction.NORTH:
        return width // 2, 0
    if direction is Direction.SOUTH:
        return width // 2, height - 1
    if direction is Direction.EAST:
        return width - 1, height // 2
    return 0, height // 2


def landing_tile(travel: Direction, width: int, height: int) -> tuple[int, int]:
    """Where someone travelling *travel* arrives in a *width*×*height* zone.

    Heading north you come in one row above the south edge, and so on —
    one tile in from the boundary so the arrival doesn't re-trigger an exit.
    """
    if travel is Direction.NORTH:
        return width // 2, height - 2
    if travel is Direction.SOUTH:
        return width // 2, 1
    if travel is Direction.EAST:
        return 1, height // 2
    return width - 2, height // 2


# ── Edges & snapshots ────────────────────────────────────────────────

@dataclass(frozen=True)
class ExitEdge:
    """Directed link from one zone's boundary to a tile in another zone."""
    direction: Direction
    target: str
    entry: tuple[int, int]


@dataclass
class CreatureSnapshot:
    """A live creature frozen while its zone is not resident."""
    archetype: str
    x: float
    y: float
    health: float
    provoked: bool = False
    state: str = "idle"


@dataclass
class CharacterSnapshot:
    """A non-hostile character (merchant, wanderer) frozen the same way."""
    archetype: str
    name: str
    x: float
    y: float


# ── Zone record ──────────────────────────────────────────────────────

@dataclass
class ZoneRecord:
    key: str
    name: str
    biome: Biome
    width: int = 50
    height: int = 50
    danger_level: float = 1.0       # multiplies creature toughness
    loot_multiplier: float = 1.0
    enemy_count: int = 4
    has_merchant: bool = False
    description: str = ""
    # Arrival tile when the zone is entered without an exit (new game)
    spawn: tuple[int, int] | None = None

    # Free (wilderness) zones
    is_free_zone: bool = False
    allow_base_building: bool = False
    resource_multiplier: float = 1.0

    exits: dict[Direction, ExitEdge] = field(default_factory=dict)

    # Derived from key, never passed in
    seed: int = field(init=False, default=0)

    # Mutable per-visit state
    visited: bool = False
    cleared_slots: set[tuple[int, int]] = field(default_factory=set)
    saved_creatures: list[CreatureSnapshot] = field(default_factory=list)
    saved_characters: list[CharacterSnapshot] = field(default_factory=list)

    def __post_init__(self):
        self.biome = Biome(self.biome)
        self.seed = stable_seed(self.key)

    @property
    def bounds(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def spawn_tile(self) -> tuple[int, int]:
        if self.spawn is not None:
            return self.spawn
        return self.width // 2, self.height // 2

    def add_exit(self, direction: Direction | str, target: str,
                 entry: tuple[int, int]) -> ExitEdge:
        direction = Direction(direction)
        edge = ExitEdge(direction, target, (int(entry[0]), int(entry[1])))
        self.exits[direction] = edge
        return edge

    # -- Snapshot lists (the only write path is a departure) --

    def save_creatures(self, snapshots: list[CreatureSnapshot]) -> None:
        self.saved_creatures = list(snapshots)

    def save_characters(self, snapshots: list[CharacterSnapshot]) -> None:
        self.saved_characters = list(snapshots)

    def take_saved_creatures(self) -> list[CreatureSnapshot]:
        """Return the saved creatures and clear the list (consumed on entry)."""
        taken, self.saved_creatures = self.saved_creatures, []
        return taken

    def take_saved_characters(self) -> list[CharacterSnapshot]:
        taken, self.saved_characters = self.saved_characters, []
        return taken

    def __repr__(self) -> str:
        return (f"ZoneRecord({self.key!r}, {self.biome.value}, "
                f"{self.width}x{self.height}, danger={self.danger_level})")
