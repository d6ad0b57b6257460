"""logic/spawning.py — Deterministic creature placement for a zone.

Two paths:

* **fresh** — first visit.  Hostile slots, passive slots and merchant
  characters are drawn from three RNGs, each ``random.Random`` seeded
  from the zone seed plus its own offset, then placed on free tiles.
  The same zone key always yields the same plan.
* **restore** — the zone holds saved snapshots.  Each snapshot is
  rehydrated where it was left; nothing new is placed.

Tile search (``find_tile``) never fails.  It samples random tiles inside
the margin-inset rectangle, then walks square rings out from the
rectangle's midpoint, and as a last resort drops the spawn on the
rectangle's corner and reports it.  A tile is free when nothing else
was placed there this pass, it is not a cleared slot of the zone, and
(when a grid is supplied) it is walkable.
"""

from __future__ import annotations
import random
from dataclasses import dataclass, field
from typing import Iterator

from core import tuning
from core.ecs import World
from core.events import EventBus, SnapshotSkipped, SpawnExhausted
from core.tiles import TileGrid
from core.zone import Biome, ZoneRecord
from components import DevLog
from logic.creatures import CreatureRegistry, weighted_choice
from logic.entity_factory import spawn_character, spawn_creature

# Added to the zone seed, one generator per concern
HOSTILE_SEED_OFFSET = 1000
CHARACTER_SEED_OFFSET = 2000
PASSIVE_SEED_OFFSET = 3000


@dataclass(frozen=True)
class SpawnPlacement:
    archetype: str
    tile: tuple[int, int]
    role: str                   # "hostile" | "passive" | "character"
    name: str = ""
    exhausted: bool = False     # search ran dry, tile is the corner


@dataclass
class SpawnResult:
    zone: str
    fresh: bool = False         # fresh placement ran for creatures
    creatures: list[int] = field(default_factory=list)
    characters: list[int] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    exhausted: list[SpawnPlacement] = field(default_factory=list)

    @property
    def restored(self) -> bool:
        return not self.fresh and bool(self.creatures or self.characters or self.skipped)


# ── Tile search ──────────────────────────────────────────────────────

def spawn_rect(width: int, height: int) -> tuple[int, int, int, int]:
    """(min_x, min_y, max_x, max_y) of the spawn area, max exclusive.

    The margin shrinks on zones too small to hold it, so the area is
    never empty.  The margin is read from ``core.tuning`` on every
    call, like the terrain knobs.
    """
    margin = tuning.get("spawn", "margin", 5)
    margin = max(0, min(margin, (width - 1) // 2, (height - 1) // 2))
    return margin, margin, width - margin, height - margin


def ring(cx: int, cy: int, radius: int) -> Iterator[tuple[int, int]]:
    """Tiles at Chebyshev distance *radius*, rows top to bottom, left to right."""
    for y in range(cy - radius, cy + radius + 1):
        for x in range(cx - radius, cx + radius + 1):
            if max(abs(x - cx), abs(y - cy)) == radius:
                yield x, y


class _Search:
    """Free-tile test and ring walk for one placement pass."""

    def __init__(self, zone: ZoneRecord, grid: TileGrid | None):
        self.zone = zone
        self.grid = grid
        self.occupied: set[tuple[int, int]] = set()
        self.rect = spawn_rect(zone.width, zone.height)

    def in_rect(self, tile: tuple[int, int]) -> bool:
        min_x, min_y, max_x, max_y = self.rect
        return min_x <= tile[0] < max_x and min_y <= tile[1] < max_y

    def free(self, tile: tuple[int, int]) -> bool:
        if tile in self.occupied or tile in self.zone.cleared_slots:
            return False
        return self.grid is None or self.grid.is_walkable(*tile)

    def nearest(self, cx: int, cy: int) -> tuple[int, int] | None:
        for radius in range(1, tuning.get("spawn", "ring_radius", 20) + 1):
            for tile in ring(cx, cy, radius):
                if self.in_rect(tile) and self.free(tile):
                    return tile
        return None

    def corner(self) -> tuple[int, int]:
        return self.rect[0], self.rect[1]

    def random_tile(self, rng: random.Random) -> tuple[tuple[int, int], bool]:
        """Returns (tile, exhausted)."""
        min_x, min_y, max_x, max_y = self.rect
        for _ in range(tuning.get("spawn", "random_attempts", 30)):
            tile = (rng.randrange(min_x, max_x), rng.randrange(min_y, max_y))
            if self.free(tile):
                return tile, False
        found = self.nearest((min_x + max_x) // 2, (min_y + max_y) // 2)
        if found is not None:
            return found, False
        return self.corner(), True

    def near(self, tile: tuple[int, int]) -> tuple[tuple[int, int], bool]:
        """*tile* itself if free, else the nearest free tile around it."""
        if self.in_rect(tile) and self.free(tile):
            return tile, False
        found = self.nearest(*tile)
        if found is not None:
            return found, False
        return self.corner(), True


def _inset_randint(rng: random.Random, size: int, inset: int) -> int:
    inset = min(inset, (size - 1) // 2)
    return rng.randint(inset, size - 1 - inset)


# ── Allocator ────────────────────────────────────────────────────────

class SpawnAllocator:
    """Places (or restores) every creature and character of a zone."""

    def __init__(self, registry: CreatureRegistry, bus: EventBus | None = None,
                 log: DevLog | None = None):
        self.registry = registry
        self.bus = bus
        self.log = log

    def special_chance(self, danger: float) -> float:
        per_level = tuning.get("spawn", "special_per_danger", 0.05)
        cap = tuning.get("spawn", "special_cap", 0.15)
        return min(cap, per_level * max(danger, 0.0))

    def pick_hostile(self, zone: ZoneRecord, rng: random.Random) -> str | None:
        table = self.registry.biome(zone.biome)
        if table.special and rng.random() < self.special_chance(zone.danger_level):
            return weighted_choice(table.special, rng)
        return weighted_choice(table.hostile, rng)

    # -- Planning (pure) --

    def plan_fresh(self, zone: ZoneRecord, grid: TileGrid | None = None) -> list[SpawnPlacement]:
        """First-visit placements for *zone*: hostiles, then passives, then characters.

        Depends only on the zone's seed, its static fields and its
        cleared slots, so calling it twice gives the same list.
        """
        search = _Search(zone, grid)
        plan: list[SpawnPlacement] = []

        def place(archetype: str, role: str, tile: tuple[int, int],
                  exhausted: bool, name: str = ""):
            search.occupied.add(tile)
            plan.append(SpawnPlacement(archetype, tile, role, name, exhausted))

        rng = random.Random(zone.seed + HOSTILE_SEED_OFFSET)
        for _ in range(max(zone.enemy_count, 0)):
            archetype = self.pick_hostile(zone, rng)
            if archetype is None:
                continue
            tile, exhausted = search.random_tile(rng)
            place(archetype, "hostile", tile, exhausted)

        table = self.registry.biome(zone.biome)
        rng = random.Random(zone.seed + PASSIVE_SEED_OFFSET)
        lo, hi = table.passive_count
        count = rng.randint(lo, hi) if hi >= lo else 0
        for _ in range(count):
            archetype = weighted_choice(table.passive, rng)
            if archetype is None:
                break
            tile, exhausted = search.random_tile(rng)
            place(archetype, "passive", tile, exhausted)

        if zone.has_merchant:
            rng = random.Random(zone.seed + CHARACTER_SEED_OFFSET)
            for archetype, target in self._character_targets(zone, rng):
                if self.registry.character(archetype) is None:
                    continue
                tile, exhausted = search.near(target)
                place(archetype, "character", tile, exhausted,
                      name=self.registry.character(archetype).name)
        return plan

    def _character_targets(self, zone: ZoneRecord,
                           rng: random.Random) -> list[tuple[str, tuple[int, int]]]:
        w, h = zone.width, zone.height
        if zone.biome is Biome.SETTLEMENT:
            return [
                ("general_merchant", (w // 2, h // 2 - 3)),
                ("weapons_merchant", (w // 2 + 5, h // 2)),
            ]
        if zone.biome is Biome.RUINS:
            x = _inset_randint(rng, w, 10)
            y = _inset_randint(rng, h, 10)
            return [("wanderer", (x, y))]
        x = _inset_randint(rng, w, 8)
        y = _inset_randint(rng, h, 8)
        return [("general_merchant", (x, y))]

    # -- Live population --

    def populate(self, world: World, zone: ZoneRecord, grid: TileGrid | None = None,
                 allow_fresh: bool = True) -> SpawnResult:
        """Fill *world* with the zone's creatures and characters.

        Saved snapshots win: a non-empty list is restored (and cleared)
        and no fresh placement happens for that list.  With nothing
        saved, fresh placement runs only if *allow_fresh*.
        """
        result = SpawnResult(zone=zone.key)
        restore_creatures = bool(zone.saved_creatures)
        restore_characters = bool(zone.saved_characters)

        if restore_creatures:
            self._restore_creatures(world, zone, result)
        if restore_characters:
            self._restore_characters(world, zone, result)

        if allow_fresh and not (restore_creatures and restore_characters):
            result.fresh = not restore_creatures
            for p in self.plan_fresh(zone, grid):
                if p.role == "character":
                    if restore_characters:
                        continue
                    eid = spawn_character(world, self.registry, p.archetype, p.name,
                                          p.tile[0], p.tile[1], zone.key)
                    result.characters.append(eid)
                else:
                    if restore_creatures:
                        continue
                    eid = spawn_creature(world, self.registry, p.archetype,
                                         p.tile[0], p.tile[1], zone.key,
                                         danger=zone.danger_level)
                    result.creatures.append(eid)
                if p.exhausted:
                    self._report_exhausted(zone, p)
                    result.exhausted.append(p)

        print(f"[SPAWN] {zone.key}: {'fresh' if result.fresh else 'restored'} "
              f"{len(result.creatures)} creatures, {len(result.characters)} characters"
              + (f", skipped {len(result.skipped)}" if result.skipped else ""))
        return result

    def _restore_creatures(self, world: World, zone: ZoneRecord, result: SpawnResult):
        for snap in zone.take_saved_creatures():
            if self.registry.get(snap.archetype) is None:
                self._report_skipped(zone, snap.archetype, result)
                continue
            eid = spawn_creature(world, self.registry, snap.archetype,
                                 snap.x, snap.y, zone.key,
                                 danger=zone.danger_level,
                                 health=snap.health, provoked=snap.provoked,
                                 mode=snap.state, fresh=False)
            result.creatures.append(eid)

    def _restore_characters(self, world: World, zone: ZoneRecord, result: SpawnResult):
        for snap in zone.take_saved_characters():
            if self.registry.character(snap.archetype) is None:
                self._report_skipped(zone, snap.archetype, result)
                continue
            eid = spawn_character(world, self.registry, snap.archetype, snap.name,
                                  snap.x, snap.y, zone.key, fresh=False)
            result.characters.append(eid)

    # -- Degraded conditions --

    def _report_exhausted(self, zone: ZoneRecord, p: SpawnPlacement):
        print(f"[SPAWN] {zone.key}: no free tile for {p.archetype}, "
              f"forced onto {p.tile}")
        if self.log is not None:
            self.log.record(0, "spawn", "placement exhausted",
                            details={"zone": zone.key, "archetype": p.archetype,
                                     "tile": p.tile})
        if self.bus is not None:
            self.bus.emit(SpawnExhausted(zone.key, p.archetype, p.tile))

    def _report_skipped(self, zone: ZoneRecord, archetype: str, result: SpawnResult):
        print(f"[SPAWN] {zone.key}: skipping snapshot of unknown archetype '{archetype}'")
        result.skipped.append(archetype)
        if self.log is not None:
            self.log.record(0, "spawn", "snapshot skipped",
                            details={"zone": zone.key, "archetype": archetype})
        if self.bus is not None:
            self.bus.emit(SnapshotSkipped(zone.key, archetype))
