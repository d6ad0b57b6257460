"""scenes/zone_manager.py — Zone residency and edge transitions.

Exactly one zone is resident at a time: it has a live ``TileGrid`` and
live creature / character entities in the ECS world.  Every other zone
exists only as its ``ZoneRecord``.

Walking onto an exit edge runs ``ZoneController.transition``:

1. snapshot the departing zone's living creatures and characters into
   its record (replacing whatever was saved before), then despawn them
2. point the graph at the target zone
3. first time this session: generate terrain, fresh-spawn.
   Otherwise reuse the cached grid and restore from the snapshots
4. drop the traveler on the exit's entry tile
5. emit ``ZoneLoaded`` and ``ZoneTransitionComplete``

Grids are cached per controller (one play session) so a zone keeps its
terrain between visits without a second generation pass.
"""

from __future__ import annotations
from core.ecs import World
from core.events import (
    EntityDied, EventBus, ZoneLoaded, ZoneTransitionComplete,
)
from core.save import apply_save, read_save
from core.tiles import TileGrid
from core.zone import CharacterSnapshot, CreatureSnapshot, ExitEdge, ZoneRecord
from components import DevLog, Position
from logic.creatures import CreatureRegistry
from logic.entity_factory import snapshot_characters, snapshot_creatures
from logic.spawning import SpawnAllocator, SpawnResult
from logic.terrain import generate_terrain
from simulation.zone_graph import ZoneGraph


class ZoneController:
    def __init__(self, graph: ZoneGraph, world: World, registry: CreatureRegistry,
                 bus: EventBus | None = None, log: DevLog | None = None):
        self.graph = graph
        self.world = world
        self.bus = bus
        self.log = log
        self.allocator = SpawnAllocator(registry, bus=bus, log=log)
        self.grid: TileGrid | None = None
        self._grids: dict[str, TileGrid] = {}
        # zone key → how many times each population path ran
        self.fresh_spawns: dict[str, int] = {}
        self.restorations: dict[str, int] = {}
        if bus is not None:
            bus.subscribe("EntityDied", self.on_entity_died)

    # ── Queries ──────────────────────────────────────────────────────

    def current_zone(self) -> ZoneRecord | None:
        return self.graph.current_zone()

    def check_exit(self, tile: tuple[int, int]) -> ExitEdge | None:
        zone = self.current_zone()
        if zone is None:
            return None
        width, height = self.grid.bounds if self.grid is not None else zone.bounds
        return self.graph.check_exit(tile, width, height)

    def has_grid(self, key: str) -> bool:
        return key in self._grids

    # ── Residency ────────────────────────────────────────────────────

    def enter(self, key: str, traveler: int | None = None,
              tile: tuple[int, int] | None = None) -> bool:
        """Make *key* resident without an exit (new game, loaded save).

        The traveler lands on *tile*, or the zone's spawn tile.
        """
        zone = self.graph.get(key)
        if zone is None:
            print(f"[ZONE] cannot enter unknown zone '{key}'")
            return False
        previous = self.graph.active_key
        if previous is not None and previous != key:
            self._depart(self.graph.get(previous), traveler)
        self.graph.set_active(key)
        entry = tile if tile is not None else zone.spawn_tile
        self._arrive(zone, traveler, entry)
        self._notify(previous, zone, entry)
        return True

    def transition(self, edge: ExitEdge, traveler: int | None = None) -> bool:
        """Carry the traveler across *edge*.  No-op if its target is missing."""
        target = self.graph.get(edge.target)
        if target is None:
            print(f"[ZONE] exit {edge.direction.value} leads to unknown zone "
                  f"'{edge.target}', staying put")
            return False
        departing = self.current_zone()
        previous = departing.key if departing is not None else None
        if departing is not None:
            self._depart(departing, traveler)
        self.graph.set_active(target.key)
        self._arrive(target, traveler, edge.entry)
        self._notify(previous, target, edge.entry)
        return True

    def update(self, traveler: int) -> bool:
        """Per movement tick: follow the exit the traveler is standing on."""
        pos = self.world.get(traveler, Position)
        if pos is None:
            return False
        edge = self.check_exit(pos.tile)
        if edge is None:
            return False
        return self.transition(edge, traveler)

    def checkpoint(self) -> tuple[list[CreatureSnapshot], list[CharacterSnapshot]]:
        """Snapshots of the resident zone's living entities, left in place.

        Used by the save path; does not touch the zone record.
        """
        zone = self.current_zone()
        if zone is None:
            return [], []
        return (snapshot_creatures(self.world, zone.key),
                snapshot_characters(self.world, zone.key))

    def forget(self, traveler: int | None = None) -> None:
        """Drop the resident entities and every cached grid (before a load)."""
        zone = self.current_zone()
        if zone is not None:
            keep = {traveler} if traveler is not None else set()
            self.world.despawn_zone(zone.key, keep=keep)
        self.graph.active_key = None
        self._grids.clear()
        self.grid = None

    def load_save(self, traveler: int | None = None, path=None) -> bool:
        """Replace the session with a save file's state.

        A missing or unreadable file changes nothing and returns False;
        the resident zone and its live entities stay as they are.
        """
        data = read_save(path)
        if data is None:
            return False
        self.forget(traveler)
        apply_save(self.graph, data)
        key = self.graph.active_key or self.graph.start_key
        t = data.get("traveler")
        tile = (int(t[0]), int(t[1])) if t else None
        return self.enter(key, traveler, tile)

    # ── Protocol steps ───────────────────────────────────────────────

    def _depart(self, zone: ZoneRecord, traveler: int | None):
        creatures = snapshot_creatures(self.world, zone.key)
        characters = snapshot_characters(self.world, zone.key)
        zone.save_creatures(creatures)
        zone.save_characters(characters)
        keep = {traveler} if traveler is not None else set()
        removed = self.world.despawn_zone(zone.key, keep=keep)
        print(f"[ZONE] left {zone.key}: saved {len(creatures)} creatures, "
              f"{len(characters)} characters ({removed} entities despawned)")

    def _arrive(self, zone: ZoneRecord, traveler: int | None,
                entry: tuple[int, int]) -> SpawnResult:
        grid = self._grids.get(zone.key)
        first = grid is None
        if first:
            grid = generate_terrain(zone.biome, zone.seed, zone.width, zone.height,
                                    exits=zone.exits.values(),
                                    landings=self.graph.landings_into(zone.key))
            self._grids[zone.key] = grid
            print(f"[TERRAIN] generated {zone.key} ({zone.biome.value}, "
                  f"{zone.width}x{zone.height}, seed {zone.seed})")
        self.grid = grid

        result = self.allocator.populate(self.world, zone, grid, allow_fresh=first)
        if result.fresh:
            self.fresh_spawns[zone.key] = self.fresh_spawns.get(zone.key, 0) + 1
        else:
            self.restorations[zone.key] = self.restorations.get(zone.key, 0) + 1

        if traveler is not None:
            pos = self.world.get(traveler, Position)
            if pos is None:
                pos = Position()
                self.world.add(traveler, pos)
            pos.x, pos.y = float(entry[0]), float(entry[1])
            pos.zone = zone.key
            self.world.zone_set(traveler, zone.key)
        return result

    def _notify(self, previous: str | None, zone: ZoneRecord, entry: tuple[int, int]):
        print(f"[ZONE] {previous or '-'} -> {zone.key} at {entry}")
        if self.log is not None:
            self.log.record(0, "zone", "entered",
                            details={"from": previous, "to": zone.key, "entry": entry})
        if self.bus is not None:
            self.bus.emit(ZoneLoaded(zone))
            self.bus.emit(ZoneTransitionComplete(previous, zone.key, entry))

    # ── Event handlers ───────────────────────────────────────────────

    def on_entity_died(self, event: EntityDied) -> None:
        """A fresh-spawned creature's death retires its spawn slot for good.

        The slot comes from the event, so a kill and a departure in the
        same tick still clear it after the creature has been despawned.
        """
        if event.slot is None:
            return
        zone = self.graph.get(event.zone)
        if zone is None:
            return
        zone.cleared_slots.add(event.slot)
        if self.log is not None:
            self.log.record(event.eid, "spawn", "slot cleared",
                            details={"zone": zone.key, "tile": event.slot})
