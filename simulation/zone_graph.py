"""simulation/zone_graph.py — Zone graph: the world's fixed topology.

Every map region is a ``ZoneRecord``; directed ``ExitEdge``s on each
record's north/south/east/west boundary lead to an entry tile in
another zone.  The graph is built once at startup from
``data/zones.toml`` and handed to whatever owns the simulation (there
is no module-level registry, so two graphs never share state).

    graph = ZoneGraph.from_toml("data/zones.toml", bus=bus)
    graph.set_active(graph.start_key)
    edge = graph.check_exit((25, 0), 45, 45)   # → ExitEdge(NORTH, ...)

Malformed definitions raise ``ZoneConfigError`` and stop startup.
Reachability problems are only reported.
"""

from __future__ import annotations
import random
from collections import deque
from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

from core.events import EventBus, ZoneChanged
from core.zone import (
    EXIT_PRIORITY, Biome, Direction, ExitEdge, ZoneRecord, landing_tile,
)


class ZoneConfigError(ValueError):
    """The world definition is unusable."""


# Free-zone roll tables (order matters: indices are drawn from the RNG)
FREE_BIOMES = (Biome.WASTELAND, Biome.FOREST, Biome.CAVE, Biome.RUINS)
FREE_BIOME_NAMES = {
    Biome.WASTELAND: "Wasteland",
    Biome.FOREST: "Forest",
    Biome.CAVE: "Cavern",
    Biome.RUINS: "Ruins",
    Biome.SETTLEMENT: "Camp",
    Biome.LABORATORY: "Facility",
}
FREE_ADJECTIVES = ("Forgotten", "Hidden", "Remote", "Isolated",
                   "Abandoned", "Untamed", "Wild", "Desolate")


class ZoneGraph:
    """All zone records and the exits between them."""

    def __init__(self, bus: EventBus | None = None) -> None:
        self.zones: dict[str, ZoneRecord] = {}
        self.active_key: str | None = None
        self.start_key: str | None = None
        self.bus = bus

    # ── Construction ─────────────────────────────────────────────────

    def add_zone(self, zone: ZoneRecord) -> ZoneRecord:
        if zone.key in self.zones:
            raise ZoneConfigError(f"zone '{zone.key}' defined twice")
        self.zones[zone.key] = zone
        return zone

    def add_exit(self, source: str, direction: Direction | str, target: str,
                 entry: tuple[int, int] | None = None) -> ExitEdge:
        """Link *source*'s *direction* boundary to *entry* in *target*.

        Without *entry* the traveler lands one tile inside the side of
        *target* they walk in from (``landing_tile``); *target* must
        already exist for that.
        """
        zone = self.zones.get(source)
        if zone is None:
            raise ZoneConfigError(f"exit from unknown zone '{source}'")
        direction = Direction(direction)
        if entry is None:
            dest = self.zones.get(target)
            if dest is None:
                raise ZoneConfigError(
                    f"{source}.{direction.value}: cannot place entry in unknown zone '{target}'")
            entry = landing_tile(direction, dest.width, dest.height)
        return zone.add_exit(direction, target, entry)

    # ── Access ───────────────────────────────────────────────────────

    def get(self, key: str) -> ZoneRecord | None:
        return self.zones.get(key)

    def all_zones(self) -> list[ZoneRecord]:
        return list(self.zones.values())

    def current_zone(self) -> ZoneRecord | None:
        if self.active_key is None:
            return None
        return self.zones.get(self.active_key)

    def set_active(self, key: str) -> None:
        """Make *key* the active zone.  Unknown keys are ignored."""
        zone = self.zones.get(key)
        if zone is None:
            return
        previous = self.active_key
        self.active_key = key
        zone.visited = True
        if self.bus is not None:
            self.bus.emit(ZoneChanged(previous, key))

    def __contains__(self, key: str) -> bool:
        return key in self.zones

    def __len__(self) -> int:
        return len(self.zones)

    # ── Exits ────────────────────────────────────────────────────────

    def check_exit(self, tile: tuple[int, int], width: int, height: int) -> ExitEdge | None:
        """The active zone's exit the traveler at *tile* has reached, if any.

        Edges are tried north, south, west, east.  A tile that sits on
        both edges of one axis (a zone one tile tall or wide) is
        ambiguous on that axis and fires nothing there.
        """
        zone = self.current_zone()
        if zone is None:
            return None
        x, y = tile
        at = {
            Direction.NORTH: y <= 0,
            Direction.SOUTH: y >= height - 1,
            Direction.WEST: x <= 0,
            Direction.EAST: x >= width - 1,
        }
        if at[Direction.NORTH] and at[Direction.SOUTH]:
            at[Direction.NORTH] = at[Direction.SOUTH] = False
        if at[Direction.WEST] and at[Direction.EAST]:
            at[Direction.WEST] = at[Direction.EAST] = False
        for direction in EXIT_PRIORITY:
            if at[direction] and direction in zone.exits:
                return zone.exits[direction]
        return None

    def exit_hint(self, direction: Direction | str) -> str | None:
        """"North: Outer Ruins - North" for the active zone's exit, or None."""
        zone = self.current_zone()
        if zone is None:
            return None
        edge = zone.exits.get(Direction(direction))
        if edge is None:
            return None
        target = self.zones.get(edge.target)
        if target is None:
            return None
        return f"{edge.direction.label}: {target.name}"

    def landings_into(self, key: str) -> list[tuple[int, int]]:
        """Entry tiles of every exit leading into *key*."""
        return [edge.entry
                for zone in self.zones.values()
                for edge in zone.exits.values()
                if edge.target == key]

    # ── Checks ───────────────────────────────────────────────────────

    def validate(self) -> None:
        """Raise ``ZoneConfigError`` listing every malformed definition."""
        problems: list[str] = []
        for zone in self.zones.values():
            if zone.width <= 0 or zone.height <= 0:
                problems.append(f"{zone.key}: non-positive size {zone.width}x{zone.height}")
            if zone.danger_level < 0:
                problems.append(f"{zone.key}: negative danger level {zone.danger_level}")
            for edge in zone.exits.values():
                target = self.zones.get(edge.target)
                if target is None:
                    problems.append(f"{zone.key}.{edge.direction.value}: "
                                    f"unknown target '{edge.target}'")
                    continue
                ex, ey = edge.entry
                if not (0 <= ex < target.width and 0 <= ey < target.height):
                    problems.append(f"{zone.key}.{edge.direction.value}: entry {edge.entry} "
                                    f"outside {target.key} ({target.width}x{target.height})")
        if self.start_key is not None and self.start_key not in self.zones:
            problems.append(f"unknown start zone '{self.start_key}'")
        if problems:
            raise ZoneConfigError("; ".join(problems))

    def _reachable(self, start: str, reverse: bool = False) -> set[str]:
        if reverse:
            links: dict[str, set[str]] = {k: set() for k in self.zones}
            for zone in self.zones.values():
                for edge in zone.exits.values():
                    if edge.target in links:
                        links[edge.target].add(zone.key)
        else:
            links = {k: {e.target for e in z.exits.values()} for k, z in self.zones.items()}
        seen = {start}
        queue = deque([start])
        while queue:
            for nxt in links.get(queue.popleft(), ()):
                if nxt not in seen:
                    seen.add(nxt)
                    queue.append(nxt)
        return seen

    def reachability_report(self, start: str | None = None) -> dict[str, list[str]]:
        """Zones unreachable from *start*, and reachable zones with no way back.

        Diagnostic only; prints a warning per problem and never raises.
        """
        start = start or self.start_key
        report: dict[str, list[str]] = {"unreachable": [], "no_return": []}
        if start is None or start not in self.zones:
            return report
        forward = self._reachable(start)
        back = self._reachable(start, reverse=True)
        report["unreachable"] = sorted(k for k in self.zones if k not in forward)
        report["no_return"] = sorted(k for k in forward if k not in back)
        for key in report["unreachable"]:
            print(f"[ZONE] warning: '{key}' cannot be reached from '{start}'")
        for key in report["no_return"]:
            print(f"[ZONE] warning: no path from '{key}' back to '{start}'")
        return report

    # ── Loading ──────────────────────────────────────────────────────

    @classmethod
    def from_toml(cls, filepath: str | Path, bus: EventBus | None = None) -> "ZoneGraph":
        """Load, validate and report on a world definition.

        Expected format:

            start = "rusthollow"
            free_zone_seed = 42

            [zones.rusthollow]
            name = "Rusthollow"
            biome = "settlement"
            size = [45, 45]
            danger = 0.5
            enemies = 2
            merchant = true
            exits.north = "outer_ruins_north"            # landing computed
            exits.east = { to = "outer_ruins_east", entry = [1, 25] }

            [[free_zone]]
            key = "free_zone_1"
            attach_to = "scavenger_plains"
            side = "south"          # side of attach_to it hangs off
            danger = 0.8

        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise ZoneConfigError(f"world file not found: {filepath}")
        with open(filepath, "rb") as f:
            data = tomllib.load(f)
        graph = cls.from_dict(data, bus=bus)
        print(f"[ZONE] loaded {len(graph)} zones from {filepath} (start: {graph.start_key})")
        return graph

    @classmethod
    def from_dict(cls, data: dict, bus: EventBus | None = None) -> "ZoneGraph":
        graph = cls(bus=bus)
        graph.start_key = data.get("start")

        zdefs = data.get("zones", {})
        for key, zd in zdefs.items():
            graph.add_zone(_zone_from_def(key, zd))

        # Exits second, so computed landings can see every target's size
        pending: list[tuple[str, str, str, tuple[int, int] | None]] = []
        for key, zd in zdefs.items():
            for dname, ed in zd.get("exits", {}).items():
                if isinstance(ed, str):
                    pending.append((key, dname, ed, None))
                else:
                    entry = ed.get("entry")
                    pending.append((key, dname, ed.get("to", ""),
                                    (int(entry[0]), int(entry[1])) if entry else None))
        for source, dname, target, entry in pending:
            try:
                direction = Direction(dname)
            except ValueError:
                raise ZoneConfigError(f"{source}: bad exit direction '{dname}'") from None
            graph.add_exit(source, direction, target, entry)

        rng = random.Random(int(data.get("free_zone_seed", 42)))
        for fd in data.get("free_zone", []):
            _add_free_zone(graph, fd, rng)

        graph.validate()
        graph.reachability_report()
        return graph


def _zone_from_def(key: str, zd: dict) -> ZoneRecord:
    try:
        biome = Biome(zd.get("biome", "wasteland"))
    except ValueError:
        raise ZoneConfigError(f"{key}: unknown biome '{zd.get('biome')}'") from None
    w, h = zd.get("size", (50, 50))
    spawn = zd.get("spawn")
    return ZoneRecord(
        key=key,
        name=zd.get("name", key),
        biome=biome,
        width=int(w),
        height=int(h),
        danger_level=float(zd.get("danger", 1.0)),
        loot_multiplier=float(zd.get("loot", 1.0)),
        enemy_count=int(zd.get("enemies", 4)),
        has_merchant=bool(zd.get("merchant", False)),
        description=zd.get("description", ""),
        spawn=(int(spawn[0]), int(spawn[1])) if spawn else None,
    )


def _free_name(rng: random.Random, biome: Biome) -> str:
    adj = FREE_ADJECTIVES[rng.randrange(len(FREE_ADJECTIVES))]
    return f"{adj} {FREE_BIOME_NAMES[biome]}"


def _add_free_zone(graph: ZoneGraph, fd: dict, rng: random.Random) -> ZoneRecord:
    """Roll a wilderness zone and hang it off ``attach_to`` both ways.

    Every roll is drawn whether or not the definition overrides it,
    so editing one free zone never reshuffles the ones after it.
    """
    key = fd.get("key", "")
    anchor = graph.get(fd.get("attach_to", ""))
    if anchor is None:
        raise ZoneConfigError(f"free zone '{key}' attaches to unknown zone "
                              f"'{fd.get('attach_to')}'")

    biome = FREE_BIOMES[rng.randrange(len(FREE_BIOMES))]
    name = _free_name(rng, biome)
    size = rng.randint(45, 60)
    danger = 1.0 + rng.random() * 0.5
    enemies = rng.randint(3, 6)
    resources = 1.0 + rng.random() * 0.3

    if "biome" in fd:
        biome = Biome(fd["biome"])
        name = _free_name(rng, biome)
    if "size" in fd:
        size = int(fd["size"])

    zone = graph.add_zone(ZoneRecord(
        key=key,
        name=fd.get("name", name),
        biome=biome,
        width=size,
        height=size,
        danger_level=float(fd.get("danger", danger)),
        loot_multiplier=float(fd.get("loot", 1.0)),
        enemy_count=int(fd.get("enemies", enemies)),
        description=fd.get("description",
                           "An unexplored area. Good for gathering resources and setting up camp."),
        is_free_zone=True,
        allow_base_building=True,
        resource_multiplier=float(fd.get("resources", resources)),
    ))

    side = Direction(fd.get("side", "south"))
    graph.add_exit(anchor.key, side, key)
    graph.add_exit(key, side.opposite(), anchor.key)
    return zone
