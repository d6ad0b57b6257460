"""core/save.py — Zone state persistence (separate from world definitions).

Save files (JSON) store only what changes during play:
- which zone is active and where the traveler stands
- per zone: visited flag, cleared spawn slots, creature and character
  snapshots

The world definition (``data/zones.toml``) supplies everything static,
and terrain is regenerated from each zone's seed, so neither is saved.

When loading a game:
1. Build the graph from ``zones.toml``
2. ``load_world(graph)`` overlays the saved state onto it
3. The zone controller re-enters the saved active zone; zones with
   snapshots restore from them

``zone_to_dict`` / ``zone_from_dict`` round-trip a whole record (static
fields included) for tools and tests.
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any, TYPE_CHECKING

from core.zone import (
    CharacterSnapshot, CreatureSnapshot, Direction, ZoneRecord,
)

if TYPE_CHECKING:
    from simulation.zone_graph import ZoneGraph


SAVES_DIR = Path("saves")
FORMAT_VERSION = 1


def get_save_file(name: str = "world") -> Path:
    """Get the path for a named save."""
    SAVES_DIR.mkdir(parents=True, exist_ok=True)
    return SAVES_DIR / f"{name}.json"


# ── Records ──────────────────────────────────────────────────────────

def _creature_to_dict(s: CreatureSnapshot) -> dict[str, Any]:
    return {"archetype": s.archetype, "x": float(s.x), "y": float(s.y),
            "health": float(s.health), "provoked": s.provoked, "state": s.state}


def _character_to_dict(s: CharacterSnapshot) -> dict[str, Any]:
    return {"archetype": s.archetype, "name": s.name, "x": float(s.x), "y": float(s.y)}


def _state_to_dict(zone: ZoneRecord, creatures=None, characters=None) -> dict[str, Any]:
    creatures = zone.saved_creatures if creatures is None else creatures
    characters = zone.saved_characters if characters is None else characters
    return {
        "visited": zone.visited,
        "cleared_slots": sorted([x, y] for x, y in zone.cleared_slots),
        "saved_creatures": [_creature_to_dict(s) for s in creatures],
        "saved_characters": [_character_to_dict(s) for s in characters],
    }


def _apply_state(zone: ZoneRecord, d: dict[str, Any]) -> None:
    zone.visited = bool(d.get("visited", False))
    zone.cleared_slots = {(int(x), int(y)) for x, y in d.get("cleared_slots", [])}
    zone.saved_creatures = [
        CreatureSnapshot(
            archetype=c["archetype"],
            x=float(c["x"]),
            y=float(c["y"]),
            health=float(c["health"]),
            provoked=bool(c.get("provoked", False)),
            state=c.get("state", "idle"),
        )
        for c in d.get("saved_creatures", [])
    ]
    zone.saved_characters = [
        CharacterSnapshot(
            archetype=c["archetype"],
            name=c.get("name", ""),
            x=float(c["x"]),
            y=float(c["y"]),
        )
        for c in d.get("saved_characters", [])
    ]


def zone_to_dict(zone: ZoneRecord) -> dict[str, Any]:
    """Every field of *zone*, JSON-ready."""
    d = {
        "key": zone.key,
        "name": zone.name,
        "biome": zone.biome.value,
        "width": zone.width,
        "height": zone.height,
        "danger_level": zone.danger_level,
        "loot_multiplier": zone.loot_multiplier,
        "enemy_count": zone.enemy_count,
        "has_merchant": zone.has_merchant,
        "description": zone.description,
        "spawn": list(zone.spawn) if zone.spawn is not None else None,
        "is_free_zone": zone.is_free_zone,
        "allow_base_building": zone.allow_base_building,
        "resource_multiplier": zone.resource_multiplier,
        "seed": zone.seed,
        "exits": {
            e.direction.value: {"target": e.target, "entry": list(e.entry)}
            for e in zone.exits.values()
        },
    }
    d.update(_state_to_dict(zone))
    return d


def zone_from_dict(d: dict[str, Any]) -> ZoneRecord:
    spawn = d.get("spawn")
    zone = ZoneRecord(
        key=d["key"],
        name=d.get("name", d["key"]),
        biome=d["biome"],
        width=int(d.get("width", 50)),
        height=int(d.get("height", 50)),
        danger_level=float(d.get("danger_level", 1.0)),
        loot_multiplier=float(d.get("loot_multiplier", 1.0)),
        enemy_count=int(d.get("enemy_count", 4)),
        has_merchant=bool(d.get("has_merchant", False)),
        description=d.get("description", ""),
        spawn=(int(spawn[0]), int(spawn[1])) if spawn else None,
        is_free_zone=bool(d.get("is_free_zone", False)),
        allow_base_building=bool(d.get("allow_base_building", False)),
        resource_multiplier=float(d.get("resource_multiplier", 1.0)),
    )
    for dname, e in d.get("exits", {}).items():
        zone.add_exit(Direction(dname), e["target"], tuple(e["entry"]))
    if "seed" in d and int(d["seed"]) != zone.seed:
        print(f"[SAVE] {zone.key}: stored seed {d['seed']} differs from key seed "
              f"{zone.seed}, using key seed")
    _apply_state(zone, d)
    return zone


# ── Whole world ──────────────────────────────────────────────────────

def save_world(graph: "ZoneGraph", path: str | Path | None = None, *,
               resident: tuple[list, list] | None = None,
               traveler: tuple[float, float] | None = None) -> Path:
    """Write every zone's mutable state to *path* (default ``saves/world.json``).

    *resident* is ``(creatures, characters)`` for the active zone, whose
    live entities are not in its record yet (``ZoneController.checkpoint``).
    *traveler* is the traveler's position in the active zone.
    """
    save_path = Path(path) if path is not None else get_save_file()
    save_path.parent.mkdir(parents=True, exist_ok=True)

    zones = {}
    for zone in graph.all_zones():
        if resident is not None and zone.key == graph.active_key:
            zones[zone.key] = _state_to_dict(zone, *resident)
        else:
            zones[zone.key] = _state_to_dict(zone)

    save_data = {
        "format_version": FORMAT_VERSION,
        "active": graph.active_key,
        "traveler": list(traveler) if traveler is not None else None,
        "zones": zones,
    }
    with open(save_path, "w") as f:
        json.dump(save_data, f, indent=2)

    print(f"[SAVE] wrote {len(zones)} zones to {save_path}")
    return save_path


def read_save(path: str | Path | None = None) -> dict[str, Any] | None:
    """Read a save file without touching any zone.

    Returns the raw save dict, or None if the file is missing or
    unreadable.
    """
    save_path = Path(path) if path is not None else get_save_file()
    if not save_path.exists():
        return None

    try:
        with open(save_path, "r") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as ex:
        print(f"[SAVE] Error loading save file: {ex}")
        return None


def apply_save(graph: "ZoneGraph", data: dict[str, Any]) -> int:
    """Overlay a save dict read by ``read_save`` onto *graph*.

    Zones the save knows but the graph no longer defines are skipped.
    Sets ``graph.active_key`` (without a change notification; the
    controller's ``enter`` emits those).  Returns how many zones took
    saved state.
    """
    loaded = 0
    for key, state in data.get("zones", {}).items():
        zone = graph.get(key)
        if zone is None:
            print(f"[SAVE] skipping state for unknown zone '{key}'")
            continue
        _apply_state(zone, state)
        loaded += 1

    active = data.get("active")
    if active in graph:
        graph.active_key = active
    return loaded


def load_world(graph: "ZoneGraph", path: str | Path | None = None) -> dict[str, Any] | None:
    """``read_save`` then ``apply_save``; None if nothing was loaded."""
    data = read_save(path)
    if data is None:
        return None
    loaded = apply_save(graph, data)
    print(f"[SAVE] loaded state for {loaded} zones")
    return data
