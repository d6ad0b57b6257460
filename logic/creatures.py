"""Creature registry — archetypes and per-biome spawn tables.

Loaded from ``data/creatures.toml``.  The spawn allocator asks it which
archetype fills a slot; the entity factory asks it how to build one.

Usage:
    # At startup (main.py):
    registry = CreatureRegistry.from_file("data/creatures.toml")
    app.world.set_res(registry)

    # At spawn time:
    table = registry.biome(Biome.CAVE)
    arch = weighted_choice(table.hostile, rng)   # → "mutant_beast"

``weighted_choice`` draws from the RNG it is handed and nothing else,
so picks replay exactly for a given seed.
"""

from __future__ import annotations
import random
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

from core.zone import Biome


@dataclass
class Archetype:
    id: str
    name: str = ""
    health: float = 10.0          # HP at danger 1.0
    hostile: bool = True
    behaviour: str = "wander"
    char: str = "?"
    color: tuple = (200, 200, 200)


@dataclass
class CharacterArchetype:
    id: str
    name: str = ""
    behaviour: str = "trade"
    char: str = "@"
    color: tuple = (240, 220, 90)


@dataclass
class BiomeTable:
    hostile: list[tuple[str, float]] = field(default_factory=list)
    special: list[tuple[str, float]] = field(default_factory=list)
    passive: list[tuple[str, float]] = field(default_factory=list)
    passive_count: tuple[int, int] = (0, 0)


def weighted_choice(entries: list[tuple[str, float]], rng: random.Random) -> str | None:
    """Cumulative-weight walk.  Always consumes one draw when non-empty."""
    if not entries:
        return None
    total = sum(w for _, w in entries)
    r = rng.uniform(0, total)
    cur = 0.0
    for key, w in entries:
        cur += w
        if r <= cur:
            return key
    return entries[-1][0]


class CreatureRegistry:
    """World resource — every archetype the spawner may place."""

    def __init__(self):
        self.archetypes: dict[str, Archetype] = {}
        self.characters: dict[str, CharacterArchetype] = {}
        self.tables: dict[Biome, BiomeTable] = {}

    # ── public API ──────────────────────────────────────────────────

    def get(self, archetype: str) -> Archetype | None:
        return self.archetypes.get(archetype)

    def character(self, archetype: str) -> CharacterArchetype | None:
        return self.characters.get(archetype)

    def biome(self, biome: Biome | str) -> BiomeTable:
        return self.tables.get(Biome(biome), BiomeTable())

    def max_health(self, archetype: str, danger: float) -> float:
        """Base HP scaled by the zone's danger level (floored at 0.1x)."""
        arch = self.archetypes[archetype]
        return arch.health * max(danger, 0.1)

    def __contains__(self, archetype: str) -> bool:
        return archetype in self.archetypes or archetype in self.characters

    # ── loading ─────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: dict) -> "CreatureRegistry":
        reg = cls()
        for aid, a in data.get("archetypes", {}).items():
            reg.archetypes[aid] = Archetype(
                id=aid,
                name=a.get("name", aid),
                health=float(a.get("health", 10)),
                hostile=bool(a.get("hostile", True)),
                behaviour=a.get("behaviour", "wander"),
                char=a.get("char", "?"),
                color=tuple(a.get("color", (200, 200, 200))),
            )
        for cid, c in data.get("characters", {}).items():
            reg.characters[cid] = CharacterArchetype(
                id=cid,
                name=c.get("name", cid),
                behaviour=c.get("behaviour", "trade"),
                char=c.get("char", "@"),
                color=tuple(c.get("color", (240, 220, 90))),
            )
        for bname, t in data.get("biomes", {}).items():
            biome = Biome(bname)
            lo, hi = t.get("passive_count", (0, 0))
            table = BiomeTable(
                hostile=[(k, float(w)) for k, w in t.get("hostile", {}).items()],
                special=[(k, float(w)) for k, w in t.get("special", {}).items()],
                passive=[(k, float(w)) for k, w in t.get("passive", {}).items()],
                passive_count=(int(lo), int(hi)),
            )
            for key, _ in table.hostile + table.special + table.passive:
                if key not in reg.archetypes:
                    raise ValueError(f"biome '{bname}' spawns unknown archetype '{key}'")
            reg.tables[biome] = table
        return reg

    @classmethod
    def from_file(cls, filepath: str | Path) -> "CreatureRegistry":
        filepath = Path(filepath)
        if not filepath.exists():
            alt = Path(__file__).parent.parent / "data" / "creatures.toml"
            filepath = alt if alt.exists() else filepath
        if not filepath.exists():
            print(f"[SPAWN] creature file not found: {filepath}")
            return cls()

        with open(filepath, "rb") as f:
            reg = cls.from_dict(tomllib.load(f))

        print(f"[SPAWN] loaded {len(reg.archetypes)} archetypes, "
              f"{len(reg.characters)} characters, {len(reg.tables)} biome tables")
        return reg
