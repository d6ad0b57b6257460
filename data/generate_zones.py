"""data/generate_zones.py — Bake every zone's terrain to NBT.

Run:  python data/generate_zones.py [out_dir]

Reads data/zones.toml and data/tuning.toml, generates each zone's grid
exactly as the game would on a first visit, and writes
``zones/<key>.nbt`` (or ``<out_dir>/<key>.nbt``).  Baking twice with
unchanged data produces identical files.
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from pathlib import Path

from core import tuning
from core.constants import TILE_NAMES
from core.nbt import save_zone_nbt
from logic.terrain import generate_terrain
from simulation.zone_graph import ZoneGraph

HERE = Path(__file__).resolve().parent


def bake(out_dir: Path) -> list[Path]:
    tuning.load(HERE / "tuning.toml")
    graph = ZoneGraph.from_toml(HERE / "zones.toml")
    written = []
    for zone in graph.all_zones():
        grid = generate_terrain(zone.biome, zone.seed, zone.width, zone.height,
                                exits=zone.exits.values(),
                                landings=graph.landings_into(zone.key))
        path = save_zone_nbt(zone, grid, out_dir)
        counts = {TILE_NAMES[t]: grid.count(t) for t in sorted(TILE_NAMES) if grid.count(t)}
        print(f"  {zone.key:<22} {zone.biome.value:<11} {zone.width}x{zone.height}  {counts}")
        written.append(path)
    return written


if __name__ == "__main__":
    out = Path(sys.argv[1]) if len(sys.argv) > 1 else HERE.parent / "zones"
    paths = bake(out)
    print(f"Baked {len(paths)} zones into {out}")
