"""core/nbt.py — NBT export of generated zone terrain.

Generation is deterministic, so a zone never *needs* a file, but baked
maps are handy for inspecting a seed in external NBT viewers and for
diffing terrain after a tuning change (``data/generate_zones.py``).

Structure (TAG_Compound):
  - key, name, biome: TAG_String
  - seed: TAG_Long
  - width, height: TAG_Int
  - tiles: TAG_Byte_Array (row-major)
  - exits: TAG_List of TAG_Compound
        { direction: TAG_String, target: TAG_String,
          entry_x: TAG_Int, entry_y: TAG_Int }
"""
from __future__ import annotations
from pathlib import Path

import nbtlib
from nbtlib import tag

from core.tiles import TileGrid
from core.zone import Direction, ExitEdge, ZoneRecord


def save_zone_nbt(zone: ZoneRecord, grid: TileGrid, dir_path: Path | None = None) -> Path:
    """Write *grid* (the terrain of *zone*) to ``<dir_path>/<key>.nbt``."""
    if dir_path is None:
        dir_path = Path("zones")
    dir_path = Path(dir_path)
    dir_path.mkdir(parents=True, exist_ok=True)

    # Flatten tiles into a single byte array (row-major)
    flat = bytearray()
    for row in grid.tiles:
        for v in row:
            flat.append(int(v) & 0x7F)

    root = nbtlib.Compound()
    root["key"] = tag.String(zone.key)
    root["name"] = tag.String(zone.name)
    root["biome"] = tag.String(zone.biome.value)
    root["seed"] = tag.Long(zone.seed)
    root["width"] = tag.Int(grid.width)
    root["height"] = tag.Int(grid.height)
    root["tiles"] = tag.ByteArray(flat)

    exits = nbtlib.List[nbtlib.Compound]()
    for edge in zone.exits.values():
        comp = nbtlib.Compound()
        comp["direction"] = tag.String(edge.direction.value)
        comp["target"] = tag.String(edge.target)
        comp["entry_x"] = tag.Int(edge.entry[0])
        comp["entry_y"] = tag.Int(edge.entry[1])
        exits.append(comp)
    root["exits"] = exits

    nbt_file = nbtlib.File(root)
    out_path = dir_path / f"{zone.key}.nbt"
    # Remove old file if exists to ensure clean overwrite
    if out_path.exists():
        out_path.unlink()
    nbt_file.save(out_path)
    return out_path


def load_zone_nbt(path: Path) -> dict:
    """Read a baked zone back.

    Returns a dict with keys: key, name, biome, seed, grid (TileGrid),
    exits (list of ExitEdge).
    """
    path = Path(path)
    # In nbtlib 2.0+, the File object IS the root compound
    root = nbtlib.load(path)
    w = int(root.get("width") or 0)
    h = int(root.get("height") or 0)
    if w <= 0 or h <= 0:
        raise ValueError(f"{path}: bad zone size {w}x{h}")

    ba = bytes(root["tiles"])
    if len(ba) < w * h:
        raise ValueError(f"{path}: expected {w * h} tiles, found {len(ba)}")
    grid = TileGrid.from_rows([[int(ba[r * w + c]) for c in range(w)] for r in range(h)])

    exits = []
    for comp in root.get("exits", []):
        exits.append(ExitEdge(
            Direction(str(comp["direction"])),
            str(comp["target"]),
            (int(comp["entry_x"]), int(comp["entry_y"])),
        ))

    return {
        "key": str(root.get("key") or path.stem),
        "name": str(root.get("name") or path.stem),
        "biome": str(root.get("biome") or ""),
        "seed": int(root.get("seed") or 0),
        "grid": grid,
        "exits": exits,
    }
