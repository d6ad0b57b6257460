"""core/tiles.py — The resident zone's tile grid.

Row-major ``tiles[y][x]`` of integer tile ids, the same layout the NBT
exporter and the renderer use.  The terrain generator writes into it;
movement, spawning and rendering read from it.

Out-of-bounds reads come back as stone wall and out-of-bounds writes
are dropped, so generators can stamp shapes near the edge without
clipping every loop by hand.
"""

from __future__ import annotations
from core.constants import TILE_WALL, BLOCKING_TILES


class TileGrid:
    def __init__(self, width: int, height: int, fill: int = TILE_WALL):
        if width <= 0 or height <= 0:
            raise ValueError(f"tile grid needs positive size, got {width}x{height}")
        self.width = width
        self.height = height
        self.tiles: list[list[int]] = [[fill] * width for _ in range(height)]

    # -- Bounds --

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    @property
    def bounds(self) -> tuple[int, int]:
        return self.width, self.height

    # -- Access --

    def get(self, x: int, y: int) -> int:
        if self.in_bounds(x, y):
            return self.tiles[y][x]
        return TILE_WALL

    def set(self, x: int, y: int, tile: int) -> None:
        if self.in_bounds(x, y):
            self.tiles[y][x] = tile

    def fill(self, tile: int) -> None:
        for row in self.tiles:
            for x in range(self.width):
                row[x] = tile

    def is_walkable(self, x: int, y: int) -> bool:
        return self.get(x, y) not in BLOCKING_TILES

    # -- Queries --

    def count(self, tile: int) -> int:
        """Number of cells holding *tile*."""
        return sum(row.count(tile) for row in self.tiles)

    def rows(self) -> list[list[int]]:
        """Deep copy as plain lists (for export / debugging)."""
        return [row[:] for row in self.tiles]

    @classmethod
    def from_rows(cls, rows: list[list[int]]) -> TileGrid:
        h = len(rows)
        w = len(rows[0]) if h else 0
        grid = cls(w, h)
        grid.tiles = [list(r) for r in rows]
        return grid

    def __eq__(self, other) -> bool:
        if not isinstance(other, TileGrid):
            return NotImplemented
        return (self.width, self.height) == (other.width, other.height) \
            and self.tiles == other.tiles

    def __repr__(self) -> str:
        return f"TileGrid({self.width}x{self.height})"
