"""components.spatial — Where an entity stands.

Coordinates are in tiles.  Creatures step tile to tile so positions are
normally whole numbers, but they are stored as floats so a snapshot
round-trips whatever the movement code wrote.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0
    zone: str = ""

    @property
    def tile(self) -> tuple[int, int]:
        """Integer tile the entity occupies."""
        return int(self.x), int(self.y)
