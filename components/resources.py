"""components.resources — Spawn bookkeeping and world-level singletons."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class SpawnInfo:
    """Where and how an entity entered its zone.

    - `zone`: key of the zone the entity lives in
    - `tile`: tile the allocator placed it on
    - `fresh`: True for first-visit placements, False for restored ones.
      Only a fresh creature's death clears its spawn slot.
    """
    zone: str = ""
    tile: tuple[int, int] = (0, 0)
    fresh: bool = True


@dataclass
class Camera:
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0


@dataclass
class Player:
    """Marks the player entity (the traveler)."""
    steps: int = 0
