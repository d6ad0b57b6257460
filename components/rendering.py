"""components.rendering — Visual identity and display."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Identity:
    name: str = "unnamed"
    kind: str = "creature"     # "creature", "character", "player"


@dataclass
class Sprite:
    char: str = "?"            # single character for debug rendering
    color: tuple = (255, 255, 255)
    layer: int = 0             # draw order
