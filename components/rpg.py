"""components.rpg — Health."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Health:
    current: float = 100.0     # HP
    maximum: float = 100.0     # HP

    @property
    def alive(self) -> bool:
        return self.current > 0
