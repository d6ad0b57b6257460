"""components.ai — Creature / character tags and behaviour state."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Brain:
    """Behaviour controller state.

    ``kind`` is the archetype's default behaviour ("hunt", "graze",
    "trade", ...).  ``mode`` is the current behaviour-state tag; it is
    what a snapshot saves and what a restore puts back.
    """
    kind: str = "wander"
    mode: str = "idle"


@dataclass
class Creature:
    """Marks a hostile or passive creature spawned from an archetype."""
    archetype: str = ""
    hostile: bool = True
    provoked: bool = False     # aggro latched by being attacked


@dataclass
class Character:
    """Marks a non-hostile character (merchant, wanderer)."""
    archetype: str = ""
    name: str = ""
