"""components — ECS component dataclasses, organised by domain.

Submodules
----------
spatial        Position
rendering      Identity, Sprite
rpg            Health
ai             Brain, Creature, Character
resources      SpawnInfo, Camera, Player
dev_log        DevLog

All public names are re-exported here so systems can do
``from components import Position``.
"""

# ── Spatial ──────────────────────────────────────────────────────────
from components.spatial import Position

# ── Rendering ────────────────────────────────────────────────────────
from components.rendering import Identity, Sprite

# ── RPG ──────────────────────────────────────────────────────────────
from components.rpg import Health

# ── AI ───────────────────────────────────────────────────────────────
from components.ai import Brain, Creature, Character

# ── World resources / singletons ─────────────────────────────────────
from components.resources import SpawnInfo, Camera, Player

# ── Diagnostics ──────────────────────────────────────────────────────
from components.dev_log import DevLog

__all__ = [
    # spatial
    "Position",
    # rendering
    "Identity", "Sprite",
    # rpg
    "Health",
    # ai
    "Brain", "Creature", "Character",
    # resources
    "SpawnInfo", "Camera", "Player",
    # diagnostics
    "DevLog",
]
