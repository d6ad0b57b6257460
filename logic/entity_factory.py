"""logic/entity_factory.py — Build live entities from archetypes, and back.

``spawn_creature`` / ``spawn_character`` turn an archetype id and a
tile into an ECS entity registered in its zone.  ``snapshot_creatures``
/ ``snapshot_characters`` go the other way when a zone is departed:
they capture exactly the fields a restore needs to put the entity back
where it was.

Every live creature carries:
    Position, Identity, Sprite, Health, Creature, Brain, SpawnInfo
Every character carries:
    Position, Identity, Sprite, Character, Brain, SpawnInfo
"""

from __future__ import annotations
from core.ecs import World
from core.events import EntityDied
from core.zone import CharacterSnapshot, CreatureSnapshot
from components import (
    Brain, Character, Creature, Health, Identity, Position, SpawnInfo, Sprite,
)
from logic.creatures import CreatureRegistry


def spawn_creature(world: World, registry: CreatureRegistry, archetype: str,
                   x: float, y: float, zone: str, danger: float = 1.0,
                   eid: int | None = None, *,
                   health: float | None = None, provoked: bool = False,
                   mode: str = "idle", fresh: bool = True) -> int:
    """Create a creature entity.  Raises ``KeyError`` for unknown archetypes.

    *health* overrides the danger-scaled maximum (restores pass the
    saved value); the maximum itself is always recomputed from *danger*.
    """
    arch = registry.get(archetype)
    if arch is None:
        raise KeyError(archetype)

    eid = world.spawn(eid)
    maximum = registry.max_health(archetype, danger)
    world.add(eid, Position(float(x), float(y), zone=zone))
    world.add(eid, Identity(name=arch.name, kind="creature"))
    world.add(eid, Sprite(char=arch.char, color=arch.color, layer=2))
    world.add(eid, Health(maximum if health is None else float(health), maximum))
    world.add(eid, Creature(archetype=archetype, hostile=arch.hostile, provoked=provoked))
    world.add(eid, Brain(kind=arch.behaviour, mode=mode))
    world.add(eid, SpawnInfo(zone=zone, tile=(int(x), int(y)), fresh=fresh))
    world.zone_add(eid, zone)
    return eid


def spawn_character(world: World, registry: CreatureRegistry, archetype: str,
                    name: str, x: float, y: float, zone: str,
                    eid: int | None = None, *, fresh: bool = True) -> int:
    """Create a non-hostile character.  Raises ``KeyError`` for unknown archetypes."""
    arch = registry.character(archetype)
    if arch is None:
        raise KeyError(archetype)

    eid = world.spawn(eid)
    world.add(eid, Position(float(x), float(y), zone=zone))
    world.add(eid, Identity(name=name or arch.name, kind="character"))
    world.add(eid, Sprite(char=arch.char, color=arch.color, layer=2))
    world.add(eid, Character(archetype=archetype, name=name or arch.name))
    world.add(eid, Brain(kind=arch.behaviour, mode="idle"))
    world.add(eid, SpawnInfo(zone=zone, tile=(int(x), int(y)), fresh=fresh))
    world.zone_add(eid, zone)
    return eid



def kill_entity(world: World, eid: int, killer: int | None = None) -> EntityDied | None:
    """Zero *eid*'s health, mark it dead and build its ``EntityDied``.

    Returns None if it was already dead.  The caller emits the event.
    """
    if not world.alive(eid):
        return None
    hp = world.get(eid, Health)
    if hp is not None:
        hp.current = 0
    world.kill(eid)
    pos = world.get(eid, Position)
    info = world.get(eid, SpawnInfo)
    slot = None
    if info is not None and info.fresh and world.has(eid, Creature):
        slot = info.tile
    return EntityDied(eid, killer, pos.zone if pos is not None else "", slot=slot)


# ── Snapshots ────────────────────────────────────────────────────────

def snapshot_creatures(world: World, zone: str) -> list[CreatureSnapshot]:
    """Every creature in *zone* that is still alive, in entity-id order."""
    snaps = []
    for eid, pos, hp, cr, brain in world.query_zone(zone, Position, Health, Creature, Brain):
        if not hp.alive:
            continue
        snaps.append(CreatureSnapshot(
            archetype=cr.archetype,
            x=pos.x,
            y=pos.y,
            health=hp.current,
            provoked=cr.provoked,
            state=brain.mode,
        ))
    return snaps


def snapshot_characters(world: World, zone: str) -> list[CharacterSnapshot]:
    snaps = []
    for eid, pos, ch in world.query_zone(zone, Position, Character):
        hp = world.get(eid, Health)
        if hp is not None and not hp.alive:
            continue
        snaps.append(CharacterSnapshot(
            archetype=ch.archetype, name=ch.name, x=pos.x, y=pos.y,
        ))
    return snaps
