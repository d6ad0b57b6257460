"""
core/ecs.py — Entity-Component-System

Entities are ints. Components are any object, stored by type.
Query by component types to get matching entities.

    w = World()
    e = w.spawn()
    w.add(e, Position(5.0, 3.0, zone="rusthollow"))
    w.add(e, Health(40.0, 40.0))
    w.zone_add(e, "rusthollow")

    for eid, pos, hp in w.query_zone("rusthollow", Position, Health):
        hp.current -= 5

Only the resident zone has live entities.  When the traveler leaves,
the zone controller snapshots what is alive and calls
``despawn_zone()``; the entities come back as *new* ids on the next
visit.
"""

from __future__ import annotations
from typing import Any, Iterator


class World:
    def __init__(self):
        self._next_id = 0
        self._stores: dict[type, dict[int, Any]] = {}
        self._dead: set[int] = set()
        # zone key → entity ids registered there
        self._zone_index: dict[str, set[int]] = {}

    # -- Zone index --

    def zone_add(self, eid: int, zone: str):
        """Register *eid* in the zone index for *zone*."""
        self._zone_index.setdefault(zone, set()).add(eid)

    def zone_set(self, eid: int, new_zone: str):
        """Move *eid* from whatever zone it was in to *new_zone*."""
        for eids in self._zone_index.values():
            eids.discard(eid)
        self._zone_index.setdefault(new_zone, set()).add(eid)

    def zone_entities(self, zone: str) -> set[int]:
        """Living entity ids registered in *zone*."""
        return self._zone_index.get(zone, set()) - self._dead

    def query_zone(self, zone: str, *types: type) -> Iterator[tuple]:
        """Like ``query()`` but restricted to entities in *zone*.

        Yields in ascending id order so callers that snapshot or
        serialise get a stable ordering.
        """
        if not types:
            return
        stores = [self._stores.get(t, {}) for t in types]
        for eid in sorted(self.zone_entities(zone)):
            if all(eid in s for s in stores):
                yield (eid, *(s[eid] for s in stores))

    def despawn_zone(self, zone: str, keep: set[int] | None = None) -> int:
        """Remove every entity in *zone* (dead or alive) except *keep*.

        Returns how many were removed.
        """
        keep = keep or set()
        doomed = self._zone_index.get(zone, set()) - keep
        for eid in doomed:
            for store in self._stores.values():
                store.pop(eid, None)
            self._dead.discard(eid)
        self._zone_index[zone] = self._zone_index.get(zone, set()) & keep
        return len(doomed)

    # -- Entities --

    def spawn(self, eid: int | None = None) -> int:
        """Allocate an entity id.  An explicit *eid* is honoured if unused."""
        if eid is not None and eid > 0 and not self.exists(eid):
            self._next_id = max(self._next_id, eid)
            return eid
        self._next_id += 1
        return self._next_id

    def exists(self, eid: int) -> bool:
        return any(eid in store for store in self._stores.values())

    def kill(self, eid: int):
        self._dead.add(eid)

    def alive(self, eid: int) -> bool:
        return eid not in self._dead

    def purge(self):
        """Remove dead entities from all stores."""
        for store in self._stores.values():
            for eid in self._dead:
                store.pop(eid, None)
        for eids in self._zone_index.values():
            eids -= self._dead
        self._dead.clear()

    # -- Components --

    def add(self, eid: int, comp: Any):
        self._stores.setdefault(type(comp), {})[eid] = comp

    def get(self, eid: int, comp_type: type) -> Any | None:
        return self._stores.get(comp_type, {}).get(eid)

    def has(self, eid: int, comp_type: type) -> bool:
        return eid in self._stores.get(comp_type, {})

    # -- Queries --

    def query(self, *types: type) -> Iterator[tuple]:
        """Yield (eid, comp1, comp2, ...) for entities that have ALL types."""
        if not types:
            return
        buckets = [self._stores.get(t, {}) for t in types]
        smallest = min(buckets, key=len)
        for eid in list(smallest):
            if eid in self._dead or eid < 0:
                continue
            if all(eid in b for b in buckets):
                yield (eid, *(b[eid] for b in buckets))

    def query_one(self, *types: type) -> tuple | None:
        """Return first match or None."""
        for result in self.query(*types):
            return result
        return None

    def count(self, comp_type: type) -> int:
        return sum(1 for eid in self._stores.get(comp_type, {})
                   if eid >= 0 and eid not in self._dead)

    # -- Resources (singletons, not tied to entities) --

    def set_res(self, resource: Any):
        self._stores.setdefault(type(resource), {})[-1] = resource

    def res(self, res_type: type) -> Any | None:
        return self._stores.get(res_type, {}).get(-1)
