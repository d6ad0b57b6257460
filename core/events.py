"""core/events.py — Lightweight event bus.

Decouples the zone engine from the collaborators that react to it
(camera recentre, fog-of-war reveal, HUD, quest tracking).  The bus is
owned by whoever builds the simulation context and handed to the
ZoneGraph / ZoneController that emit on it::

    bus = EventBus()
    bus.subscribe("ZoneTransitionComplete", camera.recentre)
    graph = ZoneGraph.from_toml("data/zones.toml", bus=bus)

And the orchestrator drains once per tick::

    bus.drain()          # calls all handlers for pending events

Design rules:
  - Events are plain dataclasses — no behaviour.
  - ``emit()`` is O(1) (just appends).
  - ``drain()`` processes all queued events in FIFO order.
  - Handlers may emit new events; those are processed next drain.
"""

from __future__ import annotations
import traceback
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from core.zone import ZoneRecord


# ═══════════════════════════════════════════════════════════════════
#  Event definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass
class ZoneChanged:
    """The graph's active-zone pointer moved."""
    previous: str | None
    current: str


@dataclass
class ZoneLoaded:
    """A zone finished generating / restoring and is now resident."""
    zone: ZoneRecord


@dataclass
class ZoneTransitionComplete:
    """Traveler has materialised in the new zone."""
    previous: str | None
    current: str
    entry: tuple[int, int] = (0, 0)


@dataclass
class EntityDied:
    """An entity's HP dropped to zero.

    ``slot`` is the spawn tile of a fresh-spawned creature (None
    otherwise), carried so the handler does not depend on the entity
    still existing when the bus drains.
    """
    eid: int
    killer_eid: int | None = None
    zone: str = ""
    slot: tuple[int, int] | None = None


@dataclass
class SpawnExhausted:
    """Placement search ran dry; the spawn was forced onto the corner tile."""
    zone: str
    archetype: str
    tile: tuple[int, int]


@dataclass
class SnapshotSkipped:
    """A saved snapshot named an archetype that no longer exists."""
    zone: str
    archetype: str


# ═══════════════════════════════════════════════════════════════════
#  Event Bus
# ═══════════════════════════════════════════════════════════════════

class EventBus:
    """Fire-and-forget event bus."""

    def __init__(self):
        self._queue: list[Any] = []
        self._subs: dict[str, list[Callable]] = defaultdict(list)
        self._stats: dict[str, int] = defaultdict(int)

    # ── Public API ───────────────────────────────────────────────────

    def emit(self, event) -> None:
        """Queue an event for processing on next ``drain()``."""
        self._queue.append(event)

    def subscribe(self, event_type: str, handler: Callable) -> None:
        """Register *handler* to receive events of *event_type*.

        *event_type* is the class name, e.g. ``"ZoneLoaded"``.
        """
        self._subs[event_type].append(handler)

    def drain(self) -> int:
        """Process all queued events.  Returns number processed.

        Handlers may emit new events — those are processed in the
        same drain pass (breadth-first).
        """
        processed = 0
        safety = 1000  # prevent infinite loops
        while self._queue and safety > 0:
            batch = self._queue[:]
            self._queue.clear()
            for event in batch:
                name = type(event).__name__
                self._stats[name] += 1
                for handler in self._subs.get(name, []):
                    try:
                        handler(event)
                    except Exception as exc:
                        print(f"[EVENT] handler error for {name}: {exc}")
                        traceback.print_exc()
            processed += len(batch)
            safety -= 1
        return processed

    def pending(self, event_type: str | None = None) -> list[Any]:
        """Queued (not yet drained) events, optionally filtered by type."""
        if event_type is None:
            return list(self._queue)
        return [e for e in self._queue if type(e).__name__ == event_type]

    def clear(self) -> None:
        """Discard all pending events."""
        self._queue.clear()

    def stats(self) -> dict[str, int]:
        """Return cumulative event counts by type."""
        return dict(self._stats)

    def pending_count(self) -> int:
        """Number of events waiting to be drained."""
        return len(self._queue)

    def __repr__(self) -> str:
        return f"EventBus(pending={len(self._queue)}, subs={len(self._subs)})"
