"""components.dev_log — Structured diagnostics log for the zone engine.

A ring-buffer resource that records degraded conditions and
transitions: spawn placements that fell back to the corner tile,
snapshots skipped on restore, spawn slots cleared by a kill, zone
entries.  The explorer's debug overlay and the tests read it.

Usage:
    log = world.res(DevLog)
    log.record(eid, "spawn", "placement exhausted", details={"tile": (5, 5)})

Each entry is a dict:
    {"t": float, "eid": int, "name": str, "cat": str,
     "msg": str, "details": dict | None}
"""

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass
class DevLog:
    """Ring-buffer of zone / spawn events."""

    entries: list[dict] = field(default_factory=list)
    max_entries: int = 500
    # If non-empty, only entries whose ``cat`` is in the set are kept.
    cat_filter: set[str] = field(default_factory=set)

    def record(self, eid: int, cat: str, msg: str, *,
               name: str = "", t: float = 0.0,
               details: dict | None = None) -> None:
        if self.cat_filter and cat not in self.cat_filter:
            return
        self.entries.append({
            "t": t,
            "eid": eid,
            "name": name,
            "cat": cat,
            "msg": msg,
            "details": details,
        })
        if len(self.entries) > self.max_entries:
            self.entries = self.entries[-self.max_entries:]

    def clear(self):
        self.entries.clear()

    def recent(self, n: int = 50) -> list[dict]:
        """Return the *n* most recent entries (newest last)."""
        return self.entries[-n:]

    def for_cat(self, cat: str, n: int = 50) -> list[dict]:
        """Return last *n* entries in a category."""
        return [e for e in self.entries if e["cat"] == cat][-n:]

    def matching(self, cat: str, msg: str) -> list[dict]:
        """Every entry in *cat* whose message starts with *msg*."""
        return [e for e in self.entries
                if e["cat"] == cat and e["msg"].startswith(msg)]
