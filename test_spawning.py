"""test_spawning.py — Headless checks for the spawn allocator.

Fresh plans, tile search fallbacks, restores from snapshots, and
merchant placement, all against data/creatures.toml.

Run:  python test_spawning.py
"""
from __future__ import annotations
import random, sys, traceback
from pathlib import Path

from core import tuning
from core.ecs import World
from core.events import EventBus
from core.zone import Biome, CharacterSnapshot, CreatureSnapshot, ZoneRecord
from components import Character, Creature, DevLog, Health, Position, SpawnInfo
from logic.creatures import CreatureRegistry, weighted_choice
from logic.spawning import SpawnAllocator, ring, spawn_rect
from logic.terrain import generate_terrain

DATA = Path(__file__).resolve().parent / "data"

_passed = 0
_failed = 0


def ok(label: str):
    global _passed
    _passed += 1
    print(f"  [PASS] {label}")


def fail(label: str, detail: str = ""):
    global _failed
    _failed += 1
    print(f"  [FAIL] {label}")
    if detail:
        for line in detail.strip().splitlines():
            print(f"         {line}")


def check(cond: bool, label: str, detail: str = ""):
    if cond:
        ok(label)
    else:
        fail(label, detail)
    assert cond, f"{label}: {detail}"


def _registry() -> CreatureRegistry:
    return CreatureRegistry.from_file(DATA / "creatures.toml")


def _wasteland(key: str = "start", **kw) -> ZoneRecord:
    return ZoneRecord(key, key.title(), Biome.WASTELAND, **kw)


# ════════════════════════════════════════════════════════════════════

def test_search_geometry():
    print("\n=== 1: Search geometry ===")
    tuning.reset()
    check(spawn_rect(50, 50) == (5, 5, 45, 45), "margin keeps spawns off the boundary")
    check(spawn_rect(3, 3) == (1, 1, 2, 2), "margin shrinks on a tiny zone")
    check(spawn_rect(1, 1) == (0, 0, 1, 1), "a 1x1 zone still has one tile")

    tiles = list(ring(10, 10, 1))
    check(len(tiles) == 8, "radius-1 ring has 8 tiles")
    check(tiles[0] == (9, 9) and tiles[-1] == (11, 11), "ring walks rows top to bottom",
          repr(tiles))
    check(len(list(ring(0, 0, 3))) == 24, "radius-3 ring has 24 tiles")

    rng = random.Random(1)
    check(weighted_choice([], rng) is None, "empty table picks nothing")
    check(weighted_choice([("raider", 5.0)], rng) == "raider", "single entry always wins")


def test_fresh_plan():
    print("\n=== 2: Fresh plan ===")
    tuning.reset()
    alloc = SpawnAllocator(_registry())
    zone = _wasteland(enemy_count=4)
    grid = generate_terrain(zone.biome, zone.seed, zone.width, zone.height)

    plan = alloc.plan_fresh(zone, grid)
    again = alloc.plan_fresh(zone, grid)
    check(plan == again, "same zone, same plan")

    hostiles = [p for p in plan if p.role == "hostile"]
    passives = [p for p in plan if p.role == "passive"]
    check(len(hostiles) == 4, f"one hostile per enemy slot (got {len(hostiles)})")
    check(2 <= len(passives) <= 4, f"passive count within [2, 4] (got {len(passives)})")
    check(not any(p.role == "character" for p in plan), "no merchant, no characters")

    tiles = [p.tile for p in plan]
    check(len(set(tiles)) == len(tiles), "no two spawns share a tile")
    min_x, min_y, max_x, max_y = spawn_rect(zone.width, zone.height)
    check(all(min_x <= x < max_x and min_y <= y < max_y for x, y in tiles),
          "every spawn inside the margin")
    check(all(grid.is_walkable(*t) for t in tiles), "every spawn on a walkable tile")

    table = alloc.registry.biome(Biome.WASTELAND)
    allowed = {k for k, _ in table.hostile + table.special}
    check(all(p.archetype in allowed for p in hostiles), "hostiles come from the biome table")

    zone.cleared_slots = {p.tile for p in hostiles}
    replanned = alloc.plan_fresh(zone, grid)
    check(not any(p.tile in zone.cleared_slots for p in replanned), "cleared slots avoided")
    check(len([p for p in replanned if p.role == "hostile"]) == 4,
          "cleared slots do not reduce the count")


def test_special_chance():
    print("\n=== 3: Special archetypes ===")
    tuning.reset()
    alloc = SpawnAllocator(_registry())
    check(abs(alloc.special_chance(1.0) - 0.05) < 1e-9, "5% at danger 1")
    check(alloc.special_chance(5.0) == 0.15, "capped at 15%")
    check(alloc.special_chance(0.0) == 0.0, "none at danger 0")

    zone = ZoneRecord("the_epicenter", "The Epicenter", Biome.WASTELAND,
                      width=70, height=70, danger_level=5.0, enemy_count=60)
    plan = alloc.plan_fresh(zone)
    special = {k for k, _ in alloc.registry.biome(Biome.WASTELAND).special}
    check(any(p.archetype in special for p in plan), "high danger rolls specials")


def test_exhaustion():
    print("\n=== 4: Exhausted search ===")
    tuning.reset()
    bus = EventBus()
    log = DevLog()
    alloc = SpawnAllocator(_registry(), bus=bus, log=log)
    world = World()

    zone = _wasteland("closet", width=3, height=3, enemy_count=3)
    result = alloc.populate(world, zone)
    check(len(result.creatures) >= 3, "every slot still spawns")
    corner = [p for p in result.exhausted if p.role == "hostile"]
    check(len(corner) == 2, f"second and third hostile forced (got {len(corner)})")
    check(all(p.tile == (1, 1) for p in result.exhausted), "forced onto the rect corner")
    check(len(bus.pending("SpawnExhausted")) == len(result.exhausted), "SpawnExhausted emitted")
    check(len(log.matching("spawn", "placement exhausted")) == len(result.exhausted),
          "exhaustion logged")
    check(all(e["details"]["zone"] == "closet" for e in log.for_cat("spawn")), "log entries name the zone")

    full = _wasteland("walled_in", width=3, height=3, enemy_count=1)
    full.cleared_slots = {(1, 1)}
    plan = alloc.plan_fresh(full)
    first = [p for p in plan if p.role == "hostile"][0]
    check(first.exhausted and first.tile == (1, 1), "fully cleared zone falls back to the corner")


def test_populate_fresh():
    print("\n=== 5: Fresh population ===")
    tuning.reset()
    alloc = SpawnAllocator(_registry())
    world = World()
    zone = _wasteland(enemy_count=4, danger_level=2.0)

    result = alloc.populate(world, zone)
    check(result.fresh and not result.restored, "first visit is fresh")
    check(len(world.zone_entities("start")) == len(result.creatures), "creatures registered in zone")

    eid = result.creatures[0]
    cr = world.get(eid, Creature)
    hp = world.get(eid, Health)
    base = alloc.registry.get(cr.archetype).health
    check(hp.maximum == base * 2.0 and hp.current == hp.maximum, "health scaled by danger")
    info = world.get(eid, SpawnInfo)
    pos = world.get(eid, Position)
    check(info.fresh and info.tile == pos.tile and info.zone == "start", "spawn slot recorded")

    none = alloc.populate(World(), _wasteland(enemy_count=4), allow_fresh=False)
    check(not none.creatures and not none.fresh, "fresh placement can be withheld")


def test_restore():
    print("\n=== 6: Restore from snapshots ===")
    tuning.reset()
    bus = EventBus()
    log = DevLog()
    alloc = SpawnAllocator(_registry(), bus=bus, log=log)
    world = World()
    zone = _wasteland(enemy_count=4, danger_level=1.5)
    zone.save_creatures([
        CreatureSnapshot("raider", 12.0, 14.0, 7.5, provoked=True, state="chase"),
        CreatureSnapshot("dodo", 5.0, 5.0, 3.0),
    ])
    zone.save_characters([CharacterSnapshot("wanderer", "Old Pete", 20.0, 21.0)])

    result = alloc.populate(world, zone)
    check(result.restored and not result.fresh, "snapshots restored, nothing fresh")
    check(len(result.creatures) == 1 and result.skipped == ["dodo"], "unknown archetype skipped")
    check(zone.saved_creatures == [] and zone.saved_characters == [], "snapshots consumed")
    check(len(bus.pending("SnapshotSkipped")) == 1, "SnapshotSkipped emitted")
    check(len(log.matching("spawn", "snapshot skipped")) == 1, "skip logged")

    eid = result.creatures[0]
    pos = world.get(eid, Position)
    hp = world.get(eid, Health)
    cr = world.get(eid, Creature)
    check((pos.x, pos.y) == (12.0, 14.0), "restored where it was left")
    check(hp.current == 7.5 and hp.maximum == 40 * 1.5, "saved health, danger-scaled maximum")
    check(cr.provoked and not world.get(eid, SpawnInfo).fresh, "provoked flag kept, not fresh")

    ch = world.get(result.characters[0], Character)
    check(ch.name == "Old Pete", "character restored by name")


def test_merchants():
    print("\n=== 7: Merchant placement ===")
    tuning.reset()
    alloc = SpawnAllocator(_registry())
    zone = ZoneRecord("rusthollow", "Rusthollow", Biome.SETTLEMENT,
                      width=45, height=45, enemy_count=0, has_merchant=True)
    grid = generate_terrain(zone.biome, zone.seed, zone.width, zone.height)
    chars = {p.archetype: p for p in alloc.plan_fresh(zone, grid) if p.role == "character"}

    check(set(chars) == {"general_merchant", "weapons_merchant"}, "settlement has both traders")
    gx, gy = chars["general_merchant"].tile
    wx, wy = chars["weapons_merchant"].tile
    check(max(abs(gx - 22), abs(gy - 19)) <= 1, "trader north of the crossroads", repr((gx, gy)))
    check(max(abs(wx - 27), abs(wy - 22)) <= 1, "arms dealer east of the crossroads", repr((wx, wy)))
    check(chars["weapons_merchant"].name == "Arms Dealer", "character named from its archetype")

    ruins = ZoneRecord("syndicate_ruins", "Ruins", Biome.RUINS, has_merchant=True)
    roles = [(p.role, p.archetype) for p in alloc.plan_fresh(ruins) if p.role == "character"]
    check(roles == [("character", "wanderer")], "ruins get a wanderer")

    cave = ZoneRecord("deep_cave", "Cave", Biome.CAVE, has_merchant=True)
    p = [p for p in alloc.plan_fresh(cave) if p.role == "character"][0]
    check(p.archetype == "general_merchant", "elsewhere a general merchant")
    check(7 <= p.tile[0] <= 42 and 7 <= p.tile[1] <= 42, "placed away from the edges")


def test_registry():
    print("\n=== 8: Creature registry ===")
    reg = _registry()
    check("raider" in reg and "wanderer" in reg, "archetypes and characters loaded")
    check(reg.max_health("raider", 0.0) == 40 * 0.1, "danger floored at 0.1x")
    check(reg.biome(Biome.FOREST).passive_count == (4, 7), "passive range read")
    try:
        CreatureRegistry.from_dict({"biomes": {"cave": {"hostile": {"ghost": 1}}}})
        fail("table naming an unknown archetype rejected")
        assert False
    except ValueError:
        ok("table naming an unknown archetype rejected")


if __name__ == "__main__":
    sections = [
        ("Search Geometry", test_search_geometry),
        ("Fresh Plan", test_fresh_plan),
        ("Special Archetypes", test_special_chance),
        ("Exhausted Search", test_exhaustion),
        ("Fresh Population", test_populate_fresh),
        ("Restore", test_restore),
        ("Merchants", test_merchants),
        ("Registry", test_registry),
    ]

    for name, fn in sections:
        try:
            fn()
        except Exception:
            _failed += 1
            print(f"\n  [CRASH] {name}: unhandled exception")
            traceback.print_exc()

    total = _passed + _failed
    print(f"\n{'=' * 60}")
    print(f"  Spawning Tests: {_passed} passed, {_failed} failed  "
          f"(total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
