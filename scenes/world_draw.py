"""scenes/world_draw.py — Rendering helpers for the zone explorer.

All pure-draw functions live here so that WorldScene.draw() stays thin.
Every function receives the data it needs as parameters.
"""

from __future__ import annotations
import pygame
from core.app import App
from core.constants import TILE_SIZE, TILE_COLORS
from core.tiles import TileGrid
from core.zone import EXIT_PRIORITY
from components import DevLog, Position, Sprite, Player, Health
from simulation.zone_graph import ZoneGraph


# ── Tiles ───────────────────────────────────────────────────────────

def draw_tiles(
    surface: pygame.Surface,
    grid: TileGrid,
    ox: int, oy: int,
    start_row: int, start_col: int,
    end_row: int, end_col: int,
):
    for row in range(start_row, end_row):
        for col in range(start_col, end_col):
            color = TILE_COLORS.get(grid.tiles[row][col], (255, 0, 255))
            rect = pygame.Rect(
                ox + col * TILE_SIZE,
                oy + row * TILE_SIZE,
                TILE_SIZE, TILE_SIZE,
            )
            pygame.draw.rect(surface, color, rect)


# ── Entities (glyphs + health bars) ────────────────────────────────

def draw_entities(surface: pygame.Surface, app: App, ox: int, oy: int, zone: str):
    entities = []
    for eid, pos, sprite in app.world.query(Position, Sprite):
        if pos.zone != zone:
            continue
        entities.append((sprite.layer, eid, pos, sprite))
    entities.sort(key=lambda e: e[0])

    for _, eid, pos, sprite in entities:
        sx = ox + int(pos.x * TILE_SIZE)
        sy = oy + int(pos.y * TILE_SIZE)
        app.draw_text(surface, sprite.char, sx + 3, sy - 2,
                      color=sprite.color, font=app.font_lg)

        # Health bar for anything hurt
        if not app.world.has(eid, Player) and app.world.has(eid, Health):
            hp = app.world.get(eid, Health)
            if hp.current < hp.maximum:
                bar_w = TILE_SIZE - 4
                ratio = max(0.0, hp.current / hp.maximum)
                color = (50, 200, 50) if ratio > 0.5 else (220, 50, 50)
                pygame.draw.rect(surface, (40, 40, 40), (sx + 2, sy - 4, bar_w, 3))
                pygame.draw.rect(surface, color, (sx + 2, sy - 4, max(1, int(bar_w * ratio)), 3))


# ── HUD ────────────────────────────────────────────────────────────

def draw_hud(surface: pygame.Surface, app: App, graph: ZoneGraph, message: str = ""):
    zone = graph.current_zone()
    if zone is None:
        return
    y = 8
    app.draw_text_bg(surface, f"{zone.name}  [{zone.biome.value}]", 8, y,
                     color=(240, 220, 160), font=app.font_lg)
    y += 24
    merchant = "merchant here" if zone.has_merchant else "no merchant"
    app.draw_text_bg(surface, f"danger {zone.danger_level:.1f}  loot x{zone.loot_multiplier:.1f}  "
                     f"{merchant}", 8, y)
    y += 20
    for direction in EXIT_PRIORITY:
        hint = graph.exit_hint(direction)
        if hint:
            app.draw_text_bg(surface, hint, 8, y, color=(160, 200, 240), font=app.font_sm)
            y += 15

    res = app.world.query_one(Player, Position)
    if res:
        _, _, pos = res
        sh = surface.get_height()
        app.draw_text_bg(surface, f"({int(pos.x)}, {int(pos.y)})", 8, sh - 22,
                         font=app.font_sm)
    if message:
        sw, sh = surface.get_size()
        app.draw_text_bg(surface, message, sw // 2 - 4 * len(message), sh - 40)


def draw_zone_list(surface: pygame.Surface, app: App, graph: ZoneGraph):
    """Debug overlay: every zone (visited ones highlighted), then the latest log lines."""
    sw, _ = surface.get_size()
    x = sw - 300
    y = 8
    app.draw_text_bg(surface, f"Zones ({len(graph)})", x, y)
    y += 18
    for zone in graph.all_zones():
        mark = "*" if zone.visited else " "
        if zone.key == graph.active_key:
            color = (255, 255, 120)
        elif zone.visited:
            color = (200, 200, 200)
        else:
            color = (120, 120, 120)
        saved = len(zone.saved_creatures)
        app.draw_text_bg(surface, f"{mark} {zone.key:<20} d{zone.danger_level:.1f} s{saved}",
                         x, y, color=color, font=app.font_sm)
        y += 13

    log = app.world.res(DevLog)
    if log is None:
        return
    y += 8
    for entry in log.recent(8):
        details = entry["details"] or {}
        where = details.get("zone") or details.get("to", "")
        app.draw_text_bg(surface, f"[{entry['cat']}] {entry['msg']} {where}",
                         x, y, color=(150, 180, 150), font=app.font_sm)
        y += 13
