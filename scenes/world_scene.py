"""
scenes/world_scene.py — Top-down zone explorer

Renders the resident zone's tile grid and its creatures.  Arrow keys /
WASD step one tile (blocked tiles refuse the step); walking onto an
edge with an exit carries you into the next zone.

    Tab   toggle the zone list
    X     cull a creature next to you (marks its spawn slot cleared)
    F5    save to saves/world.json
    F9    load saves/world.json
    F6    reload data/tuning.toml (zones generated afterwards use it)
"""

from __future__ import annotations
import pygame
from core import tuning
from core.app import App, Scene
from core.constants import TILE_SIZE
from core.events import EventBus
from core.save import get_save_file, save_world
from components import Camera, Creature, Health, Player, Position
from logic.entity_factory import kill_entity
from scenes.world_draw import draw_entities, draw_hud, draw_tiles, draw_zone_list
from scenes.zone_manager import ZoneController

_MOVES = {
    pygame.K_UP: (0, -1), pygame.K_w: (0, -1),
    pygame.K_DOWN: (0, 1), pygame.K_s: (0, 1),
    pygame.K_LEFT: (-1, 0), pygame.K_a: (-1, 0),
    pygame.K_RIGHT: (1, 0), pygame.K_d: (1, 0),
}


class WorldScene(Scene):
    def __init__(self, controller: ZoneController, bus: EventBus, player: int):
        self.controller = controller
        self.graph = controller.graph
        self.bus = bus
        self.player = player
        self.show_zones = False
        self.message = ""
        self._message_time = 0.0

    def on_enter(self, app: App):
        if app.world.res(Camera) is None:
            app.world.set_res(Camera())
        self.bus.subscribe("ZoneTransitionComplete", self._on_transition)

    def _on_transition(self, ev):
        self._say(f"Entered {self.graph.get(ev.current).name}")

    def _say(self, text: str):
        self.message = text
        self._message_time = 2.5

    # ── input ────────────────────────────────────────────────────────

    def handle_event(self, event: pygame.event.Event, app: App):
        if event.type != pygame.KEYDOWN:
            return
        if event.key in _MOVES:
            self._step(app, *_MOVES[event.key])
        elif event.key == pygame.K_TAB:
            self.show_zones = not self.show_zones
        elif event.key == pygame.K_x:
            self._cull_adjacent(app)
        elif event.key == pygame.K_F5:
            self._save(app)
        elif event.key == pygame.K_F9:
            self._load(app)
        elif event.key == pygame.K_F6:
            tuning.reload()
            self._say("Tuning reloaded")

    def _step(self, app: App, dx: int, dy: int):
        pos = app.world.get(self.player, Position)
        grid = self.controller.grid
        if pos is None or grid is None:
            return
        tx, ty = int(pos.x) + dx, int(pos.y) + dy
        if not grid.is_walkable(tx, ty):
            return
        pos.x, pos.y = float(tx), float(ty)
        player = app.world.get(self.player, Player)
        if player:
            player.steps += 1
        self.controller.update(self.player)

    def _cull_adjacent(self, app: App):
        pos = app.world.get(self.player, Position)
        px, py = pos.tile
        for eid, cpos, hp, _ in app.world.query_zone(pos.zone, Position, Health, Creature):
            cx, cy = cpos.tile
            if max(abs(cx - px), abs(cy - py)) <= 1 and hp.alive:
                self.bus.emit(kill_entity(app.world, eid, self.player))
                self._say("Creature culled")
                return

    def _save(self, app: App):
        pos = app.world.get(self.player, Position)
        path = save_world(self.graph, get_save_file(),
                          resident=self.controller.checkpoint(),
                          traveler=(pos.x, pos.y))
        self._say(f"Saved to {path}")

    def _load(self, app: App):
        if self.controller.load_save(self.player, get_save_file()):
            self._say("Save loaded")
        else:
            self._say("No save found")

    # ── update ───────────────────────────────────────────────────────

    def update(self, dt: float, app: App):
        self.bus.drain()
        app.world.purge()

        if self._message_time > 0:
            self._message_time -= dt
            if self._message_time <= 0:
                self.message = ""

        pos = app.world.get(self.player, Position)
        cam = app.world.res(Camera)
        if pos and cam:
            cam.x = pos.x + 0.5
            cam.y = pos.y + 0.5

    # ── draw ─────────────────────────────────────────────────────────

    def draw(self, surface: pygame.Surface, app: App):
        surface.fill((20, 20, 25))
        grid = self.controller.grid
        zone = self.graph.current_zone()
        if grid is None or zone is None:
            return
        cam = app.world.res(Camera) or Camera()
        sw, sh = surface.get_size()

        ox = sw // 2 - int(cam.x * TILE_SIZE)
        oy = sh // 2 - int(cam.y * TILE_SIZE)

        start_col = max(0, -ox // TILE_SIZE)
        start_row = max(0, -oy // TILE_SIZE)
        end_col = min(grid.width, (sw - ox) // TILE_SIZE + 1)
        end_row = min(grid.height, (sh - oy) // TILE_SIZE + 1)

        draw_tiles(surface, grid, ox, oy, start_row, start_col, end_row, end_col)
        draw_entities(surface, app, ox, oy, zone.key)
        draw_hud(surface, app, self.graph, self.message)
        if self.show_zones:
            draw_zone_list(surface, app, self.graph)
