"""
main.py — Bootstrap the zone explorer

1. Load tuning constants
2. Build the zone graph from data/zones.toml (malformed data stops here)
3. Load creature archetypes
4. Create the traveler and enter the start zone
5. Push the explorer scene and run
"""

import sys
from pathlib import Path

from core import tuning
from core.app import App
from core.events import EventBus
from components import DevLog, Identity, Player, Position, Sprite
from logic.creatures import CreatureRegistry
from scenes.world_scene import WorldScene
from scenes.zone_manager import ZoneController
from simulation.zone_graph import ZoneConfigError, ZoneGraph

DATA = Path(__file__).resolve().parent / "data"


def main():
    tuning.load(DATA / "tuning.toml")

    bus = EventBus()
    try:
        graph = ZoneGraph.from_toml(DATA / "zones.toml", bus=bus)
    except ZoneConfigError as ex:
        print(f"[ZONE] world definition rejected: {ex}")
        sys.exit(1)

    registry = CreatureRegistry.from_file(DATA / "creatures.toml")

    app = App(title="Exclusion Zone", width=960, height=640)
    log = DevLog()
    app.world.set_res(log)
    app.world.set_res(registry)
    app.world.set_res(graph)

    controller = ZoneController(graph, app.world, registry, bus=bus, log=log)

    player = app.world.spawn()
    app.world.add(player, Position())
    app.world.add(player, Identity(name="You", kind="player"))
    app.world.add(player, Sprite(char="@", color=(255, 255, 255), layer=5))
    app.world.add(player, Player())
    controller.enter(graph.start_key, player)

    app.push_scene(WorldScene(controller, bus, player))
    app.run()


if __name__ == "__main__":
    main()
