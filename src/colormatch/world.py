import random

from esper import World

from colormatch.components.game_state import AppMode, GameState
from colormatch.events.bus import EventBus


def create_world(
    event_bus: EventBus,
    initial_mode: AppMode = AppMode.MENU,
    *,
    rng: random.Random | None = None,
) -> World:
    world = World()
    setattr(world, "random", rng or random.Random())

    # Register the global game state resource.
    state_entity = world.create_entity()
    world.add_component(state_entity, GameState(mode=initial_mode))
    return world
