from __future__ import annotations

from esper import World

from colormatch.components.game_state import AppMode, GameState
from colormatch.events.bus import EVENT_GAME_MODE_CHANGED, EventBus


def get_game_state(world: World) -> GameState | None:
    for _, state in world.get_component(GameState):
        return state
    return None


def set_app_mode(world: World, event_bus: EventBus, mode: AppMode) -> None:
    """Update the global app mode and emit a change event when it differs."""

    state = get_game_state(world)
    if state is None:
        world.create_entity(GameState(mode=mode))
        event_bus.emit(EVENT_GAME_MODE_CHANGED, previous_mode=None, new_mode=mode)
        return
    previous_mode = state.mode
    if previous_mode == mode:
        return
    state.mode = mode
    event_bus.emit(EVENT_GAME_MODE_CHANGED, previous_mode=previous_mode, new_mode=mode)
