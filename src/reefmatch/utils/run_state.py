from __future__ import annotations

from esper import World

from reefmatch.components.run_state import Phase, RunState
from reefmatch.events.bus import EVENT_PHASE_CHANGED, EventBus


def get_or_create_run_state(world: World) -> RunState:
    """Return the shared RunState component, creating it if absent."""
    existing = list(world.get_component(RunState))
    if existing:
        return existing[0][1]
    world.create_entity(RunState())
    return list(world.get_component(RunState))[0][1]


def set_phase(world: World, event_bus: EventBus, phase: Phase) -> None:
    """Update the run phase and emit a change event when it differs."""

    state = get_or_create_run_state(world)
    previous = state.phase
    if previous == phase:
        return
    state.phase = phase
    event_bus.emit(EVENT_PHASE_CHANGED, previous=previous, new=phase)
